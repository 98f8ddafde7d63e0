"""
Cliente CQL compartido por todas las tablas.

Envuelve una única sesión del driver de Cassandra y traduce sus excepciones
al conjunto cerrado de ResultCode. Ningún método lanza excepciones hacia
quien lo llama.
"""
import logging

from cassandra import (
    FunctionFailure,
    InvalidRequest,
    OperationTimedOut,
    ReadFailure,
    ReadTimeout,
    Unavailable,
    WriteFailure,
    WriteTimeout,
)
from cassandra.cluster import Cluster, NoHostAvailable
from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_exponential

from schoolhub.cql.result import OK, CqlResult, ResultCode

logger = logging.getLogger(__name__)

# El orden importa: se usa el primer match por isinstance
_ERROR_CODES = (
    (InvalidRequest, ResultCode.INVALID_REQUEST),
    (NoHostAvailable, ResultCode.CONNECTION_ERROR),
    (ReadFailure, ResultCode.RESOURCE_ERROR),
    (WriteFailure, ResultCode.RESOURCE_ERROR),
    (FunctionFailure, ResultCode.RESOURCE_ERROR),
    (Unavailable, ResultCode.UNAVAILABLE),
    (ReadTimeout, ResultCode.TIMEOUT),
    (WriteTimeout, ResultCode.TIMEOUT),
    (OperationTimedOut, ResultCode.TIMEOUT),
)


def result_from_exception(exc: BaseException) -> CqlResult:
    """Traduce una excepción del driver a un CqlResult."""
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return CqlResult(code, str(exc))
    return CqlResult(ResultCode.UNKNOWN_ERROR, str(exc) or exc.__class__.__name__)


class CqlClient:
    def __init__(self, hosts=None, port=9042, retry_attempts=1, retry_max_wait=2.0,
                 session=None):
        self.hosts = list(hosts or ["localhost"])
        self.port = port
        self.retry_attempts = max(1, int(retry_attempts))
        self.retry_max_wait = retry_max_wait
        self.session = session
        self._cluster = None

    # ==========================================
    # CONEXIÓN
    # ==========================================

    def connect(self) -> CqlResult:
        logger.info("Connecting to Cassandra cluster at %s:%s", ",".join(self.hosts), self.port)
        try:
            self._cluster = Cluster(self.hosts, port=self.port)
            self.session = self._cluster.connect()
        except Exception as e:
            self._cluster = None
            self.session = None
            logger.error("Cassandra connection failed: %s", e)
            return CqlResult(ResultCode.CONNECTION_ERROR, str(e))
        return OK

    def shutdown(self):
        if self.session is not None:
            self.session.shutdown()
            self.session = None
        if self._cluster is not None:
            self._cluster.shutdown()
            self._cluster = None

    @property
    def connected(self) -> bool:
        return self.session is not None

    # ==========================================
    # EJECUCIÓN
    # ==========================================

    def execute(self, statement: str) -> CqlResult:
        """Ejecuta una sentencia suelta (DDL)."""
        result, _ = self._with_retry(self._execute, statement, None)
        return result

    def execute_prepared(self, prepared, params=()):
        """Ejecuta una sentencia preparada; devuelve (CqlResult, ResultSet | None)."""
        return self._with_retry(self._execute, prepared, tuple(params))

    def prepare(self, query: str):
        if self.session is None:
            return CqlResult(ResultCode.CONNECTION_ERROR, "Session is not connected"), None
        try:
            prepared = self.session.prepare(query)
        except Exception as e:
            failure = result_from_exception(e)
            message = f"Failed to prepare statement ({query}): {failure.message}"
            return CqlResult(failure.code, message), None
        return OK, prepared

    def select_rows(self, prepared, params, on_row_count, on_row) -> CqlResult:
        """
        Ejecuta la sentencia y pasa cada fila a on_row.
        Cero filas es NOT_FOUND; on_row_count se llama una sola vez antes
        de la primera fila.
        """
        result, result_set = self.execute_prepared(prepared, params)
        if not result.ok:
            return result
        try:
            rows = list(result_set) if result_set is not None else []
            if not rows:
                return CqlResult(ResultCode.NOT_FOUND, "No entries found with this data!")
            on_row_count(len(rows))
            for row in rows:
                row_result = on_row(row)
                if not row_result.ok:
                    return row_result
        except Exception as e:
            return CqlResult(ResultCode.UNKNOWN_ERROR,
                             f"Exception while processing selected rows: {e}")
        return OK

    @staticmethod
    def was_applied(result_set) -> CqlResult:
        """Lee la columna [applied] de una sentencia condicional (LWT)."""
        if result_set is None:
            return CqlResult(ResultCode.UNKNOWN_ERROR, "Failed to get column from row")
        try:
            applied = result_set.was_applied
        except Exception as e:
            return CqlResult(ResultCode.UNKNOWN_ERROR, f"Failed to get column from row: {e}")
        if not isinstance(applied, bool):
            return CqlResult(ResultCode.UNKNOWN_ERROR, "Failed to get value from column")
        if not applied:
            return CqlResult(ResultCode.NOT_APPLIED, "Command not applied")
        return OK

    # ==========================================
    # INTERNOS
    # ==========================================

    def _execute(self, statement, params):
        if self.session is None:
            return CqlResult(ResultCode.CONNECTION_ERROR, "Session is not connected"), None
        try:
            if params is None:
                future = self.session.execute_async(statement)
            else:
                future = self.session.execute_async(statement, params)
            return OK, future.result()
        except Exception as e:
            return result_from_exception(e), None

    def _with_retry(self, func, *args):
        if self.retry_attempts <= 1:
            return func(*args)
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=self.retry_max_wait),
            retry=retry_if_result(lambda outcome: outcome[0].transient),
            before_sleep=self._log_retry,
            retry_error_callback=lambda state: state.outcome.result(),
        )
        return retrying(func, *args)

    @staticmethod
    def _log_retry(retry_state):
        result, _ = retry_state.outcome.result()
        logger.warning("Transient Cassandra error (attempt %s): %s",
                       retry_state.attempt_number, result)
