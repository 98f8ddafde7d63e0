"""
Modelo de resultados de la capa de acceso a Cassandra.

Toda operación de acceso devuelve un CqlResult (código + mensaje); las
excepciones del driver nunca cruzan esta frontera.
"""
from dataclasses import dataclass
from enum import IntEnum


class ResultCode(IntEnum):
    OK = 0
    INVALID_REQUEST = 1
    NOT_FOUND = 2
    CONNECTION_ERROR = 3
    RESOURCE_ERROR = 4
    UNKNOWN_ERROR = 5
    UNAVAILABLE = 6
    TIMEOUT = 7
    NOT_APPLIED = 8


# Códigos que pueden desaparecer reintentando la misma sentencia
TRANSIENT_CODES = frozenset({
    ResultCode.RESOURCE_ERROR,
    ResultCode.TIMEOUT,
    ResultCode.UNAVAILABLE,
})


@dataclass(frozen=True)
class CqlResult:
    code: ResultCode = ResultCode.OK
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == ResultCode.OK

    @property
    def transient(self) -> bool:
        return self.code in TRANSIENT_CODES

    def __str__(self):
        if self.message:
            return f"{self.code.name}: {self.message}"
        return self.code.name


OK = CqlResult()

BIND_ERROR = "Failed to bind values"


def bind_error(detail) -> CqlResult:
    """Valores de entrada que no se pueden codificar; la sentencia nunca se envía."""
    return CqlResult(ResultCode.INVALID_REQUEST, f"{BIND_ERROR}: {detail}")


def is_bind_error(result: CqlResult) -> bool:
    return result.code == ResultCode.INVALID_REQUEST and result.message.startswith(BIND_ERROR)
