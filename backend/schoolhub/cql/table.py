"""
Acceso genérico a tablas de Cassandra.

Una CqlTable se parametriza con un TableSpec (keyspace, columnas con su
codec, clave de partición/agrupamiento y variantes de SELECT/DELETE) y
prepara una sola vez su juego de sentencias. Todas las escrituras son
condicionales (IF [NOT] EXISTS) salvo los borrados por clave parcial.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from schoolhub.cql.codecs import INT, UUID_CODEC, Codec, CodecError
from schoolhub.cql.result import OK, CqlResult, ResultCode, bind_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    name: str
    codec: Codec
    # Nombre del atributo en el objeto de dominio, si difiere de la columna
    attr: Optional[str] = None

    @property
    def attribute(self) -> str:
        return self.attr or self.name


@dataclass
class TableSpec:
    keyspace: str
    name: str
    columns: Tuple[Column, ...]
    partition_key: Tuple[str, ...]
    clustering_key: Tuple[str, ...] = ()
    clustering_order: Optional[str] = None
    factory: Callable = dict
    # nombre -> columnas del WHERE; () selecciona toda la tabla
    selects: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    # nombre -> columnas del WHERE de un DELETE incondicional
    deletes: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    insert_ttl: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.keyspace}.{self.name}"

    @property
    def primary_key(self) -> Tuple[str, ...]:
        return self.partition_key + self.clustering_key

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def updatable(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns if c.name not in self.primary_key)

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(f"{self.full_name} has no column {name}")

    def needs_filtering(self, where: Tuple[str, ...]) -> bool:
        """Un WHERE que no empieza por la partición completa necesita ALLOW FILTERING."""
        if not where:
            return False
        if set(where[:len(self.partition_key)]) != set(self.partition_key):
            return True
        rest = where[len(self.partition_key):]
        return tuple(rest) != self.clustering_key[:len(rest)]


class CqlTable:
    def __init__(self, client, spec: TableSpec, replication_factor: int = 3):
        self.client = client
        self.spec = spec
        self.replication_factor = replication_factor
        self._statements = {}
        self._configured = False

    # ==========================================
    # CQL
    # ==========================================

    def _where(self, columns):
        return " AND ".join(f"{c} = ?" for c in columns)

    def keyspace_cql(self):
        return (f"CREATE KEYSPACE IF NOT EXISTS {self.spec.keyspace} WITH replication = "
                f"{{'class': 'SimpleStrategy', 'replication_factor': {self.replication_factor}}}")

    def table_cql(self):
        spec = self.spec
        columns = ", ".join(f"{c.name} {c.codec.cql_type}" for c in spec.columns)
        key = f"({', '.join(spec.partition_key)})"
        if spec.clustering_key:
            key = f"{key}, {', '.join(spec.clustering_key)}"
        cql = f"CREATE TABLE IF NOT EXISTS {spec.full_name} ({columns}, PRIMARY KEY ({key}))"
        if spec.clustering_key and spec.clustering_order:
            order = ", ".join(f"{c} {spec.clustering_order}" for c in spec.clustering_key)
            cql += f" WITH CLUSTERING ORDER BY ({order})"
        return cql

    def insert_cql(self):
        spec = self.spec
        marks = ", ".join("?" for _ in spec.columns)
        cql = f"INSERT INTO {spec.full_name} ({', '.join(spec.column_names)}) VALUES ({marks}) IF NOT EXISTS"
        if spec.insert_ttl:
            cql += " USING TTL ?"
        return cql

    def select_cql(self, where):
        cql = f"SELECT {', '.join(self.spec.column_names)} FROM {self.spec.full_name}"
        if where:
            cql += f" WHERE {self._where(where)}"
        if self.spec.needs_filtering(where):
            cql += " ALLOW FILTERING"
        return cql

    def update_cql(self, columns):
        assignments = ", ".join(f"{c} = ?" for c in columns)
        return (f"UPDATE {self.spec.full_name} SET {assignments} "
                f"WHERE {self._where(self.spec.primary_key)} IF EXISTS")

    def delete_cql(self, where=None, conditional=True):
        where = where if where is not None else self.spec.primary_key
        cql = f"DELETE FROM {self.spec.full_name} WHERE {self._where(where)}"
        if conditional:
            cql += " IF EXISTS"
        return cql

    # ==========================================
    # CONFIGURACIÓN
    # ==========================================

    def configure(self, create_schema: bool) -> CqlResult:
        if create_schema:
            for statement in (self.keyspace_cql(), self.table_cql()):
                result = self.client.execute(statement)
                if not result.ok:
                    logger.error("Schema bootstrap failed for %s: %s", self.spec.full_name, result)
                    return result

        statements = {
            "insert": self.insert_cql(),
            "select": self.select_cql(self.spec.primary_key),
            "delete": self.delete_cql(),
        }
        if self.spec.updatable:
            statements[("update",) + self.spec.updatable] = self.update_cql(self.spec.updatable)
        for name, where in self.spec.selects.items():
            statements[("select", name)] = self.select_cql(where)
        for name, where in self.spec.deletes.items():
            statements[("delete", name)] = self.delete_cql(where, conditional=False)

        for name, query in statements.items():
            result, prepared = self.client.prepare(query)
            if not result.ok:
                logger.error("Could not prepare %s: %s", self.spec.full_name, result)
                return result
            self._statements[name] = prepared

        self._configured = True
        return OK

    def _not_configured(self):
        return CqlResult(ResultCode.UNKNOWN_ERROR, f"Table {self.spec.full_name} is not configured")

    # ==========================================
    # MAPEO
    # ==========================================

    def _values(self, record):
        try:
            if isinstance(record, dict):
                raw = [record[c.attribute] for c in self.spec.columns]
            else:
                raw = [getattr(record, c.attribute) for c in self.spec.columns]
        except (AttributeError, KeyError) as e:
            raise CodecError(f"cannot bind {self.spec.full_name} record: {e}") from e
        return [self._encode_value(c, v) for c, v in zip(self.spec.columns, raw)]

    def _encode(self, names, values):
        if len(names) != len(values):
            raise CodecError(f"expected {len(names)} values, got {len(values)}")
        try:
            columns = [self.spec.column(n) for n in names]
        except KeyError as e:
            raise CodecError(str(e)) from e
        return [self._encode_value(c, v) for c, v in zip(columns, values)]

    @staticmethod
    def _encode_value(column, value):
        try:
            return column.codec.encode(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise CodecError(f"column {column.name}: {e}") from e

    def _column_name(self, name):
        for c in self.spec.columns:
            if name in (c.name, c.attribute):
                return c.name
        return name

    def map_row(self, row):
        """Fila cruda -> (CqlResult, objeto); lee las columnas por posición."""
        values = {}
        for index, column in enumerate(self.spec.columns):
            try:
                raw = row[index]
            except (IndexError, KeyError, TypeError):
                return CqlResult(ResultCode.UNKNOWN_ERROR,
                                 f"Failed to get column from row: {column.name}"), None
            try:
                values[column.attribute] = column.codec.decode(raw)
            except CodecError:
                return CqlResult(ResultCode.UNKNOWN_ERROR,
                                 f"Failed to get value from column {column.name}"), None
        return OK, self.spec.factory(**values)

    def _collect(self, prepared, params):
        items = []

        def on_row_count(count):
            logger.debug("%s: %d row(s) selected", self.spec.full_name, count)

        def on_row(row):
            result, item = self.map_row(row)
            if result.ok:
                items.append(item)
            return result

        result = self.client.select_rows(prepared, params, on_row_count, on_row)
        return result, items

    def _execute_conditional(self, prepared, params):
        result, result_set = self.client.execute_prepared(prepared, params)
        if not result.ok:
            return result
        return self.client.was_applied(result_set)

    # ==========================================
    # OPERACIONES
    # ==========================================

    def create(self, record, ttl=None) -> CqlResult:
        if not self._configured:
            return self._not_configured()
        try:
            params = self._values(record)
        except CodecError as e:
            return bind_error(e)
        if self.spec.insert_ttl:
            params.append(int(ttl or 0))
        return self._execute_conditional(self._statements["insert"], params)

    def get(self, *key):
        if not self._configured:
            return self._not_configured(), None
        try:
            params = self._encode(self.spec.primary_key, key)
        except CodecError as e:
            return bind_error(e), None
        result, items = self._collect(self._statements["select"], params)
        if not result.ok:
            return result, None
        if not items:
            return CqlResult(ResultCode.NOT_FOUND, "No entries found with this data!"), None
        if len(items) > 1:
            return CqlResult(ResultCode.UNKNOWN_ERROR,
                             "Data integrity error: more than one row for a unique key"), None
        return OK, items[0]

    def get_many(self, select_name, *params):
        """Listado por una variante de SELECT; NOT_FOUND se deja pasar al llamador."""
        if not self._configured:
            return self._not_configured(), []
        try:
            bound = self._encode(self.spec.selects[select_name], params)
        except CodecError as e:
            return bind_error(e), []
        result, items = self._collect(self._statements[("select", select_name)], bound)
        if not result.ok:
            return result, []
        return OK, items

    def update(self, key, **changes) -> CqlResult:
        """
        UPDATE ... IF EXISTS sobre columnas que no son clave.
        Cambiar una columna de la clave no se puede hacer acá: el llamador
        tiene que borrar e insertar.
        """
        if not self._configured:
            return self._not_configured()
        changes = {self._column_name(k): v for k, v in changes.items()}
        key_changes = [c for c in changes if c in self.spec.primary_key]
        if key_changes:
            return CqlResult(ResultCode.INVALID_REQUEST,
                             f"Cannot update key column(s) {', '.join(key_changes)}; "
                             "delete and insert instead")
        if not changes:
            return CqlResult(ResultCode.INVALID_REQUEST, "Nothing to update")

        columns = tuple(c for c in self.spec.updatable if c in changes)
        unknown = set(changes) - set(columns)
        if unknown:
            return CqlResult(ResultCode.INVALID_REQUEST,
                             f"Unknown column(s) {', '.join(sorted(unknown))}")

        try:
            params = self._encode(columns, [changes[c] for c in columns])
            params += self._encode(self.spec.primary_key, tuple(key))
        except CodecError as e:
            return bind_error(e)

        prepared = self._statements.get(("update",) + columns)
        if prepared is None:
            result, prepared = self.client.prepare(self.update_cql(columns))
            if not result.ok:
                return result
            self._statements[("update",) + columns] = prepared
        return self._execute_conditional(prepared, params)

    def delete(self, *key) -> CqlResult:
        if not self._configured:
            return self._not_configured()
        try:
            params = self._encode(self.spec.primary_key, key)
        except CodecError as e:
            return bind_error(e)
        return self._execute_conditional(self._statements["delete"], params)

    def delete_many(self, delete_name, *params) -> CqlResult:
        """Borrado por clave parcial; sin chequeo de [applied]."""
        if not self._configured:
            return self._not_configured()
        try:
            bound = self._encode(self.spec.deletes[delete_name], params)
        except CodecError as e:
            return bind_error(e)
        result, _ = self.client.execute_prepared(self._statements[("delete", delete_name)], bound)
        return result


class RelationTable(CqlTable):
    """
    Tabla índice (tenant, dueño, miembro). La última columna es el miembro;
    las anteriores forman la partición.
    """

    def __init__(self, client, spec: TableSpec, replication_factor: int = 3):
        super().__init__(client, spec, replication_factor)
        self.member = spec.clustering_key[-1]

    def link(self, *values) -> CqlResult:
        return self.create(dict(zip(self.spec.column_names, values)))

    def list_members(self, *partition):
        result, rows = self.get_many("members", *partition)
        if result.code == ResultCode.NOT_FOUND:
            return OK, []
        return result, [row[self.member] for row in rows]

    def list_owners(self, school_id, member_id):
        """Búsqueda inversa (ALLOW FILTERING); solo si el spec define 'owners'."""
        result, rows = self.get_many("owners", school_id, member_id)
        if result.code == ResultCode.NOT_FOUND:
            return OK, []
        owner = self.spec.partition_key[1]
        return result, [row[owner] for row in rows]

    def unlink(self, *values) -> CqlResult:
        return self.delete(*values)

    def unlink_all(self, *partition) -> CqlResult:
        return self.delete_many("members", *partition)


def relation_spec(keyspace, name, owner, member, extra_partition=(), owners=False):
    """Construye el TableSpec de una tabla índice (school, owner, [extra], member)."""
    columns = (Column("school", INT), Column(owner, UUID_CODEC))
    columns += tuple(Column(column, codec) for column, codec in extra_partition)
    columns += (Column(member, UUID_CODEC),)
    partition = ("school", owner) + tuple(n for n, _ in extra_partition)
    selects = {"members": partition}
    if owners:
        selects["owners"] = ("school", member)
    return TableSpec(
        keyspace=keyspace,
        name=name,
        columns=columns,
        partition_key=partition,
        clustering_key=(member,),
        selects=selects,
        deletes={"members": partition},
    )
