"""
Sesión en memoria que imita la parte del driver de Cassandra que usa
CqlClient: prepare, execute_async(...).result() y la columna [applied] de
las sentencias condicionales.

Solo entiende las sentencias que genera CqlTable. Los fallos se inyectan con
fail(), que lanza excepciones reales del driver.
"""
import re

from cassandra import InvalidRequest, WriteTimeout
from cassandra.policies import WriteType

CREATE_KEYSPACE = re.compile(r"^CREATE KEYSPACE IF NOT EXISTS (\w+) WITH .*$")
CREATE_TABLE = re.compile(
    r"^CREATE TABLE IF NOT EXISTS (\S+) \((.*), PRIMARY KEY \(\((.*?)\)(?:, (.*?))?\)\)"
    r"(?: WITH CLUSTERING ORDER BY \((.*)\))?$")
INSERT = re.compile(r"^INSERT INTO (\S+) \((.*?)\) VALUES \((.*?)\) IF NOT EXISTS( USING TTL \?)?$")
SELECT = re.compile(r"^SELECT (.*?) FROM (\S+)(?: WHERE (.*?))?( ALLOW FILTERING)?$")
UPDATE = re.compile(r"^UPDATE (\S+) SET (.*?) WHERE (.*?) IF EXISTS$")
DELETE = re.compile(r"^DELETE FROM (\S+) WHERE (.*?)( IF EXISTS)?$")


def write_timeout(message="slow"):
    """WriteTimeout tal como la arma el driver: write_type es obligatorio."""
    return WriteTimeout(message, write_type=WriteType.SIMPLE)


def _names(text):
    return [part.strip() for part in text.split(",") if part.strip()]


def _where(text):
    return [condition.split("=")[0].strip() for condition in text.split(" AND ")]


class FakePreparedStatement:
    def __init__(self, query_string):
        self.query_string = query_string


class FakeResultSet(list):
    def __init__(self, rows=(), was_applied=None):
        super().__init__(rows)
        self.was_applied = was_applied


class FakeFuture:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def result(self):
        if self._error is not None:
            raise self._error
        return self._result


class FakeTable:
    def __init__(self, columns, partition_key, clustering_key, descending):
        self.columns = columns
        self.partition_key = partition_key
        self.clustering_key = clustering_key
        self.descending = descending
        self.rows = []
        self.ttls = {}

    @property
    def primary_key(self):
        return self.partition_key + self.clustering_key

    def key_of(self, row):
        return tuple(row[c] for c in self.primary_key)

    def find(self, conditions):
        return [row for row in self.rows
                if all(row.get(c) == v for c, v in conditions.items())]

    def ordered(self, rows):
        """Agrupa por partición (en orden de aparición) y ordena por la clave de agrupamiento."""
        if not self.clustering_key:
            return rows
        partitions = {}
        for row in rows:
            partitions.setdefault(tuple(row[c] for c in self.partition_key), []).append(row)
        ordered = []
        for group in partitions.values():
            group.sort(key=lambda r: tuple(r[c] for c in self.clustering_key),
                       reverse=self.descending)
            ordered += group
        return ordered


class FakeSession:
    def __init__(self):
        self.keyspaces = set()
        self.tables = {}
        self.executed = []
        self.is_shutdown = False
        self._failures = []

    # ==========================================
    # INYECCIÓN DE FALLOS
    # ==========================================

    def fail(self, error, match=None, times=1, after=0):
        """
        Las próximas `times` sentencias que contengan `match` lanzan `error`,
        dejando pasar antes las primeras `after`.
        """
        self._failures.append({"match": match, "error": error, "times": times, "after": after})

    def _next_failure(self, query):
        for failure in self._failures:
            if failure["times"] <= 0:
                continue
            if failure["match"] is not None and failure["match"] not in query:
                continue
            if failure["after"] > 0:
                failure["after"] -= 1
                continue
            failure["times"] -= 1
            return failure["error"]
        return None

    # ==========================================
    # API DEL DRIVER
    # ==========================================

    def prepare(self, query):
        if self.is_shutdown:
            raise RuntimeError("Session is shut down")
        return FakePreparedStatement(query)

    def execute_async(self, statement, parameters=None):
        query = getattr(statement, "query_string", statement)
        params = list(parameters or ())
        self.executed.append((query, tuple(params)))
        error = self._next_failure(query)
        if error is not None:
            return FakeFuture(error=error)
        try:
            return FakeFuture(result=self._run(query, params))
        except InvalidRequest as e:
            return FakeFuture(error=e)

    def execute(self, statement, parameters=None):
        return self.execute_async(statement, parameters).result()

    def shutdown(self):
        self.is_shutdown = True

    # ==========================================
    # INTÉRPRETE
    # ==========================================

    def table(self, name):
        try:
            return self.tables[name]
        except KeyError:
            raise InvalidRequest(f"unconfigured table {name}") from None

    def rows(self, name):
        """Filas crudas de una tabla, para las aserciones de los tests."""
        return self.table(name).rows

    def _run(self, query, params):
        handlers = (
            (CREATE_KEYSPACE, self._create_keyspace),
            (CREATE_TABLE, self._create_table),
            (INSERT, self._insert),
            (SELECT, self._select),
            (UPDATE, self._update),
            (DELETE, self._delete),
        )
        for pattern, handler in handlers:
            match = pattern.match(query)
            if match:
                return handler(match, params)
        raise InvalidRequest(f"Syntax error in CQL query: {query}")

    def _create_keyspace(self, match, params):
        self.keyspaces.add(match.group(1))
        return FakeResultSet()

    def _create_table(self, match, params):
        name, columns, partition, clustering, order = match.groups()
        if name.split(".")[0] not in self.keyspaces:
            raise InvalidRequest(f"Keyspace {name.split('.')[0]} does not exist")
        if name not in self.tables:
            self.tables[name] = FakeTable(
                columns=[c.split()[0] for c in _names(columns)],
                partition_key=_names(partition),
                clustering_key=_names(clustering or ""),
                descending="DESC" in (order or ""),
            )
        return FakeResultSet()

    def _insert(self, match, params):
        table = self.table(match.group(1))
        columns = _names(match.group(2))
        ttl = params.pop() if match.group(4) else None
        row = dict(zip(columns, params))
        for column, value in row.items():
            if isinstance(value, list):
                row[column] = list(value)

        key = table.key_of(row)
        if any(table.key_of(existing) == key for existing in table.rows):
            return FakeResultSet(was_applied=False)
        table.rows.append(row)
        if ttl is not None:
            table.ttls[key] = ttl
        return FakeResultSet(was_applied=True)

    def _select(self, match, params):
        columns, name, where, _filtering = match.groups()
        table = self.table(name)
        conditions = dict(zip(_where(where), params)) if where else {}
        rows = table.ordered(table.find(conditions))
        return FakeResultSet(tuple(row.get(c) for c in _names(columns)) for row in rows)

    def _update(self, match, params):
        name, assignments, where = match.groups()
        table = self.table(name)
        columns = _where(assignments.replace(", ", " AND "))
        values = dict(zip(columns, params[:len(columns)]))
        conditions = dict(zip(_where(where), params[len(columns):]))
        rows = table.find(conditions)
        if not rows:
            return FakeResultSet(was_applied=False)
        for row in rows:
            row.update(values)
        return FakeResultSet(was_applied=True)

    def _delete(self, match, params):
        name, where, conditional = match.groups()
        table = self.table(name)
        rows = table.find(dict(zip(_where(where), params)))
        for row in rows:
            table.rows.remove(row)
        if conditional:
            return FakeResultSet(was_applied=bool(rows))
        return FakeResultSet()
