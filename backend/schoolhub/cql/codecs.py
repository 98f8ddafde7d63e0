"""
Codecs por columna: convierten entre los valores del dominio y los que
espera/devuelve el driver, verificando el tipo al leer.
"""
import calendar
from datetime import datetime, timezone
from uuid import UUID


class CodecError(ValueError):
    pass


class Codec:
    cql_type = None
    python_types = ()

    def encode(self, value):
        return value

    def decode(self, raw):
        # bool es subclase de int: se rechaza salvo que el codec lo acepte
        wrong_bool = isinstance(raw, bool) and bool not in self.python_types
        if wrong_bool or not isinstance(raw, self.python_types):
            raise CodecError(f"expected {self.cql_type}, got {type(raw).__name__}")
        return raw


class IntCodec(Codec):
    cql_type = "int"
    python_types = (int,)
    # int de CQL: 32 bits con signo
    min_value = -2 ** 31
    max_value = 2 ** 31 - 1

    def encode(self, value):
        value = int(value)
        if not self.min_value <= value <= self.max_value:
            raise CodecError(f"{value} out of range for {self.cql_type}")
        return value


class FloatCodec(Codec):
    cql_type = "float"
    python_types = (float, int)

    def encode(self, value):
        return float(value)

    def decode(self, raw):
        return float(super().decode(raw))


class BooleanCodec(Codec):
    cql_type = "boolean"
    python_types = (bool,)

    def encode(self, value):
        return bool(value)


class TextCodec(Codec):
    python_types = (str,)

    def __init__(self, cql_type="text"):
        self.cql_type = cql_type

    def decode(self, raw):
        # Cassandra devuelve None para texto vacío/no escrito
        if raw is None:
            return ""
        return super().decode(raw)


class UuidCodec(Codec):
    cql_type = "uuid"
    python_types = (UUID,)

    def encode(self, value):
        if isinstance(value, UUID):
            return value
        return UUID(str(value))


class TimestampCodec(Codec):
    """Segundos desde epoch en el dominio, timestamp en la base."""
    cql_type = "timestamp"

    def encode(self, value):
        seconds = int(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise CodecError(f"{seconds} out of range for timestamp: {e}") from e

    def decode(self, raw):
        if not isinstance(raw, datetime):
            raise CodecError(f"expected timestamp, got {type(raw).__name__}")
        # El driver devuelve datetimes naive en UTC
        return calendar.timegm(raw.utctimetuple())


class UuidListCodec(Codec):
    cql_type = "list<uuid>"

    def encode(self, value):
        return [UUID_CODEC.encode(v) for v in (value or [])]

    def decode(self, raw):
        if raw is None:
            return []
        return [UUID_CODEC.decode(item) for item in raw]


INT = IntCodec()
FLOAT = FloatCodec()
BOOLEAN = BooleanCodec()
TEXT = TextCodec()
VARCHAR = TextCodec("varchar")
UUID_CODEC = UuidCodec()
TIMESTAMP = TimestampCodec()
UUID_LIST = UuidListCodec()
