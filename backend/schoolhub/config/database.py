"""Conexión a Cassandra y arranque del esquema."""
import logging

from schoolhub.cql.client import CqlClient
from schoolhub.cql.schema import build_tables, configure_tables

logger = logging.getLogger(__name__)


class DatabaseUnavailable(ConnectionError):
    pass


def connect_cassandra(settings, client=None):
    """
    Conecta (si hace falta), configura todas las tablas y devuelve
    (client, tables). Lanza DatabaseUnavailable si algo falla.
    """
    if client is None:
        client = CqlClient(
            settings.cassandra_hosts,
            port=settings.cassandra_port,
            retry_attempts=settings.retry_attempts,
            retry_max_wait=settings.retry_max_wait,
        )
    if not client.connected:
        result = client.connect()
        if not result.ok:
            raise DatabaseUnavailable(f"Cassandra no disponible: {result}")

    tables = build_tables(client, settings.replication_factor)
    result = configure_tables(tables, settings.create_schema)
    if not result.ok:
        raise DatabaseUnavailable(f"No se pudieron configurar las tablas: {result}")
    logger.info("Cassandra ready at %s", ",".join(settings.cassandra_hosts))
    return client, tables
