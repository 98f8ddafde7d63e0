"""
Configuración por variables de entorno.

Se lee una sola vez en el arranque (load_settings) y se pasa explícitamente
a quien la necesite.
"""
import os
from dataclasses import dataclass, field
from typing import List


def _bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _list(value):
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    cassandra_hosts: List[str] = field(default_factory=lambda: ["localhost"])
    cassandra_port: int = 9042
    replication_factor: int = 3
    create_schema: bool = True
    retry_attempts: int = 1
    retry_max_wait: float = 2.0

    jwt_secret: str = "dev-secret-change-me"
    jwt_expires_hours: int = 24
    # ~3 meses
    session_ttl_seconds: int = 7776000

    email_server: str = ""
    email_port: int = 587
    email_address: str = ""
    email_password: str = ""

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    log_json: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 5000


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        cassandra_hosts=_list(env.get("CASSANDRA_HOSTS", "localhost")),
        cassandra_port=int(env.get("CASSANDRA_PORT", 9042)),
        replication_factor=int(env.get("CASSANDRA_REPLICATION_FACTOR", 3)),
        create_schema=_bool(env.get("CASSANDRA_CREATE_SCHEMA"), default=True),
        retry_attempts=int(env.get("CASSANDRA_RETRY_ATTEMPTS", 1)),
        retry_max_wait=float(env.get("CASSANDRA_RETRY_MAX_WAIT", 2)),
        jwt_secret=env.get("JWT_SECRET", "dev-secret-change-me"),
        jwt_expires_hours=int(env.get("JWT_EXPIRES_HOURS", 24)),
        session_ttl_seconds=int(env.get("SESSION_TTL_SECONDS", 7776000)),
        email_server=env.get("EMAIL_SERVER", ""),
        email_port=int(env.get("EMAIL_PORT", 587)),
        email_address=env.get("EMAIL_ADDRESS", ""),
        email_password=env.get("EMAIL_PASSWORD", ""),
        cors_origins=_list(env.get("CORS_ORIGINS", "http://localhost:3000")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        log_json=_bool(env.get("LOG_JSON"), default=True),
        api_host=env.get("API_HOST", "0.0.0.0"),
        api_port=int(env.get("API_PORT", 5000)),
    )
