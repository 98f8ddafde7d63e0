"""
Arranque de la aplicación: conexión, tablas y servicios.

build_context arma todo una sola vez y devuelve un AppContext que se le
pasa a create_app; no hay instancias globales a nivel de módulo.
"""
import logging
from dataclasses import dataclass

from schoolhub.config.database import connect_cassandra
from schoolhub.config.settings import Settings
from schoolhub.cql.client import CqlClient
from schoolhub.cql.schema import Tables
from schoolhub.security.tokens import JwtCodec
from schoolhub.services import (
    AnnouncementService, CourseService, EmailService, EnvironmentService, GradeService,
    TagService, TodoService, UserService,
)

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    client: CqlClient
    tables: Tables
    jwt: JwtCodec
    email: EmailService
    environment: EnvironmentService
    users: UserService
    todos: TodoService
    tags: TagService
    grades: GradeService
    courses: CourseService
    announcements: AnnouncementService

    def shutdown(self):
        self.client.shutdown()


def build_context(settings: Settings, client=None, email=None) -> AppContext:
    client, tables = connect_cassandra(settings, client)
    email = email if email is not None else EmailService.from_settings(settings)
    context = AppContext(
        settings=settings,
        client=client,
        tables=tables,
        jwt=JwtCodec(settings.jwt_secret, settings.jwt_expires_hours),
        email=email,
        environment=EnvironmentService(tables),
        users=UserService(tables, email, settings.session_ttl_seconds),
        todos=TodoService(tables),
        tags=TagService(tables),
        grades=GradeService(tables, email),
        courses=CourseService(tables),
        announcements=AnnouncementService(tables),
    )
    logger.info("Application context ready")
    return context
