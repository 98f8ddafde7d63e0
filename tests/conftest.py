"""
Fixtures compartidas: contexto completo de la aplicación sobre una sesión
de Cassandra en memoria, y usuarios ya logueados de cada tipo.
"""
import uuid
from typing import NamedTuple

import pytest

from schoolhub.app import create_app
from schoolhub.config.settings import Settings
from schoolhub.context import build_context
from schoolhub.cql.client import CqlClient
from schoolhub.models import User, UserType
from schoolhub.security.passwords import hash_password
from schoolhub.services.email_service import EmailService
from tests.fake_cassandra import FakeSession

TEST_PASSWORD = "secret123"


class RecordingEmail(EmailService):
    """Guarda los mails en memoria en lugar de mandarlos."""

    def __init__(self):
        super().__init__(server="smtp.test")
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})


class Account(NamedTuple):
    user: User
    token: str

    @property
    def id(self):
        return self.user.user_id


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def settings():
    return Settings(replication_factor=1, jwt_secret="test-secret", log_json=False)


@pytest.fixture
def client(session):
    return CqlClient(session=session)


@pytest.fixture
def email():
    return RecordingEmail()


@pytest.fixture
def ctx(settings, client, email):
    context = build_context(settings, client=client, email=email)
    yield context
    context.shutdown()


@pytest.fixture
def tables(ctx):
    return ctx.tables


@pytest.fixture
def school_id(ctx):
    country = ctx.environment.create_country("Argentina", "AR")
    school = ctx.environment.create_school("Colegio Nacional", country.payload["id"])
    return school.payload["id"]


@pytest.fixture
def make_account(ctx, school_id):
    """Inserta un usuario directamente en la tabla y abre una sesión."""
    def _make(user_type, first_name="Test", last_name="User", email=None):
        email = email or f"{uuid.uuid4().hex[:10]}@school.test"
        user = User(
            school_id=school_id,
            user_id=uuid.uuid1(),
            email=email,
            password=hash_password(TEST_PASSWORD),
            user_type=user_type,
            changed_password=True,
            first_name=first_name,
            last_name=last_name,
        )
        assert ctx.tables.users.create(user).ok
        result = ctx.users.log_in(school_id, email, TEST_PASSWORD)
        assert result.status == 200
        return Account(user, result.payload["token"])
    return _make


@pytest.fixture
def admin(make_account):
    return make_account(UserType.ADMIN, "Ada", "Admin")


@pytest.fixture
def teacher(make_account):
    return make_account(UserType.TEACHER, "Tomas", "Teacher")


@pytest.fixture
def student(make_account):
    return make_account(UserType.STUDENT, "Sofia", "Student")


@pytest.fixture
def other_student(make_account):
    return make_account(UserType.STUDENT, "Omar", "Other")


@pytest.fixture
def course_id(ctx, school_id, teacher, student):
    """Curso del docente con el alumno inscripto."""
    result = ctx.courses.create_course(school_id, teacher.token, "Matematica", 1700000000, 1710000000)
    assert result.status == 201
    course = uuid.UUID(result.payload["id"])
    assert ctx.courses.add_users(school_id, teacher.token, course, [student.id]).status == 200
    return course


@pytest.fixture
def app(ctx):
    flask_app = create_app(ctx)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def auth(ctx, school_id):
    def _headers(account):
        return {"Authorization": f"Bearer {ctx.jwt.encode(account.token, school_id)}"}
    return _headers
