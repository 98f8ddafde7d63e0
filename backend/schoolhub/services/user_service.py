"""Usuarios de una escuela y sus sesiones."""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import User, UserType
from schoolhub.security.passwords import (
    generate_password, generate_session_token, hash_password, verify_password,
)
from schoolhub.services.base import (
    ServiceError, expect, internal_error, listing, new_id, now, service_call, tolerate,
)
from schoolhub.services.relations import GONE, RelationsService

logger = logging.getLogger(__name__)

# ~3 meses
DEFAULT_SESSION_TTL = 7776000
TOKEN_ATTEMPTS = 10


class UserService(RelationsService):
    def __init__(self, tables, email_service=None, session_ttl_seconds=DEFAULT_SESSION_TTL):
        super().__init__(tables)
        self.email_service = email_service
        self.session_ttl_seconds = session_ttl_seconds

    # ==========================================
    # AUXILIARES
    # ==========================================

    def _check_school(self, school_id):
        result, _ = self.tables.schools.get(school_id)
        expect(result, "get school", NOT_FOUND=(404, "School not found"))

    def _get_user(self, school_id, user_id):
        result, user = self.tables.users.get(school_id, user_id)
        expect(result, "get user", NOT_FOUND=(404, "User not found"))
        return user

    def _find_by_email(self, school_id, email):
        result, users = self.tables.users.get_many("by_email", school_id, email)
        users = listing(result, users, "get user by email")
        return users[0] if users else None

    def _user_type(self, user_type):
        try:
            return UserType(user_type)
        except ValueError:
            raise ServiceError(400, "Invalid user type") from None

    def _unique_token(self, school_id):
        for _ in range(TOKEN_ATTEMPTS):
            token = generate_session_token()
            result, _ = self.tables.tokens.get(school_id, token)
            if result.code == ResultCode.NOT_FOUND:
                return token
            if not result.ok:
                raise internal_error("check token uniqueness", result)
        raise internal_error("generate session token")

    @service_call
    def get_user_by_token(self, school_id, token):
        return 200, self._user_from_token(school_id, token).to_json()

    # ==========================================
    # USUARIOS
    # ==========================================

    @service_call
    def create_user(self, school_id, creator_token, email, user_type, first_name, last_name,
                    phone_number=""):
        self._check_school(school_id)
        creator = self._user_from_token(school_id, creator_token,
                                        invalid=(404, "Creator token not found"))
        self._require_admin(creator, message="Creator is not an admin")
        user_type = self._user_type(user_type)

        if self._find_by_email(school_id, email) is not None:
            raise ServiceError(409, "Email already in use")

        password = generate_password()
        user = User(
            school_id=school_id,
            user_id=new_id(),
            email=email,
            password=hash_password(password),
            user_type=user_type,
            changed_password=False,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number or "",
            last_time_online=now(),
        )
        result = self.tables.users.create(user)
        expect(result, "create user")
        logger.info("User %s created in school %s", user.user_id, school_id)

        if self.email_service is not None:
            self.email_service.send_welcome(email, first_name, last_name, password)

        response = user.to_json(secure=True)
        response["password"] = password
        return 201, response

    @service_call
    def get_user(self, school_id, token, user_id):
        requester = self._user_from_token(school_id, token)
        if not requester.is_admin and requester.user_id != user_id:
            raise ServiceError(401, "Unauthorized")
        return 200, self._get_user(school_id, user_id).to_json()

    @service_call
    def get_all_users(self, school_id, token):
        requester = self._user_from_token(school_id, token)
        self._require_admin(requester)
        result, users = self.tables.users.get_many("by_school", school_id)
        users = listing(result, users, "list users")
        return 200, [u.to_json() for u in users]

    @service_call
    def update_user(self, school_id, token, user_id, email=None, password=None, user_type=None,
                    first_name=None, last_name=None, phone_number=None):
        self._check_school(school_id)
        editor = self._user_from_token(school_id, token)
        is_self = editor.user_id == user_id
        if not editor.is_admin and not is_self:
            raise ServiceError(401, "Unauthorized")

        self._get_user(school_id, user_id)
        changes = {}
        if email is not None:
            changes["email"] = email
        if password is not None:
            # La contraseña solo la cambia el propio usuario
            if not is_self:
                raise ServiceError(401, "Unauthorized")
            changes["password"] = hash_password(password)
            changes["changed_password"] = True
        if user_type is not None:
            if not editor.is_admin:
                raise ServiceError(401, "Unauthorized")
            changes["user_type"] = self._user_type(user_type)
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if phone_number is not None:
            changes["phone_number"] = phone_number
        if not changes:
            return 200, {}

        result = self.tables.users.update((school_id, user_id), **changes)
        expect(result, "update user", NOT_APPLIED=(404, "User not found"))
        return 200, {}

    @service_call
    def delete_user(self, school_id, token, user_id):
        """
        Borra el usuario y todo lo que cuelga de él: preguntas/respuestas en
        sus cursos, relaciones con cursos y tags, todos, notas y sesiones.
        """
        self._check_school(school_id)
        requester = self._user_from_token(school_id, token)
        self._require_admin(requester)
        user = self._get_user(school_id, user_id)

        for course_id in self._members(self.tables.courses_by_user, school_id, user_id):
            self._delete_posts_of_user(school_id, course_id, user_id)
        self._unlink_user_courses(school_id, user_id)
        self._unlink_user_tags(school_id, user_id)
        self._delete_todos_of(school_id, user_id)
        self._delete_grades_of_user(school_id, user)
        if user.user_type == UserType.STUDENT:
            expect(self.tables.student_references.delete_many("by_student", school_id, user_id),
                   "delete student references")

        result, tokens = self.tables.tokens.get_many("by_user", school_id, user_id)
        for row in listing(result, tokens, "list tokens of user"):
            tolerate(self.tables.tokens.delete(school_id, row.value), "delete token", *GONE)

        result = self.tables.users.delete(school_id, user_id)
        expect(result, "delete user", NOT_APPLIED=(404, "User not found"))
        logger.info("User %s deleted from school %s", user_id, school_id)
        return 200, {}

    # ==========================================
    # SESIONES
    # ==========================================

    @service_call
    def log_in(self, school_id, email, password):
        user = self._find_by_email(school_id, email)
        if user is None or not verify_password(password, user.password):
            raise ServiceError(404, "Invalid credentials")

        token = self._unique_token(school_id)
        row = {"school_id": school_id, "value": token, "user_id": user.user_id}
        result = self.tables.tokens.create(row, ttl=self.session_ttl_seconds)
        expect(result, "create token")

        response = user.to_json(secure=True)
        response["token"] = token
        response["last_time_online"] = user.last_time_online
        response["changed_password"] = user.changed_password
        response["phone_number"] = user.phone_number
        return 200, response

    @service_call
    def log_out(self, school_id, token):
        result = self.tables.tokens.delete(school_id, token)
        expect(result, "delete token", NOT_APPLIED=(404, "Invalid token"))
        return 200, {}
