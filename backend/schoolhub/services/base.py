"""
Piezas comunes de los servicios.

Los métodos públicos de cada servicio devuelven un ServiceResult
(status HTTP + payload). Internamente se corta el flujo con ServiceError y
el decorador service_call lo convierte en {"error": ...}.
"""
import logging
import time
import uuid
from functools import wraps
from typing import Any, NamedTuple

from schoolhub.cql.result import ResultCode, is_bind_error

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal error"
INVALID_VALUE = "Invalid value"


class ServiceResult(NamedTuple):
    status: int
    payload: Any

    @property
    def ok(self):
        return 200 <= self.status < 300


class ServiceError(Exception):
    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message


def internal_error(operation, result=None):
    """
    500 genérico hacia el cliente; el detalle queda sólo en el log. Un valor
    de entrada que no se pudo codificar es culpa del request: 400.
    """
    if result is not None and is_bind_error(result):
        logger.info("%s rejected: %s", operation, result)
        return ServiceError(400, INVALID_VALUE)
    logger.error("%s failed: %s", operation, result)
    return ServiceError(500, INTERNAL_ERROR)


def expect(result, operation, **handled):
    """
    Deja pasar un CqlResult OK. Los códigos listados en `handled`
    (p.ej. NOT_FOUND=(404, "School not found")) se convierten en ese error;
    cualquier otro código es un 500.
    """
    if result.ok:
        return
    if result.code.name in handled:
        raise ServiceError(*handled[result.code.name])
    raise internal_error(operation, result)


def tolerate(result, operation, *codes):
    """Como expect, pero además acepta los códigos indicados (p.ej. NOT_APPLIED en cascadas)."""
    if result.code in codes:
        return
    expect(result, operation)


def listing(result, items, operation):
    """Listados: NOT_FOUND equivale a lista vacía."""
    if result.code == ResultCode.NOT_FOUND:
        return []
    expect(result, operation)
    return items


def service_call(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            status, payload = func(*args, **kwargs)
        except ServiceError as e:
            return ServiceResult(e.status, {"error": e.message})
        return ServiceResult(status, payload)
    return wrapper


def now():
    return int(time.time())


def new_id():
    return uuid.uuid1()


class BaseService:
    def __init__(self, tables):
        self.tables = tables

    def _user_from_token(self, school_id, token, invalid=(400, "The token is invalid")):
        """Token de sesión -> usuario; 400 si el token no existe."""
        result, row = self.tables.tokens.get(school_id, token)
        expect(result, "get user from token", NOT_FOUND=invalid)
        result, user = self.tables.users.get(school_id, row.user_id)
        expect(result, "get user", NOT_FOUND=(404, "The user does not exist"))
        return user

    def _require_teacher(self, user, status=403, message="Only teachers and admins can do this"):
        if not user.can_teach:
            raise ServiceError(status, message)

    def _require_admin(self, user, status=401, message="User is not an admin"):
        if not user.is_admin:
            raise ServiceError(status, message)
