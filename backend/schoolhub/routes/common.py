"""
Piezas compartidas por los blueprints: acceso al contexto, sesión por JWT,
lectura del body y conversión de ServiceResult a respuesta HTTP.
"""
import logging
from functools import wraps
from uuid import UUID

from flask import current_app, jsonify, request

from schoolhub.security.tokens import InvalidSessionToken
from schoolhub.services.base import INTERNAL_ERROR

logger = logging.getLogger(__name__)

EXTENSION = "schoolhub"


class BadRequest(ValueError):
    pass


def context():
    return current_app.extensions[EXTENSION]


def respond(result):
    return jsonify(result.payload), result.status


def error(message, status):
    return jsonify({"error": message}), status


def api_route(func):
    """400 para errores del body; cualquier otra excepción es un 500 genérico."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BadRequest as e:
            return error(str(e), 400)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return error(INTERNAL_ERROR, 500)
    return wrapper


def authenticated(func):
    """Decodifica el JWT del header Authorization y pasa `session` a la vista."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return error("Invalid or missing token", 401)
        try:
            session = context().jwt.decode(token.strip())
        except InvalidSessionToken:
            return error("Invalid or missing token", 401)
        return func(session, *args, **kwargs)
    return api_route(wrapper)


# ==========================================
# LECTURA DEL BODY / QUERY
# ==========================================

def body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("The body must be a JSON object")
    return data


def field(data, name, kind, required=True, default=None):
    """Campo tipado; bool no cuenta como int."""
    if name not in data or data[name] is None:
        if required:
            raise BadRequest(f"Missing field '{name}'")
        return default
    value = data[name]
    kinds = kind if isinstance(kind, tuple) else (kind,)
    if isinstance(value, bool) and bool not in kinds:
        raise BadRequest(f"Invalid field '{name}'")
    if not isinstance(value, kinds):
        raise BadRequest(f"Invalid field '{name}'")
    return value


def uuid_value(value, name):
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequest(f"Invalid {name}") from None


def uuid_field(data, name, required=True):
    value = field(data, name, str, required=required)
    return None if value is None else uuid_value(value, name)


def uuid_list(data, name):
    values = field(data, name, list, required=False, default=[])
    return [uuid_value(v, name) for v in values]


def int_arg(name, required=True):
    value = request.args.get(name)
    if value is None:
        if required:
            raise BadRequest(f"Missing parameter '{name}'")
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"Invalid parameter '{name}'") from None
