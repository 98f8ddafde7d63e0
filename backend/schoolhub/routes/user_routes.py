from flask import Blueprint

from schoolhub.routes.common import authenticated, body, context, field, respond, uuid_value

user_bp = Blueprint('users', __name__)


@user_bp.route('/', methods=['POST'])
@authenticated
def create_user(session):
    """
    Solo administradores. La contraseña generada vuelve en la respuesta y por mail.
    Body: {"email": "...", "user_type": 2, "first_name": "...", "last_name": "...", "phone_number": ""}
    """
    data = body()
    result = context().users.create_user(
        session.school_id,
        session.user_token,
        field(data, "email", str),
        field(data, "user_type", int),
        field(data, "first_name", str),
        field(data, "last_name", str),
        field(data, "phone_number", str, required=False, default=""),
    )
    return respond(result)


@user_bp.route('/', methods=['GET'])
@authenticated
def get_users(session):
    return respond(context().users.get_all_users(session.school_id, session.user_token))


@user_bp.route('/me', methods=['GET'])
@authenticated
def get_me(session):
    return respond(context().users.get_user_by_token(session.school_id, session.user_token))


@user_bp.route('/<user_id>', methods=['GET'])
@authenticated
def get_user(session, user_id):
    result = context().users.get_user(session.school_id, session.user_token,
                                      uuid_value(user_id, "user id"))
    return respond(result)


@user_bp.route('/<user_id>', methods=['PUT'])
@authenticated
def update_user(session, user_id):
    """Todos los campos son opcionales: email, password, user_type, first_name, last_name, phone_number."""
    data = body()
    result = context().users.update_user(
        session.school_id,
        session.user_token,
        uuid_value(user_id, "user id"),
        email=field(data, "email", str, required=False),
        password=field(data, "password", str, required=False),
        user_type=field(data, "user_type", int, required=False),
        first_name=field(data, "first_name", str, required=False),
        last_name=field(data, "last_name", str, required=False),
        phone_number=field(data, "phone_number", str, required=False),
    )
    return respond(result)


@user_bp.route('/<user_id>', methods=['DELETE'])
@authenticated
def delete_user(session, user_id):
    result = context().users.delete_user(session.school_id, session.user_token,
                                         uuid_value(user_id, "user id"))
    return respond(result)
