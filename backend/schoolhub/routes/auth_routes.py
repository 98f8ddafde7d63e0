from flask import Blueprint, jsonify

from schoolhub.routes.common import api_route, authenticated, body, context, field, respond

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@api_route
def login():
    """
    Body: {"school_id": 1, "email": "admin@school.com", "password": "..."}
    Devuelve los datos del usuario y un JWT en "token".
    """
    data = body()
    school_id = field(data, "school_id", int)
    result = context().users.log_in(school_id, field(data, "email", str), field(data, "password", str))
    if not result.ok:
        return respond(result)

    payload = dict(result.payload)
    payload["token"] = context().jwt.encode(payload["token"], school_id)
    return jsonify(payload), result.status


@auth_bp.route('/logout', methods=['POST'])
@authenticated
def logout(session):
    return respond(context().users.log_out(session.school_id, session.user_token))
