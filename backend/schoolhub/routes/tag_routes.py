from flask import Blueprint

from schoolhub.routes.common import (
    authenticated, body, context, field, respond, uuid_field, uuid_value,
)

tag_bp = Blueprint('tags', __name__)


@tag_bp.route('/', methods=['POST'])
@authenticated
def create_tag(session):
    """Body: {"value": "5to A", "colour": "blue"}"""
    data = body()
    result = context().tags.create_tag(session.school_id, session.user_token,
                                       field(data, "value", str), field(data, "colour", str))
    return respond(result)


@tag_bp.route('/', methods=['GET'])
@authenticated
def get_tags(session):
    return respond(context().tags.get_all_tags(session.school_id, session.user_token))


@tag_bp.route('/user', methods=['GET'])
@tag_bp.route('/user/<user_id>', methods=['GET'])
@authenticated
def get_tags_by_user(session, user_id=None):
    user_id = None if user_id is None else uuid_value(user_id, "user id")
    return respond(context().tags.get_tags_by_user(session.school_id, session.user_token, user_id))


@tag_bp.route('/<tag_id>', methods=['GET'])
@authenticated
def get_tag(session, tag_id):
    return respond(context().tags.get_tag(session.school_id, session.user_token,
                                          uuid_value(tag_id, "tag id")))


@tag_bp.route('/<tag_id>', methods=['PUT'])
@authenticated
def update_tag(session, tag_id):
    data = body()
    result = context().tags.update_tag(
        session.school_id, session.user_token, uuid_value(tag_id, "tag id"),
        value=field(data, "value", str, required=False),
        colour=field(data, "colour", str, required=False))
    return respond(result)


@tag_bp.route('/<tag_id>', methods=['DELETE'])
@authenticated
def delete_tag(session, tag_id):
    return respond(context().tags.delete_tag(session.school_id, session.user_token,
                                             uuid_value(tag_id, "tag id")))


# --- USUARIOS DEL TAG ---
@tag_bp.route('/<tag_id>/users', methods=['GET'])
@authenticated
def get_users_by_tag(session, tag_id):
    return respond(context().tags.get_users_by_tag(session.school_id, session.user_token,
                                                   uuid_value(tag_id, "tag id")))


@tag_bp.route('/<tag_id>/users', methods=['POST'])
@authenticated
def add_user_to_tag(session, tag_id):
    """Body: {"user_id": "..."}"""
    result = context().tags.create_tag_user_relation(
        session.school_id, session.user_token, uuid_value(tag_id, "tag id"),
        uuid_field(body(), "user_id"))
    return respond(result)


@tag_bp.route('/<tag_id>/users/<user_id>', methods=['DELETE'])
@authenticated
def remove_user_from_tag(session, tag_id, user_id):
    result = context().tags.delete_tag_user_relation(
        session.school_id, session.user_token, uuid_value(tag_id, "tag id"),
        uuid_value(user_id, "user id"))
    return respond(result)
