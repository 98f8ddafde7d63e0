from flask import Blueprint

from schoolhub.routes.common import (
    authenticated, body, context, field, respond, uuid_field, uuid_list, uuid_value,
)

announcement_bp = Blueprint('announcements', __name__)


def _announcement(announcement_id):
    return uuid_value(announcement_id, "announcement id")


@announcement_bp.route('/', methods=['POST'])
@authenticated
def create_announcement(session):
    """
    Body: {"title": "Acto del 25 de mayo", "content": "...", "allow_answers": true,
           "tags": ["<tag_id>", ...]}
    """
    data = body()
    result = context().announcements.create_announcement(
        session.school_id,
        session.user_token,
        field(data, "title", str),
        field(data, "content", str),
        allow_answers=field(data, "allow_answers", bool, required=False, default=True),
        tag_ids=uuid_list(data, "tags"),
    )
    return respond(result)


@announcement_bp.route('/', methods=['GET'])
@authenticated
def get_announcements(session):
    return respond(context().announcements.get_announcements(session.school_id, session.user_token))


@announcement_bp.route('/<announcement_id>', methods=['GET'])
@authenticated
def get_announcement(session, announcement_id):
    return respond(context().announcements.get_announcement(
        session.school_id, session.user_token, _announcement(announcement_id)))


@announcement_bp.route('/<announcement_id>', methods=['DELETE'])
@authenticated
def delete_announcement(session, announcement_id):
    return respond(context().announcements.delete_announcement(
        session.school_id, session.user_token, _announcement(announcement_id)))


# --- TAGS ---
@announcement_bp.route('/<announcement_id>/tags', methods=['GET'])
@authenticated
def get_announcement_tags(session, announcement_id):
    return respond(context().announcements.get_announcement_tags(
        session.school_id, session.user_token, _announcement(announcement_id)))


@announcement_bp.route('/<announcement_id>/tags', methods=['POST'])
@authenticated
def add_tag(session, announcement_id):
    """Body: {"tag_id": "..."}"""
    result = context().announcements.add_tag_to_announcement(
        session.school_id, session.user_token, _announcement(announcement_id),
        uuid_field(body(), "tag_id"))
    return respond(result)


@announcement_bp.route('/<announcement_id>/tags/<tag_id>', methods=['DELETE'])
@authenticated
def remove_tag(session, announcement_id, tag_id):
    result = context().announcements.remove_tag_from_announcement(
        session.school_id, session.user_token, _announcement(announcement_id),
        uuid_value(tag_id, "tag id"))
    return respond(result)


# --- RESPUESTAS ---
@announcement_bp.route('/<announcement_id>/answers', methods=['POST'])
@authenticated
def create_answer(session, announcement_id):
    """Body: {"content": "..."}"""
    result = context().announcements.create_answer(
        session.school_id, session.user_token, _announcement(announcement_id),
        field(body(), "content", str))
    return respond(result)


@announcement_bp.route('/<announcement_id>/answers', methods=['GET'])
@authenticated
def get_answers(session, announcement_id):
    return respond(context().announcements.get_answers(
        session.school_id, session.user_token, _announcement(announcement_id)))


@announcement_bp.route('/<announcement_id>/answers/<answer_id>', methods=['DELETE'])
@authenticated
def delete_answer(session, announcement_id, answer_id):
    return respond(context().announcements.delete_answer(
        session.school_id, session.user_token, _announcement(announcement_id),
        uuid_value(answer_id, "answer id")))
