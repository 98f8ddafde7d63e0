from flask import Blueprint

from schoolhub.models import AnswerOwnerType
from schoolhub.routes.common import (
    authenticated, body, context, field, int_arg, respond, uuid_list, uuid_value,
)

course_bp = Blueprint('courses', __name__)


def _course(course_id):
    return uuid_value(course_id, "course id")


# --- CURSOS ---
@course_bp.route('/', methods=['POST'])
@authenticated
def create_course(session):
    """
    Body: {"name": "Matemática I", "start_date": 1709251200, "end_date": 1719705600,
           "course_thumbnail": ""}
    """
    data = body()
    result = context().courses.create_course(
        session.school_id,
        session.user_token,
        field(data, "name", str),
        field(data, "start_date", int),
        field(data, "end_date", int),
        field(data, "course_thumbnail", str, required=False, default=""),
    )
    return respond(result)


@course_bp.route('/', methods=['GET'])
@authenticated
def get_courses(session):
    return respond(context().courses.get_all_user_courses(session.school_id, session.user_token))


@course_bp.route('/<course_id>', methods=['GET'])
@authenticated
def get_course(session, course_id):
    return respond(context().courses.get_course(session.school_id, session.user_token,
                                                _course(course_id)))


@course_bp.route('/<course_id>', methods=['PUT'])
@authenticated
def update_course(session, course_id):
    data = body()
    result = context().courses.update_course(
        session.school_id, session.user_token, _course(course_id),
        name=field(data, "name", str, required=False),
        start_date=field(data, "start_date", int, required=False),
        end_date=field(data, "end_date", int, required=False),
        course_thumbnail=field(data, "course_thumbnail", str, required=False))
    return respond(result)


@course_bp.route('/<course_id>', methods=['DELETE'])
@authenticated
def delete_course(session, course_id):
    return respond(context().courses.delete_course(session.school_id, session.user_token,
                                                   _course(course_id)))


# --- MIEMBROS ---
@course_bp.route('/<course_id>/users', methods=['GET'])
@authenticated
def get_course_users(session, course_id):
    return respond(context().courses.get_courses_users(session.school_id, session.user_token,
                                                       _course(course_id)))


@course_bp.route('/<course_id>/users', methods=['POST'])
@authenticated
def add_users(session, course_id):
    """Body: {"users": ["<user_id>", ...], "tags": ["<tag_id>", ...]}"""
    data = body()
    result = context().courses.add_users(
        session.school_id, session.user_token, _course(course_id),
        uuid_list(data, "users"), uuid_list(data, "tags"))
    return respond(result)


@course_bp.route('/<course_id>/users', methods=['DELETE'])
@authenticated
def remove_users(session, course_id):
    """Body: {"users": [...], "tags": [...]}"""
    data = body()
    result = context().courses.remove_users(
        session.school_id, session.user_token, _course(course_id),
        uuid_list(data, "users"), uuid_list(data, "tags"))
    return respond(result)


# --- CLASES ---
@course_bp.route('/<course_id>/lectures', methods=['POST'])
@authenticated
def create_lecture(session, course_id):
    """Body: {"starting_time": 1709283600, "duration": 90, "location": "Aula 3"}"""
    data = body()
    result = context().courses.create_lecture(
        session.school_id, session.user_token, _course(course_id),
        field(data, "starting_time", int),
        field(data, "duration", int),
        field(data, "location", str, required=False, default=""))
    return respond(result)


@course_bp.route('/<course_id>/lectures', methods=['GET'])
@authenticated
def get_lectures(session, course_id):
    return respond(context().courses.get_lectures(session.school_id, session.user_token,
                                                  _course(course_id)))


@course_bp.route('/<course_id>/lectures', methods=['PUT'])
@authenticated
def update_lecture(session, course_id):
    """Body: {"starting_time": ..., "new_starting_time": ..., "duration": ..., "location": ...}"""
    data = body()
    result = context().courses.update_lecture(
        session.school_id, session.user_token, _course(course_id),
        field(data, "starting_time", int),
        new_starting_time=field(data, "new_starting_time", int, required=False),
        duration=field(data, "duration", int, required=False),
        location=field(data, "location", str, required=False))
    return respond(result)


@course_bp.route('/<course_id>/lectures', methods=['DELETE'])
@authenticated
def delete_lecture(session, course_id):
    """Query: ?starting_time=1709283600"""
    result = context().courses.delete_lecture(session.school_id, session.user_token,
                                              _course(course_id), int_arg("starting_time"))
    return respond(result)


# --- PREGUNTAS ---
@course_bp.route('/<course_id>/questions', methods=['POST'])
@authenticated
def create_question(session, course_id):
    """Body: {"content": "¿Entra el tema 4?"}"""
    result = context().courses.create_question(session.school_id, session.user_token,
                                               _course(course_id), field(body(), "content", str))
    return respond(result)


@course_bp.route('/<course_id>/questions', methods=['GET'])
@authenticated
def get_questions(session, course_id):
    return respond(context().courses.get_questions_by_course(
        session.school_id, session.user_token, _course(course_id)))


@course_bp.route('/<course_id>/questions/<question_id>', methods=['DELETE'])
@authenticated
def delete_question(session, course_id, question_id):
    result = context().courses.delete_question(session.school_id, session.user_token,
                                               _course(course_id),
                                               uuid_value(question_id, "question id"))
    return respond(result)


# --- RESPUESTAS ---
@course_bp.route('/<course_id>/questions/<question_id>/answers', methods=['POST'])
@authenticated
def create_answer(session, course_id, question_id):
    """Body: {"content": "Sí, entra."}"""
    _course(course_id)
    result = context().courses.create_answer(
        session.school_id, session.user_token, uuid_value(question_id, "question id"),
        AnswerOwnerType.QUESTION, field(body(), "content", str))
    return respond(result)


@course_bp.route('/<course_id>/questions/<question_id>/answers', methods=['GET'])
@authenticated
def get_answers(session, course_id, question_id):
    _course(course_id)
    return respond(context().courses.get_answers(
        session.school_id, session.user_token, uuid_value(question_id, "question id"),
        AnswerOwnerType.QUESTION))


@course_bp.route('/<course_id>/questions/<question_id>/answers/<answer_id>', methods=['DELETE'])
@authenticated
def delete_answer(session, course_id, question_id, answer_id):
    _course(course_id)
    result = context().courses.delete_answer(
        session.school_id, session.user_token, uuid_value(question_id, "question id"),
        AnswerOwnerType.QUESTION,
        uuid_value(answer_id, "answer id"))
    return respond(result)
