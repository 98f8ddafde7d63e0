from flask import Blueprint

from schoolhub.routes.common import (
    authenticated, body, context, field, respond, uuid_field, uuid_value,
)

grade_bp = Blueprint('grades', __name__)


@grade_bp.route('/', methods=['POST'])
@authenticated
def add_grade(session):
    """
    Body: {"student_id": "...", "course_id": "...", "grade": 8, "out_of": 10, "weight": 0.3}
    out_of y weight son opcionales.
    """
    data = body()
    result = context().grades.add_grade(
        session.school_id,
        session.user_token,
        uuid_field(data, "student_id"),
        uuid_field(data, "course_id"),
        field(data, "grade", int),
        out_of=field(data, "out_of", int, required=False),
        weight=field(data, "weight", (int, float), required=False),
    )
    return respond(result)


@grade_bp.route('/', methods=['GET'])
@authenticated
def get_personal_grades(session):
    return respond(context().grades.get_personal_grades(session.school_id, session.user_token))


@grade_bp.route('/user/<user_id>', methods=['GET'])
@authenticated
def get_user_grades(session, user_id):
    return respond(context().grades.get_user_grades(session.school_id, session.user_token,
                                                    uuid_value(user_id, "user id")))


@grade_bp.route('/course/<course_id>', methods=['GET'])
@authenticated
def get_course_grades(session, course_id):
    return respond(context().grades.get_course_grades(session.school_id, session.user_token,
                                                      uuid_value(course_id, "course id")))


@grade_bp.route('/<grade_id>', methods=['PUT'])
@authenticated
def edit_grade(session, grade_id):
    data = body()
    result = context().grades.edit_grade(
        session.school_id, session.user_token, uuid_value(grade_id, "grade id"),
        grade=field(data, "grade", int, required=False),
        out_of=field(data, "out_of", int, required=False),
        weight=field(data, "weight", (int, float), required=False))
    return respond(result)


@grade_bp.route('/<grade_id>', methods=['DELETE'])
@authenticated
def delete_grade(session, grade_id):
    return respond(context().grades.delete_grade(session.school_id, session.user_token,
                                                 uuid_value(grade_id, "grade id")))
