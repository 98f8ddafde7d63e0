"""Notas de alumnos por curso."""
import logging

from schoolhub.models import Grade, UserType
from schoolhub.services.base import ServiceError, expect, listing, new_id, now, service_call
from schoolhub.services.relations import RelationsService

logger = logging.getLogger(__name__)

NO_WEIGHT = -1.0


def validate_grade(grade, out_of, weight):
    if grade < 0:
        raise ServiceError(400, "Grade is not valid")
    if out_of < 0:
        raise ServiceError(400, "Out of is not valid")
    if weight != NO_WEIGHT and weight < 0:
        raise ServiceError(400, "Weight is not valid")
    if grade > out_of:
        raise ServiceError(400, "Grade is greater than out of")
    if weight > 1:
        raise ServiceError(400, "Weight is greater than 1")


def full_name(user):
    return f"{user.first_name} {user.last_name}"


class GradeService(RelationsService):
    def __init__(self, tables, email_service=None):
        super().__init__(tables)
        self.email_service = email_service

    def _teacher_from_token(self, school_id, token):
        user = self._user_from_token(school_id, token)
        self._require_teacher(user, status=401, message="User is not a teacher or admin")
        return user

    def _check_can_grade(self, school_id, user, course_id):
        if user.user_type == UserType.TEACHER and not self._is_member(school_id, course_id, user.user_id):
            raise ServiceError(401, "User is not a teacher of the course")

    def _get_grade(self, school_id, grade_id):
        result, grade = self.tables.grades.get(school_id, grade_id)
        expect(result, "get grade", NOT_FOUND=(404, "Grade not found"))
        return grade

    def _grades_json(self, grades, names=None):
        """Notas ordenadas por fecha; `names` agrega el nombre de evaluador/evaluado."""
        result = []
        for grade in sorted(grades, key=lambda g: g.created_at):
            value = grade.to_json(secure=True)
            if names is not None:
                value["evaluator_name"] = names(grade.evaluator_id)
                value["evaluated_name"] = names(grade.evaluated_id)
            result.append(value)
        return result

    def _name_lookup(self, school_id):
        cache = {}

        def lookup(user_id):
            if user_id not in cache:
                user = self._find_user(school_id, user_id)
                cache[user_id] = full_name(user) if user is not None else ""
            return cache[user_id]
        return lookup

    def _grades_by_course(self, school_id, user_id, names=None):
        courses = []
        for course_id in self._members(self.tables.courses_by_user, school_id, user_id):
            course = self._get_course(school_id, course_id)
            result, grades = self.tables.grades.get_many(
                "by_student_and_course", school_id, user_id, course_id)
            grades = listing(result, grades, "list grades of student")
            value = course.to_json(secure=True)
            value["grades"] = self._grades_json(grades, names)
            courses.append(value)
        return courses

    # ==========================================
    # NOTAS
    # ==========================================

    @service_call
    def add_grade(self, school_id, token, student_id, course_id, grade, out_of=None, weight=None):
        evaluator = self._teacher_from_token(school_id, token)
        course = self._get_course(school_id, course_id)
        self._check_can_grade(school_id, evaluator, course_id)

        student = self._find_user(school_id, student_id)
        if student is None:
            raise ServiceError(404, "User not found")
        if student.user_type != UserType.STUDENT or not self._is_member(school_id, course_id, student_id):
            raise ServiceError(400, "User is not a student of the course")

        out_of = grade if out_of is None else out_of
        weight = NO_WEIGHT if weight is None else weight
        validate_grade(grade, out_of, weight)

        new_grade = Grade(school_id, new_id(), student_id, evaluator.user_id, course_id,
                          grade, out_of, now(), weight)
        expect(self.tables.grades.create(new_grade), "create grade")

        if self.email_service is not None:
            self.email_service.send_grade(student.email, grade, out_of, course.name)

        response = new_grade.to_json(secure=True)
        response["course_name"] = course.name
        return 201, response

    @service_call
    def get_personal_grades(self, school_id, token):
        user = self._user_from_token(school_id, token)
        return 200, self._grades_by_course(school_id, user.user_id, self._name_lookup(school_id))

    @service_call
    def get_user_grades(self, school_id, token, user_id):
        requester = self._user_from_token(school_id, token)
        if not requester.can_teach and requester.user_id != user_id:
            raise ServiceError(401, "User is not a teacher or admin")
        return 200, self._grades_by_course(school_id, user_id)

    @service_call
    def get_course_grades(self, school_id, token, course_id):
        requester = self._teacher_from_token(school_id, token)
        course = self._get_course(school_id, course_id)
        self._check_can_grade(school_id, requester, course_id)

        result, grades = self.tables.grades.get_many("by_course", school_id, course_id)
        grades = listing(result, grades, "list grades of course")
        value = course.to_json(secure=True)
        value["grades"] = self._grades_json(grades, self._name_lookup(school_id))
        return 200, value

    @service_call
    def edit_grade(self, school_id, token, grade_id, grade=None, out_of=None, weight=None):
        requester = self._teacher_from_token(school_id, token)
        current = self._get_grade(school_id, grade_id)
        self._check_can_grade(school_id, requester, current.course_id)

        grade = current.grade if grade is None else grade
        out_of = current.out_of if out_of is None else out_of
        weight = current.weight if weight is None else weight
        validate_grade(grade, out_of, weight)

        result = self.tables.grades.update((school_id, grade_id),
                                           grade=grade, out_of=out_of, weight=weight)
        expect(result, "update grade", NOT_APPLIED=(404, "Grade not found"))
        return 200, {}

    @service_call
    def delete_grade(self, school_id, token, grade_id):
        self._teacher_from_token(school_id, token)
        result = self.tables.grades.delete(school_id, grade_id)
        expect(result, "delete grade", NOT_APPLIED=(404, "Grade not found"))
        return 200, {}
