"""
Cursos: datos del curso, miembros, clases (lectures), preguntas y
respuestas.

Un alumno solo ve los cursos en los que está inscripto; un docente además
puede modificarlos; un administrador puede todo dentro de su escuela.
"""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import AnswerOwnerType, Course, Lecture, Question
from schoolhub.services.base import (
    ServiceError, expect, internal_error, listing, new_id, now, service_call, tolerate,
)
from schoolhub.services.relations import GONE, RelationsService

logger = logging.getLogger(__name__)

MAX_COURSE_NAME = 100
MAX_QUESTION_LENGTH = 1000


class CourseService(RelationsService):

    # ==========================================
    # AUXILIARES
    # ==========================================

    def _check_member(self, school_id, user, course_id, message="You do not have access to this course"):
        if user.is_admin:
            return
        if not self._is_member(school_id, course_id, user.user_id):
            raise ServiceError(401, message)

    def _check_editor(self, school_id, user, course_id, message):
        """Docente del curso o administrador."""
        if not user.can_teach:
            raise ServiceError(403, message)
        self._check_member(school_id, user, course_id, message="Teacher is not in the course")

    def _check_dates(self, start_date, end_date):
        if start_date > end_date:
            raise ServiceError(400, "The start date is after the end date")

    def _check_name(self, name):
        if not name or len(name) > MAX_COURSE_NAME:
            raise ServiceError(400, "Invalid course name")

    def _link_member(self, school_id, course_id, user_id):
        tolerate(self.tables.users_by_course.link(school_id, course_id, user_id),
                 "add user to course", ResultCode.NOT_APPLIED)
        tolerate(self.tables.courses_by_user.link(school_id, user_id, course_id),
                 "add course to user", ResultCode.NOT_APPLIED)

    def _unlink_member(self, school_id, course_id, user_id):
        self._delete_posts_of_user(school_id, course_id, user_id)
        tolerate(self.tables.users_by_course.unlink(school_id, course_id, user_id),
                 "remove user from course", *GONE)
        tolerate(self.tables.courses_by_user.unlink(school_id, user_id, course_id),
                 "remove course from user", *GONE)

    def _expand_users(self, school_id, user_ids, tag_ids):
        """Usuarios explícitos más los de cada tag, sin repetidos y en orden."""
        for user_id in user_ids:
            if self._find_user(school_id, user_id) is None:
                raise ServiceError(404, "User does not exist")
        for tag_id in tag_ids:
            result, _ = self.tables.tags.get(school_id, tag_id)
            expect(result, "get tag", NOT_FOUND=(404, "Tag does not exist"))

        expanded = list(user_ids)
        for tag_id in tag_ids:
            expanded += self._members(self.tables.users_by_tag, school_id, tag_id)
        return list(dict.fromkeys(expanded))

    def _course_of_question(self, school_id, question_id):
        result, courses = self.tables.questions_by_course.list_owners(school_id, question_id)
        expect(result, "get course of question")
        if not courses:
            raise ServiceError(404, "Question not found")
        return courses[0]

    # ==========================================
    # CURSOS
    # ==========================================

    @service_call
    def create_course(self, school_id, token, name, start_date, end_date, course_thumbnail=""):
        user = self._user_from_token(school_id, token)
        self._require_teacher(user, message="User is not a teacher or admin")
        self._check_name(name)
        self._check_dates(start_date, end_date)

        course = Course(school_id, new_id(), name, course_thumbnail or "", now(),
                        start_date, end_date, [])
        expect(self.tables.courses.create(course), "create course")

        # El docente que lo crea queda inscripto; un administrador no
        if not user.is_admin:
            result = self.tables.users_by_course.link(school_id, course.id, user.user_id)
            expect(result, "add teacher to course")
            result = self.tables.courses_by_user.link(school_id, user.user_id, course.id)
            expect(result, "add course to teacher")
        return 201, {"id": str(course.id)}

    @service_call
    def get_course(self, school_id, token, course_id):
        user = self._user_from_token(school_id, token)
        course = self._get_course(school_id, course_id)
        self._check_member(school_id, user, course_id)
        return 200, course.to_json(secure=True)

    @service_call
    def get_all_user_courses(self, school_id, token):
        user = self._user_from_token(school_id, token)
        if user.is_admin:
            result, courses = self.tables.courses.get_many("by_school", school_id)
            courses = listing(result, courses, "list courses")
        else:
            courses = []
            for course_id in self._members(self.tables.courses_by_user, school_id, user.user_id):
                result, course = self.tables.courses.get(school_id, course_id)
                if result.code == ResultCode.NOT_FOUND:
                    logger.warning("Dangling course %s for user %s", course_id, user.user_id)
                    continue
                expect(result, "get course")
                courses.append(course)
        courses.sort(key=lambda c: (c.start_date, c.name))
        return 200, [c.to_json(secure=True) for c in courses]

    @service_call
    def get_courses_users(self, school_id, token, course_id):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_member(school_id, user, course_id)

        users = []
        for member_id in self._course_members(school_id, course_id):
            member = self._find_user(school_id, member_id)
            if member is None:
                logger.warning("Dangling user %s in course %s", member_id, course_id)
                continue
            users.append(member.to_json(secure=True))
        return 200, users

    @service_call
    def update_course(self, school_id, token, course_id, name=None, start_date=None,
                      end_date=None, course_thumbnail=None):
        user = self._user_from_token(school_id, token)
        course = self._get_course(school_id, course_id)
        self._check_editor(school_id, user, course_id, "You cannot update a course")

        name = course.name if name is None else name
        start_date = course.start_date if start_date is None else start_date
        end_date = course.end_date if end_date is None else end_date
        course_thumbnail = course.course_thumbnail if course_thumbnail is None else course_thumbnail
        self._check_name(name)
        self._check_dates(start_date, end_date)

        result = self.tables.courses.update(
            (school_id, course_id), name=name, start_date=start_date, end_date=end_date,
            course_thumbnail=course_thumbnail)
        expect(result, "update course", NOT_APPLIED=(404, "Course not found"))
        return 200, {}

    @service_call
    def delete_course(self, school_id, token, course_id):
        """
        Borra el curso con sus relaciones, preguntas, clases, notas y
        archivos. No es atómico: si algo falla queda a medio borrar.
        """
        user = self._user_from_token(school_id, token)
        course = self._get_course(school_id, course_id)
        self._check_editor(school_id, user, course_id, "You cannot delete a course")

        for member_id in self._course_members(school_id, course_id):
            tolerate(self.tables.courses_by_user.unlink(school_id, member_id, course_id),
                     "remove course from user", *GONE)
        expect(self.tables.users_by_course.unlink_all(school_id, course_id), "remove users of course")

        for question_id in self._members(self.tables.questions_by_course, school_id, course_id):
            self._delete_question(school_id, course_id, question_id)
        expect(self.tables.lectures.delete_many("by_course", school_id, course_id), "delete lectures")
        self._delete_grades(school_id, "by_course", course_id)
        self._delete_files(school_id, course.files)

        result = self.tables.courses.delete(school_id, course_id)
        expect(result, "delete course", NOT_APPLIED=(404, "Course not found"))
        logger.info("Course %s deleted from school %s", course_id, school_id)
        return 200, {}

    # ==========================================
    # MIEMBROS
    # ==========================================

    @service_call
    def add_users(self, school_id, token, course_id, user_ids=(), tag_ids=()):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_editor(school_id, user, course_id, "User is not a teacher or admin")

        for member_id in self._expand_users(school_id, user_ids, tag_ids):
            self._link_member(school_id, course_id, member_id)
        return 200, {}

    @service_call
    def remove_users(self, school_id, token, course_id, user_ids=(), tag_ids=()):
        """Al sacar a alguien del curso también se borran sus preguntas y respuestas."""
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_editor(school_id, user, course_id, "User is not a teacher or admin")

        for member_id in self._expand_users(school_id, user_ids, tag_ids):
            self._unlink_member(school_id, course_id, member_id)
        return 200, {}

    # ==========================================
    # CLASES
    # ==========================================

    def _check_lecture(self, duration):
        if not isinstance(duration, int) or duration <= 0:
            raise ServiceError(400, "Invalid lecture duration")

    @service_call
    def create_lecture(self, school_id, token, course_id, starting_time, duration, location=""):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_editor(school_id, user, course_id, "User is not a teacher or admin")
        self._check_lecture(duration)

        lecture = Lecture(school_id, course_id, starting_time, duration, location or "")
        result = self.tables.lectures.create(lecture)
        expect(result, "create lecture", NOT_APPLIED=(409, "Lecture already exists"))
        return 201, lecture.to_json(secure=True)

    @service_call
    def get_lectures(self, school_id, token, course_id):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_member(school_id, user, course_id)

        result, lectures = self.tables.lectures.get_many("by_course", school_id, course_id)
        lectures = listing(result, lectures, "list lectures")
        return 200, [lecture.to_json(secure=True) for lecture in lectures]

    @service_call
    def update_lecture(self, school_id, token, course_id, starting_time, new_starting_time=None,
                       duration=None, location=None):
        """
        La hora de inicio es clave de agrupamiento: cambiarla es borrar e
        insertar. Si el insert falla después del borrado la clase se pierde
        y queda registrada en el log.
        """
        user = self._user_from_token(school_id, token)
        self._check_editor(school_id, user, course_id, "User is not a teacher or admin")

        result, old = self.tables.lectures.get(school_id, course_id, starting_time)
        expect(result, "get lecture", NOT_FOUND=(404, "Lecture not found"))
        duration = old.duration if duration is None else duration
        location = old.location if location is None else location
        self._check_lecture(duration)

        if new_starting_time is None or new_starting_time == old.starting_time:
            result = self.tables.lectures.update(
                (school_id, course_id, old.starting_time), duration=duration, location=location)
            expect(result, "update lecture", NOT_APPLIED=(404, "Lecture not found"))
            return 200, {}

        result, _ = self.tables.lectures.get(school_id, course_id, new_starting_time)
        if result.ok:
            raise ServiceError(409, "Lecture already exists")
        if result.code != ResultCode.NOT_FOUND:
            raise internal_error("check new lecture time", result)

        new = Lecture(school_id, course_id, new_starting_time, duration, location)
        result = self.tables.lectures.delete(school_id, course_id, old.starting_time)
        expect(result, "delete old lecture", NOT_APPLIED=(404, "Lecture not found"))

        result = self.tables.lectures.create(new)
        if not result.ok:
            logger.error("Lecture lost while moving %s -> %s: %r (%s)",
                         old.starting_time, new_starting_time, new, result)
            raise internal_error("insert moved lecture", result)
        return 200, new.to_json(secure=True)

    @service_call
    def delete_lecture(self, school_id, token, course_id, starting_time):
        user = self._user_from_token(school_id, token)
        self._check_editor(school_id, user, course_id, "User is not a teacher or admin")
        result = self.tables.lectures.delete(school_id, course_id, starting_time)
        expect(result, "delete lecture", NOT_APPLIED=(404, "Lecture not found"))
        return 200, {}

    # ==========================================
    # PREGUNTAS
    # ==========================================

    @service_call
    def create_question(self, school_id, token, course_id, text):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_member(school_id, user, course_id, message="User is not in the course")
        if not text or len(text) > MAX_QUESTION_LENGTH:
            raise ServiceError(400, "Invalid question")

        question = Question(school_id, new_id(), text, now(), user.user_id)
        expect(self.tables.questions.create(question), "create question")
        result = self.tables.questions_by_course.link(school_id, course_id, question.id)
        if not result.ok:
            logger.error("Question %s left without course %s", question.id, course_id)
            raise internal_error("add question to course", result)

        response = question.to_json(secure=True)
        response["created_by_user_name"] = f"{user.first_name} {user.last_name}"
        response["answers"] = []
        return 201, response

    @service_call
    def get_questions_by_course(self, school_id, token, course_id):
        user = self._user_from_token(school_id, token)
        self._get_course(school_id, course_id)
        self._check_member(school_id, user, course_id)

        questions = []
        for question_id in self._members(self.tables.questions_by_course, school_id, course_id):
            result, question = self.tables.questions.get(school_id, question_id)
            if result.code == ResultCode.NOT_FOUND:
                logger.warning("Dangling question %s in course %s", question_id, course_id)
                continue
            expect(result, "get question")
            questions.append(question)

        response = []
        for question in sorted(questions, key=lambda q: q.time_added):
            value = question.to_json(secure=True)
            value["created_by_user_name"] = self._user_name(school_id, question.added_by_user_id)
            value["answers"] = self._answers_json(school_id, question.id, AnswerOwnerType.QUESTION)
            response.append(value)
        return 200, response

    @service_call
    def delete_question(self, school_id, token, course_id, question_id):
        user = self._user_from_token(school_id, token)
        if question_id not in self._members(self.tables.questions_by_course, school_id, course_id):
            raise ServiceError(404, "Question is not in the course")

        result, question = self.tables.questions.get(school_id, question_id)
        expect(result, "get question", NOT_FOUND=(404, "Question not found"))
        if question.added_by_user_id != user.user_id and not user.is_admin:
            raise ServiceError(403, "User is not the creator of the question")

        self._delete_question(school_id, course_id, question_id)
        return 200, {}

    # ==========================================
    # RESPUESTAS
    # ==========================================

    def _check_answer_owner(self, school_id, user, owner_id, owner_type):
        """Pregunta de un curso del usuario, o anuncio visible que acepta respuestas."""
        if owner_type == AnswerOwnerType.QUESTION:
            course_id = self._course_of_question(school_id, owner_id)
            self._check_member(school_id, user, course_id, message="User is not in the course")
            return
        announcement = self._find_announcement(school_id, owner_id)
        if announcement is None:
            raise ServiceError(404, "The announcement does not exist")
        self._check_announcement_access(school_id, user, announcement)
        if not announcement.allow_answers:
            raise ServiceError(403, "The announcement does not allow answers")

    def _answer_owner_type(self, owner_type):
        try:
            return AnswerOwnerType(owner_type)
        except ValueError:
            raise ServiceError(400, "Invalid answer owner type") from None

    @service_call
    def create_answer(self, school_id, token, owner_id, owner_type, content):
        user = self._user_from_token(school_id, token)
        owner_type = self._answer_owner_type(owner_type)
        self._check_answer_owner(school_id, user, owner_id, owner_type)
        return 201, self._create_answer(user, owner_id, owner_type, content)

    @service_call
    def get_answers(self, school_id, token, owner_id, owner_type):
        user = self._user_from_token(school_id, token)
        owner_type = self._answer_owner_type(owner_type)
        if owner_type == AnswerOwnerType.QUESTION:
            course_id = self._course_of_question(school_id, owner_id)
            self._check_member(school_id, user, course_id)
        else:
            announcement = self._find_announcement(school_id, owner_id)
            if announcement is None:
                raise ServiceError(404, "The announcement does not exist")
            self._check_announcement_access(school_id, user, announcement)
        return 200, self._answers_json(school_id, owner_id, owner_type)

    @service_call
    def delete_answer(self, school_id, token, owner_id, owner_type, answer_id):
        user = self._user_from_token(school_id, token)
        owner_type = self._answer_owner_type(owner_type)
        self._remove_answer(user, owner_id, owner_type, answer_id)
        return 200, {}
