"""
Lecturas, respuestas y borrados en cascada que comparten varios servicios.

Ninguna cascada es atómica: el primer fallo corta con ServiceError (500) y
las filas ya borradas quedan borradas.
"""
import logging

from schoolhub.cql.result import ResultCode
from schoolhub.models import Answer, AnswerOwnerType, UserType
from schoolhub.services.base import (
    BaseService, ServiceError, expect, internal_error, listing, new_id, now, tolerate,
)

logger = logging.getLogger(__name__)

GONE = (ResultCode.NOT_APPLIED, ResultCode.NOT_FOUND)


class RelationsService(BaseService):

    # ==========================================
    # LECTURAS
    # ==========================================

    def _members(self, relation, *partition):
        result, members = relation.list_members(*partition)
        expect(result, f"list {relation.spec.name}")
        return members

    def _find_answer(self, school_id, answer_id):
        result, rows = self.tables.answers.get_many("by_id", school_id, answer_id)
        rows = listing(result, rows, "get answer")
        return rows[0] if rows else None

    def _get_answer(self, school_id, answer_id):
        answer = self._find_answer(school_id, answer_id)
        if answer is None:
            raise ServiceError(404, "Answer not found")
        return answer

    def _answers_of(self, school_id, owner_id, owner_type):
        answers = []
        for answer_id in self._members(self.tables.answers_by_owner, school_id, owner_id, owner_type):
            answer = self._find_answer(school_id, answer_id)
            if answer is None:
                logger.warning("Dangling answer %s under %s", answer_id, owner_id)
                continue
            answers.append(answer)
        answers.sort(key=lambda a: a.created_at)
        return answers

    def _get_course(self, school_id, course_id):
        result, course = self.tables.courses.get(school_id, course_id)
        expect(result, "get course", NOT_FOUND=(404, "Course not found"))
        return course

    def _find_user(self, school_id, user_id):
        result, user = self.tables.users.get(school_id, user_id)
        if result.code == ResultCode.NOT_FOUND:
            return None
        expect(result, "get user")
        return user

    def _find_announcement(self, school_id, announcement_id):
        result, rows = self.tables.announcements.get_many("by_id", school_id, announcement_id)
        rows = listing(result, rows, "get announcement")
        return rows[0] if rows else None

    def _check_announcement_access(self, school_id, user, announcement):
        """Administrador, autor, o alguien con un tag del anuncio."""
        if user.is_admin or announcement.created_by == user.user_id:
            return
        result, tag_ids = self.tables.announcements_by_tag.list_owners(school_id, announcement.id)
        expect(result, "list tags of announcement")
        user_tags = set(self._members(self.tables.tags_by_user, school_id, user.user_id))
        if user_tags.isdisjoint(tag_ids):
            raise ServiceError(403, "The user does not have access to the announcement")

    def _course_members(self, school_id, course_id):
        return self._members(self.tables.users_by_course, school_id, course_id)

    def _is_member(self, school_id, course_id, user_id):
        return user_id in self._course_members(school_id, course_id)

    # ==========================================
    # CASCADAS
    # ==========================================

    def _delete_answer(self, school_id, owner_id, owner_type, answer_id):
        tolerate(self.tables.answers.delete_many("by_id", school_id, answer_id),
                 "delete answer", *GONE)
        tolerate(self.tables.answers_by_owner.unlink(school_id, owner_id, owner_type, answer_id),
                 "unlink answer", *GONE)

    def _delete_answers_of(self, school_id, owner_id, owner_type, only_by=None):
        """Borra las respuestas de una pregunta/anuncio, o sólo las de un autor."""
        for answer_id in self._members(self.tables.answers_by_owner, school_id, owner_id, owner_type):
            if only_by is not None:
                answer = self._find_answer(school_id, answer_id)
                if answer is not None and answer.created_by != only_by:
                    continue
            self._delete_answer(school_id, owner_id, owner_type, answer_id)
        if only_by is None:
            expect(self.tables.answers_by_owner.unlink_all(school_id, owner_id, owner_type),
                   "unlink answers")

    def _delete_question(self, school_id, course_id, question_id):
        self._delete_answers_of(school_id, question_id, AnswerOwnerType.QUESTION)
        tolerate(self.tables.questions.delete(school_id, question_id), "delete question", *GONE)
        tolerate(self.tables.questions_by_course.unlink(school_id, course_id, question_id),
                 "unlink question from course", *GONE)

    def _delete_posts_of_user(self, school_id, course_id, user_id):
        """Preguntas del usuario (con todas sus respuestas) y sus respuestas a otras preguntas."""
        for question_id in self._members(self.tables.questions_by_course, school_id, course_id):
            result, question = self.tables.questions.get(school_id, question_id)
            if result.code == ResultCode.NOT_FOUND:
                continue
            expect(result, "get question")
            if question.added_by_user_id == user_id:
                self._delete_question(school_id, course_id, question_id)
            else:
                self._delete_answers_of(school_id, question_id, AnswerOwnerType.QUESTION,
                                        only_by=user_id)

    def _unlink_user_courses(self, school_id, user_id):
        for course_id in self._members(self.tables.courses_by_user, school_id, user_id):
            tolerate(self.tables.users_by_course.unlink(school_id, course_id, user_id),
                     "unlink user from course", *GONE)
        expect(self.tables.courses_by_user.unlink_all(school_id, user_id), "unlink courses of user")

    def _unlink_user_tags(self, school_id, user_id):
        for tag_id in self._members(self.tables.tags_by_user, school_id, user_id):
            tolerate(self.tables.users_by_tag.unlink(school_id, tag_id, user_id),
                     "unlink user from tag", *GONE)
        expect(self.tables.tags_by_user.unlink_all(school_id, user_id), "unlink tags of user")

    def _delete_todos_of(self, school_id, user_id):
        for todo_id in self._members(self.tables.todos_by_user, school_id, user_id):
            tolerate(self.tables.todos.delete(school_id, todo_id), "delete todo", *GONE)
        expect(self.tables.todos_by_user.unlink_all(school_id, user_id), "unlink todos of user")

    def _delete_grades(self, school_id, select_name, *params):
        result, grades = self.tables.grades.get_many(select_name, school_id, *params)
        for grade in listing(result, grades, f"list grades {select_name}"):
            tolerate(self.tables.grades.delete(school_id, grade.id), "delete grade", *GONE)

    def _delete_grades_of_user(self, school_id, user):
        if user.user_type == UserType.STUDENT:
            self._delete_grades(school_id, "by_student", user.user_id)
        elif user.user_type == UserType.TEACHER:
            self._delete_grades(school_id, "by_evaluator", user.user_id)

    def _delete_files(self, school_id, file_ids):
        for file_id in file_ids:
            result, row = self.tables.files.get(school_id, file_id)
            if result.code == ResultCode.NOT_FOUND:
                continue
            expect(result, "get file")
            # Las carpetas se borran con todo su contenido
            self._delete_files(school_id, row.files)
            tolerate(self.tables.files.delete(school_id, file_id), "delete file", *GONE)

    # ==========================================
    # RESPUESTAS
    # ==========================================

    def _user_name(self, school_id, user_id):
        user = self._find_user(school_id, user_id)
        return f"{user.first_name} {user.last_name}" if user is not None else ""

    def _answer_json(self, answer, owner_id, owner_type):
        value = answer.to_json(secure=True)
        value["created_by_user_id"] = str(answer.created_by)
        value["created_by_user_name"] = self._user_name(answer.school_id, answer.created_by)
        value[f"{owner_type.name.lower()}_id"] = str(owner_id)
        return value

    def _answers_json(self, school_id, owner_id, owner_type):
        return [self._answer_json(a, owner_id, owner_type)
                for a in self._answers_of(school_id, owner_id, owner_type)]

    def _create_answer(self, user, owner_id, owner_type, content):
        if not content:
            raise ServiceError(400, "The answer is empty")
        answer = Answer(user.school_id, new_id(), now(), user.user_id, content)
        expect(self.tables.answers.create(answer), "create answer")

        result = self.tables.answers_by_owner.link(user.school_id, owner_id, owner_type, answer.id)
        if not result.ok:
            logger.error("Answer %s left without owner %s", answer.id, owner_id)
            raise internal_error("link answer", result)
        return self._answer_json(answer, owner_id, owner_type)

    def _remove_answer(self, user, owner_id, owner_type, answer_id):
        """Solo el autor o un administrador borran una respuesta."""
        answer = self._get_answer(user.school_id, answer_id)
        if answer.created_by != user.user_id and not user.is_admin:
            raise ServiceError(403, "You are not allowed to delete this answer")
        if answer_id not in self._members(self.tables.answers_by_owner,
                                          user.school_id, owner_id, owner_type):
            raise ServiceError(404, "Answer not found")
        self._delete_answer(user.school_id, owner_id, owner_type, answer_id)
