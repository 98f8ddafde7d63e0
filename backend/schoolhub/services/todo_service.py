import logging

from schoolhub.models import Todo, TodoType
from schoolhub.services.base import ServiceError, expect, internal_error, new_id, service_call
from schoolhub.services.relations import RelationsService

logger = logging.getLogger(__name__)

NOT_IN_LIST = "The todo is not in the list of todos of the user"


class TodoService(RelationsService):

    def _todo_type(self, todo_type):
        try:
            return TodoType(todo_type)
        except ValueError:
            raise ServiceError(400, "Invalid todo type") from None

    def _check_owner(self, school_id, user, todo_id):
        if todo_id not in self._members(self.tables.todos_by_user, school_id, user.user_id):
            raise ServiceError(404, NOT_IN_LIST)

    def _get_todo(self, school_id, todo_id):
        result, todo = self.tables.todos.get(school_id, todo_id)
        expect(result, "get todo", NOT_FOUND=(404, "The todo does not exist"))
        return todo

    @service_call
    def create_todo(self, school_id, token, text, todo_type=TodoType.NOT_STARTED):
        user = self._user_from_token(school_id, token)
        if not text:
            raise ServiceError(400, "The text is empty")

        todo = Todo(school_id, new_id(), text, self._todo_type(todo_type))
        expect(self.tables.todos.create(todo), "create todo")

        result = self.tables.todos_by_user.link(school_id, user.user_id, todo.id)
        if not result.ok:
            logger.error("Todo %s left without owner %s", todo.id, user.user_id)
            raise internal_error("link todo to user", result)
        return 201, {"id": str(todo.id)}

    @service_call
    def get_todo(self, school_id, token, todo_id):
        user = self._user_from_token(school_id, token)
        self._check_owner(school_id, user, todo_id)
        return 200, self._get_todo(school_id, todo_id).to_json()

    @service_call
    def get_all_todos(self, school_id, token):
        user = self._user_from_token(school_id, token)
        todos = []
        for todo_id in self._members(self.tables.todos_by_user, school_id, user.user_id):
            todos.append(self._get_todo(school_id, todo_id).to_json())
        return 200, todos

    @service_call
    def update_todo(self, school_id, token, todo_id, text=None, todo_type=None):
        user = self._user_from_token(school_id, token)
        self._check_owner(school_id, user, todo_id)
        todo = self._get_todo(school_id, todo_id)

        if text is not None:
            if not text:
                raise ServiceError(400, "The text is empty")
            todo.text = text
        if todo_type is not None:
            todo.type = self._todo_type(todo_type)

        result = self.tables.todos.update((school_id, todo_id), text=todo.text, type=todo.type)
        expect(result, "update todo", NOT_APPLIED=(404, "The todo does not exist"))
        return 200, {}

    @service_call
    def delete_todo(self, school_id, token, todo_id):
        user = self._user_from_token(school_id, token)
        self._check_owner(school_id, user, todo_id)

        result = self.tables.todos_by_user.unlink(school_id, user.user_id, todo_id)
        expect(result, "unlink todo", NOT_APPLIED=(404, NOT_IN_LIST))
        result = self.tables.todos.delete(school_id, todo_id)
        expect(result, "delete todo", NOT_APPLIED=(404, "The todo does not exist"))
        return 200, {}
