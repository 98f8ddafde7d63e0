from flask import Blueprint

from schoolhub.routes.common import authenticated, body, context, field, respond, uuid_value

todo_bp = Blueprint('todos', __name__)


@todo_bp.route('/', methods=['POST'])
@authenticated
def create_todo(session):
    """Body: {"text": "Corregir parciales", "type": 0}"""
    data = body()
    result = context().todos.create_todo(
        session.school_id, session.user_token,
        field(data, "text", str), field(data, "type", int, required=False, default=0))
    return respond(result)


@todo_bp.route('/', methods=['GET'])
@authenticated
def get_todos(session):
    return respond(context().todos.get_all_todos(session.school_id, session.user_token))


@todo_bp.route('/<todo_id>', methods=['GET'])
@authenticated
def get_todo(session, todo_id):
    return respond(context().todos.get_todo(session.school_id, session.user_token,
                                            uuid_value(todo_id, "todo id")))


@todo_bp.route('/<todo_id>', methods=['PUT'])
@authenticated
def update_todo(session, todo_id):
    data = body()
    result = context().todos.update_todo(
        session.school_id, session.user_token, uuid_value(todo_id, "todo id"),
        text=field(data, "text", str, required=False),
        todo_type=field(data, "type", int, required=False))
    return respond(result)


@todo_bp.route('/<todo_id>', methods=['DELETE'])
@authenticated
def delete_todo(session, todo_id):
    return respond(context().todos.delete_todo(session.school_id, session.user_token,
                                               uuid_value(todo_id, "todo id")))
