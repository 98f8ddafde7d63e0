import uuid

from schoolhub.models import TodoType


def _create(ctx, school_id, account, text="Corregir parciales", todo_type=TodoType.NOT_STARTED):
    result = ctx.todos.create_todo(school_id, account.token, text, todo_type)
    assert result.status == 201
    return uuid.UUID(result.payload["id"])


def test_todo_lifecycle(ctx, school_id, teacher):
    todo_id = _create(ctx, school_id, teacher)

    todo = ctx.todos.get_todo(school_id, teacher.token, todo_id).payload
    assert todo["text"] == "Corregir parciales"
    assert todo["type"] == TodoType.NOT_STARTED

    assert ctx.todos.update_todo(school_id, teacher.token, todo_id, todo_type=TodoType.DONE).status == 200
    assert ctx.todos.get_todo(school_id, teacher.token, todo_id).payload["type"] == TodoType.DONE

    assert ctx.todos.delete_todo(school_id, teacher.token, todo_id).status == 200
    assert ctx.todos.get_all_todos(school_id, teacher.token).payload == []


def test_todos_are_private(ctx, school_id, teacher, student):
    todo_id = _create(ctx, school_id, teacher)
    result = ctx.todos.get_todo(school_id, student.token, todo_id)
    assert result.status == 404
    assert result.payload == {"error": "The todo is not in the list of todos of the user"}
    assert ctx.todos.delete_todo(school_id, student.token, todo_id).status == 404


def test_empty_text_is_rejected(ctx, school_id, student):
    assert ctx.todos.create_todo(school_id, student.token, "").payload == {"error": "The text is empty"}
    todo_id = _create(ctx, school_id, student)
    assert ctx.todos.update_todo(school_id, student.token, todo_id, text="").status == 400


def test_invalid_todo_type(ctx, school_id, student):
    assert ctx.todos.create_todo(school_id, student.token, "Leer", 9).status == 400


def test_get_all_todos(ctx, school_id, student):
    _create(ctx, school_id, student, "Uno")
    _create(ctx, school_id, student, "Dos")
    texts = {t["text"] for t in ctx.todos.get_all_todos(school_id, student.token).payload}
    assert texts == {"Uno", "Dos"}
