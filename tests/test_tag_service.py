import uuid

import pytest

from schoolhub.services.base import ServiceError
from schoolhub.services.tag_service import validate_tag


def _create(ctx, school_id, account, value="5to A", colour="blue"):
    result = ctx.tags.create_tag(school_id, account.token, value, colour)
    assert result.status == 201
    return uuid.UUID(result.payload["id"])


def test_validate_tag():
    validate_tag("5to A", "teal")
    with pytest.raises(ServiceError):
        validate_tag("", "teal")
    with pytest.raises(ServiceError):
        validate_tag("5to A", "magenta")


def test_students_cannot_manage_tags(ctx, school_id, student):
    result = ctx.tags.create_tag(school_id, student.token, "5to A", "blue")
    assert result.status == 403
    assert result.payload == {"error": "You are not allowed to create tags"}


def test_tag_crud(ctx, school_id, teacher):
    tag_id = _create(ctx, school_id, teacher)
    assert ctx.tags.get_tag(school_id, teacher.token, tag_id).payload == {
        "id": str(tag_id), "name": "5to A", "colour": "blue"}

    assert ctx.tags.update_tag(school_id, teacher.token, tag_id).status == 400
    assert ctx.tags.update_tag(school_id, teacher.token, tag_id, colour="red").status == 200
    assert ctx.tags.get_tag(school_id, teacher.token, tag_id).payload["colour"] == "red"

    assert len(ctx.tags.get_all_tags(school_id, teacher.token).payload) == 1
    assert ctx.tags.delete_tag(school_id, teacher.token, tag_id).status == 200
    assert ctx.tags.get_tag(school_id, teacher.token, tag_id).status == 404


def test_tag_user_relation(ctx, school_id, teacher, student):
    tag_id = _create(ctx, school_id, teacher)
    assert ctx.tags.create_tag_user_relation(school_id, teacher.token, tag_id, student.id).status == 200
    again = ctx.tags.create_tag_user_relation(school_id, teacher.token, tag_id, student.id)
    assert again.payload == {"error": "The user already has this tag"}

    users = ctx.tags.get_users_by_tag(school_id, teacher.token, tag_id).payload
    assert [u["user_id"] for u in users] == [str(student.id)]
    own = ctx.tags.get_tags_by_user(school_id, student.token).payload
    assert [t["id"] for t in own] == [str(tag_id)]

    assert ctx.tags.delete_tag_user_relation(school_id, teacher.token, tag_id, student.id).status == 200
    missing = ctx.tags.delete_tag_user_relation(school_id, teacher.token, tag_id, student.id)
    assert missing.payload == {"error": "No relation found"}


def test_only_teachers_see_other_users_tags(ctx, school_id, teacher, student, other_student):
    _create(ctx, school_id, teacher)
    assert ctx.tags.get_tags_by_user(school_id, student.token, other_student.id).status == 403
    assert ctx.tags.get_tags_by_user(school_id, teacher.token, student.id).payload == []


def test_relation_with_unknown_user(ctx, school_id, teacher):
    tag_id = _create(ctx, school_id, teacher)
    result = ctx.tags.create_tag_user_relation(school_id, teacher.token, tag_id, uuid.uuid1())
    assert result.status == 404


def test_delete_tag_unlinks_users_and_announcements(ctx, tables, school_id, teacher, student):
    tag_id = _create(ctx, school_id, teacher)
    ctx.tags.create_tag_user_relation(school_id, teacher.token, tag_id, student.id)
    ctx.announcements.create_announcement(school_id, teacher.token, "Acto", "El viernes",
                                          tag_ids=[tag_id])

    assert ctx.tags.delete_tag(school_id, teacher.token, tag_id).status == 200
    assert tables.tags_by_user.list_members(school_id, student.id)[1] == []
    assert tables.announcements_by_tag.list_members(school_id, tag_id)[1] == []
