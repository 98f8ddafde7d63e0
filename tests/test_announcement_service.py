import uuid

import pytest


@pytest.fixture
def tag_id(ctx, school_id, teacher, student):
    """Tag '5to A' con el alumno asignado."""
    tag = uuid.UUID(ctx.tags.create_tag(school_id, teacher.token, "5to A", "blue").payload["id"])
    ctx.tags.create_tag_user_relation(school_id, teacher.token, tag, student.id)
    return tag


def _announce(ctx, school_id, account, tag_ids=(), allow_answers=True, title="Acto"):
    result = ctx.announcements.create_announcement(
        school_id, account.token, title, "El viernes a las 10", allow_answers, tag_ids)
    assert result.status == 201
    return uuid.UUID(result.payload["id"])


def test_students_cannot_announce(ctx, school_id, student):
    result = ctx.announcements.create_announcement(school_id, student.token, "Hola", "Chau")
    assert result.status == 403


def test_announcement_validation(ctx, school_id, teacher):
    announcements = ctx.announcements
    assert announcements.create_announcement(school_id, teacher.token, "", "x").status == 400
    assert announcements.create_announcement(school_id, teacher.token, "T", "").status == 400
    missing_tag = announcements.create_announcement(school_id, teacher.token, "T", "x",
                                                    tag_ids=[uuid.uuid1()])
    assert missing_tag.payload == {"error": "The tag does not exist"}


def test_visibility_by_tag(ctx, school_id, teacher, student, other_student, tag_id):
    announcement_id = _announce(ctx, school_id, teacher, [tag_id])

    seen = ctx.announcements.get_announcements(school_id, student.token).payload
    assert [a["id"] for a in seen] == [str(announcement_id)]
    assert seen[0]["created_by_user_name"] == "Tomas Teacher"

    assert ctx.announcements.get_announcements(school_id, other_student.token).payload == []
    result = ctx.announcements.get_announcement(school_id, other_student.token, announcement_id)
    assert result.payload == {"error": "The user does not have access to the announcement"}


def test_authors_and_admins_see_their_announcements(ctx, school_id, admin, teacher):
    announcement_id = _announce(ctx, school_id, teacher)
    own = ctx.announcements.get_announcements(school_id, teacher.token).payload
    assert [a["id"] for a in own] == [str(announcement_id)]
    everything = ctx.announcements.get_announcements(school_id, admin.token).payload
    assert [a["id"] for a in everything] == [str(announcement_id)]


def test_newest_announcements_first(ctx, school_id, teacher, monkeypatch):
    clock = iter([1000, 2000])
    monkeypatch.setattr("schoolhub.services.announcement_service.now", lambda: next(clock, 3000))
    first = _announce(ctx, school_id, teacher, title="Primero")
    second = _announce(ctx, school_id, teacher, title="Segundo")

    seen = ctx.announcements.get_announcements(school_id, teacher.token).payload
    assert [a["id"] for a in seen] == [str(second), str(first)]


def test_reading_announcements_updates_last_time_online(ctx, tables, school_id, student):
    tables.users.update((school_id, student.id), last_time_online=0)
    ctx.announcements.get_announcements(school_id, student.token)
    _, user = tables.users.get(school_id, student.id)
    assert user.last_time_online > 0


def test_announcement_tags(ctx, school_id, teacher, student, tag_id):
    announcement_id = _announce(ctx, school_id, teacher)
    announcements = ctx.announcements

    assert announcements.add_tag_to_announcement(school_id, teacher.token, announcement_id, tag_id).status == 200
    again = announcements.add_tag_to_announcement(school_id, teacher.token, announcement_id, tag_id)
    assert again.status == 409

    tags = announcements.get_announcement_tags(school_id, teacher.token, announcement_id).payload
    assert [t["id"] for t in tags] == [str(tag_id)]
    assert announcements.get_announcement_tags(school_id, student.token, announcement_id).status == 403

    removed = announcements.remove_tag_from_announcement(school_id, teacher.token, announcement_id, tag_id)
    assert removed.status == 200
    missing = announcements.remove_tag_from_announcement(school_id, teacher.token, announcement_id, tag_id)
    assert missing.status == 404


def test_answers_on_announcements(ctx, school_id, teacher, student, tag_id):
    announcement_id = _announce(ctx, school_id, teacher, [tag_id])
    announcements = ctx.announcements

    answer = announcements.create_answer(school_id, student.token, announcement_id, "Ahi estare")
    assert answer.status == 201
    assert answer.payload["announcement_id"] == str(announcement_id)

    listed = announcements.get_answers(school_id, teacher.token, announcement_id).payload
    assert [a["content"] for a in listed] == ["Ahi estare"]
    detail = announcements.get_announcement(school_id, student.token, announcement_id).payload
    assert len(detail["answers"]) == 1

    answer_id = uuid.UUID(answer.payload["id"])
    assert announcements.delete_answer(school_id, student.token, announcement_id, answer_id).status == 200
    assert announcements.get_answers(school_id, teacher.token, announcement_id).payload == []


def test_closed_announcements_reject_answers(ctx, school_id, teacher, student, tag_id):
    announcement_id = _announce(ctx, school_id, teacher, [tag_id], allow_answers=False)
    result = ctx.announcements.create_answer(school_id, student.token, announcement_id, "Hola")
    assert result.payload == {"error": "The announcement does not allow answers"}


def test_delete_announcement_cascades(ctx, tables, school_id, teacher, student, tag_id):
    announcement_id = _announce(ctx, school_id, teacher, [tag_id])
    ctx.announcements.create_answer(school_id, student.token, announcement_id, "Ok")

    assert ctx.announcements.delete_announcement(school_id, student.token, announcement_id).status == 403
    assert ctx.announcements.delete_announcement(school_id, teacher.token, announcement_id).status == 200

    assert ctx.announcements.get_announcement(school_id, teacher.token, announcement_id).status == 404
    assert tables.announcements_by_tag.list_members(school_id, tag_id)[1] == []
    assert tables.answers_by_owner.list_members(school_id, announcement_id, 0)[1] == []
