import logging
import uuid

from schoolhub.cql.result import ResultCode
from schoolhub.cql.schema import COUNTRIES, USERS
from schoolhub.cql.table import CqlTable
from schoolhub.models import Country, Holiday, HolidayType, Lecture, Token, User, UserType


def _user(school_id=1, email="ana@school.test"):
    return User(school_id, uuid.uuid1(), email, "hash", UserType.STUDENT, False, "Ana", "Diaz",
                "555-1234", 1700000000)


def test_create_and_get_round_trip(tables):
    user = _user()
    assert tables.users.create(user).ok

    result, stored = tables.users.get(1, user.user_id)
    assert result.ok
    assert stored == user


def test_duplicate_create_is_not_applied(tables):
    country = Country(1, "Romania", "RO")
    assert tables.countries.create(country).ok
    assert tables.countries.create(Country(1, "Other", "OT")).code == ResultCode.NOT_APPLIED

    _, stored = tables.countries.get(1)
    assert stored.name == "Romania"


def test_get_absent_is_not_found(tables):
    result, row = tables.countries.get(42)
    assert result.code == ResultCode.NOT_FOUND
    assert row is None


def test_update_and_delete_absent_are_not_applied(tables):
    assert tables.countries.update((42,), name="Nowhere").code == ResultCode.NOT_APPLIED
    assert tables.countries.delete(42).code == ResultCode.NOT_APPLIED


def test_update_by_attribute_name(tables):
    user = _user()
    tables.users.create(user)

    assert tables.users.update((1, user.user_id), phone_number="999", user_type=UserType.TEACHER).ok
    _, stored = tables.users.get(1, user.user_id)
    assert stored.phone_number == "999"
    assert stored.user_type == UserType.TEACHER


def test_update_of_a_key_column_is_rejected(tables):
    tables.holidays.create(Holiday(1, HolidayType.NATIONAL, 1703462400, "Christmas"))
    result = tables.holidays.update((1, HolidayType.NATIONAL, 1703462400), date=1703548800)
    assert result.code == ResultCode.INVALID_REQUEST


def test_update_of_an_unknown_column_is_rejected(tables):
    tables.countries.create(Country(1, "Romania", "RO"))
    assert tables.countries.update((1,), population=19).code == ResultCode.INVALID_REQUEST
    assert tables.countries.update((1,)).code == ResultCode.INVALID_REQUEST


def test_timestamps_round_trip_as_seconds(tables):
    course_id = uuid.uuid1()
    tables.lectures.create(Lecture(1, course_id, 1700000000, 90, "Aula 3"))

    result, lecture = tables.lectures.get(1, course_id, 1700000000)
    assert result.ok
    assert lecture.starting_time == 1700000000


def test_get_many_on_an_empty_table_is_not_found(tables):
    result, rows = tables.countries.get_many("all")
    assert result.code == ResultCode.NOT_FOUND
    assert rows == []


def test_get_many_by_non_key_column(tables):
    tables.users.create(_user(email="a@school.test"))
    tables.users.create(_user(email="b@school.test"))

    result, users = tables.users.get_many("by_email", 1, "b@school.test")
    assert result.ok
    assert [u.email for u in users] == ["b@school.test"]


def test_clustering_order_is_respected(tables):
    for date in (1703548800, 1703462400, 1704067200):
        tables.holidays.create(Holiday(1, HolidayType.NATIONAL, date, f"h{date}"))

    _, holidays = tables.holidays.get_many("by_owner", 1, HolidayType.NATIONAL)
    assert [h.date for h in holidays] == [1703462400, 1703548800, 1704067200]


def test_delete_many_by_partition(tables):
    for date in (1703462400, 1703548800):
        tables.holidays.create(Holiday(1, HolidayType.NATIONAL, date, "h"))
    tables.holidays.create(Holiday(1, HolidayType.CUSTOM, 1703462400, "school"))

    assert tables.holidays.delete_many("by_owner", 1, HolidayType.NATIONAL).ok
    assert tables.holidays.get_many("by_owner", 1, HolidayType.NATIONAL)[0].code == ResultCode.NOT_FOUND
    assert tables.holidays.get_many("by_owner", 1, HolidayType.CUSTOM)[0].ok


def test_token_insert_carries_ttl(tables, session):
    token = Token(1, "abc", uuid.uuid1())
    assert tables.tokens.create(token, ttl=3600).ok
    assert list(session.tables["schools.tokens"].ttls.values()) == [3600]


def test_relationship_listing_empty_is_ok(tables):
    result, members = tables.users_by_course.list_members(1, uuid.uuid1())
    assert result.ok
    assert members == []


def test_relationship_link_list_unlink(tables):
    course_id, first, second = uuid.uuid1(), uuid.uuid1(), uuid.uuid1()
    assert tables.users_by_course.link(1, course_id, first).ok
    assert tables.users_by_course.link(1, course_id, second).ok
    assert tables.users_by_course.link(1, course_id, first).code == ResultCode.NOT_APPLIED

    _, members = tables.users_by_course.list_members(1, course_id)
    assert set(members) == {first, second}

    assert tables.users_by_course.unlink(1, course_id, first).ok
    assert tables.users_by_course.unlink(1, course_id, first).code == ResultCode.NOT_APPLIED
    assert tables.users_by_course.list_members(1, course_id)[1] == [second]

    assert tables.users_by_course.unlink_all(1, course_id).ok
    assert tables.users_by_course.list_members(1, course_id)[1] == []


def test_relationship_reverse_lookup(tables):
    course_id, question_id = uuid.uuid1(), uuid.uuid1()
    tables.questions_by_course.link(1, course_id, question_id)

    result, owners = tables.questions_by_course.list_owners(1, question_id)
    assert result.ok
    assert owners == [course_id]


def test_filtering_is_only_added_when_needed(tables):
    assert tables.users.select_cql(("school", "email")).endswith("ALLOW FILTERING")
    # school es sólo parte de la partición (school, id)
    assert tables.users.select_cql(("school",)).endswith("ALLOW FILTERING")
    assert not tables.users.select_cql(USERS.partition_key).endswith("ALLOW FILTERING")
    assert not tables.lectures.select_cql(("school", "course_id")).endswith("ALLOW FILTERING")


def test_unconfigured_table_reports_unknown_error(client):
    table = CqlTable(client, COUNTRIES)
    result, row = table.get(1)
    assert result.code == ResultCode.UNKNOWN_ERROR
    assert row is None


def test_wrongly_typed_column_is_reported(tables, session):
    session.rows("environment.countries").append({"id": 7, "name": 12, "code": "XX"})
    result, row = tables.countries.get(7)
    assert result.code == ResultCode.UNKNOWN_ERROR
    assert row is None


def test_unbindable_record_is_invalid_request(tables):
    assert tables.countries.create(Country("seven", "Nowhere", "NW")).code == ResultCode.INVALID_REQUEST


def test_timestamp_out_of_range_is_invalid_request(tables, session):
    executed = len(session.executed)

    result, row = tables.holidays.get(1, 0, 10**20)

    assert result.code == ResultCode.INVALID_REQUEST
    assert "column date" in result.message
    assert row is None
    assert len(session.executed) == executed


def test_int_outside_32_bits_is_invalid_request(tables):
    result, row = tables.countries.get(2**40)
    assert result.code == ResultCode.INVALID_REQUEST
    assert row is None

    assert tables.countries.create(Country(2**31, "Lejos", "LJ")).code == ResultCode.INVALID_REQUEST
    assert tables.countries.create(Country(2**31 - 1, "Borde", "BD")).ok


def test_holiday_with_huge_date_is_rejected_on_every_write(tables):
    holiday = Holiday(1, HolidayType.NATIONAL, 10**20, "Far")
    assert tables.holidays.create(holiday).code == ResultCode.INVALID_REQUEST
    assert tables.holidays.delete(1, 0, 10**20).code == ResultCode.INVALID_REQUEST
    assert tables.holidays.update((1, 0, 10**20), name="Far").code == ResultCode.INVALID_REQUEST


def test_row_count_is_logged_once_per_select(tables, caplog):
    tables.countries.create(Country(1, "Romania", "RO"))
    tables.countries.create(Country(2, "Chile", "CL"))

    with caplog.at_level(logging.DEBUG, logger="schoolhub.cql.table"):
        result, countries = tables.countries.get_many("all")

    assert result.ok and len(countries) == 2
    assert caplog.messages.count("environment.countries: 2 row(s) selected") == 1
