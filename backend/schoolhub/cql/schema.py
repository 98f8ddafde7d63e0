"""
Catálogo de tablas.

Cada entidad se describe con un TableSpec; build_tables instancia todas las
tablas sobre un mismo CqlClient y configure_tables las deja listas (esquema
opcional + sentencias preparadas).
"""
import logging
from dataclasses import dataclass, fields

from schoolhub.cql.codecs import (
    BOOLEAN, FLOAT, INT, TEXT, TIMESTAMP, UUID_CODEC, UUID_LIST, VARCHAR,
)
from schoolhub.cql.result import OK
from schoolhub.cql.table import Column, CqlTable, RelationTable, TableSpec, relation_spec
from schoolhub.models import (
    Announcement, Answer, Country, Course, File, Grade, Holiday, Lecture,
    Question, School, StudentReference, Tag, Todo, Token, User,
)

logger = logging.getLogger(__name__)

ENVIRONMENT_KEYSPACE = "environment"
SCHOOLS_KEYSPACE = "schools"

SCHOOL = Column("school", INT, attr="school_id")

# ==========================================
# KEYSPACE environment
# ==========================================

COUNTRIES = TableSpec(
    keyspace=ENVIRONMENT_KEYSPACE,
    name="countries",
    columns=(Column("id", INT), Column("name", TEXT), Column("code", TEXT)),
    partition_key=("id",),
    factory=Country,
    selects={"all": ()},
)

SCHOOLS = TableSpec(
    keyspace=ENVIRONMENT_KEYSPACE,
    name="schools",
    columns=(
        Column("id", INT),
        Column("name", TEXT),
        Column("country", INT, attr="country_id"),
        Column("image_path", TEXT),
    ),
    partition_key=("id",),
    factory=School,
    selects={"all": ()},
)

HOLIDAYS = TableSpec(
    keyspace=ENVIRONMENT_KEYSPACE,
    name="holidays_by_country_or_school",
    columns=(
        Column("country_or_school_id", INT),
        Column("type", INT),
        Column("date", TIMESTAMP),
        Column("name", TEXT),
    ),
    partition_key=("country_or_school_id", "type"),
    clustering_key=("date",),
    factory=Holiday,
    selects={"by_owner": ("country_or_school_id", "type")},
    deletes={"by_owner": ("country_or_school_id", "type")},
)

# ==========================================
# KEYSPACE schools
# ==========================================

USERS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="users",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC, attr="user_id"),
        Column("email", TEXT),
        Column("password", TEXT),
        Column("type", INT, attr="user_type"),
        Column("changed_password", BOOLEAN),
        Column("first_name", TEXT),
        Column("last_name", TEXT),
        Column("phone_nr", TEXT, attr="phone_number"),
        Column("last_time_online", TIMESTAMP),
    ),
    partition_key=("school", "id"),
    factory=User,
    selects={"by_school": ("school",), "by_email": ("school", "email")},
)

TOKENS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="tokens",
    columns=(SCHOOL, Column("value", VARCHAR), Column("user_id", UUID_CODEC)),
    partition_key=("school", "value"),
    factory=Token,
    selects={"by_user": ("school", "user_id")},
    insert_ttl=True,
)

TODOS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="todos",
    columns=(SCHOOL, Column("id", UUID_CODEC), Column("text", TEXT), Column("type", INT)),
    partition_key=("school", "id"),
    factory=Todo,
)

TAGS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="tags",
    columns=(SCHOOL, Column("id", UUID_CODEC), Column("value", TEXT), Column("colour", TEXT)),
    partition_key=("school", "id"),
    factory=Tag,
    selects={"by_school": ("school",)},
)

COURSES = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="courses",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("name", TEXT),
        Column("course_thumbnail", TEXT),
        Column("created_at", TIMESTAMP),
        Column("start_date", TIMESTAMP),
        Column("end_date", TIMESTAMP),
        Column("files", UUID_LIST),
    ),
    partition_key=("school", "id"),
    factory=Course,
    selects={"by_school": ("school",)},
)

LECTURES = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="lectures",
    columns=(
        SCHOOL,
        Column("course_id", UUID_CODEC),
        Column("starting_time", TIMESTAMP),
        Column("duration", INT),
        Column("location", TEXT),
    ),
    partition_key=("school", "course_id"),
    clustering_key=("starting_time",),
    factory=Lecture,
    selects={"by_course": ("school", "course_id")},
    deletes={"by_course": ("school", "course_id")},
)

GRADES = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="grades",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("evaluated_id", UUID_CODEC),
        Column("evaluator_id", UUID_CODEC),
        Column("course_id", UUID_CODEC),
        Column("value", INT, attr="grade"),
        Column("out_of", INT),
        Column("created_at", TIMESTAMP),
        Column("weight", FLOAT),
    ),
    partition_key=("school", "id"),
    factory=Grade,
    selects={
        "by_student": ("school", "evaluated_id"),
        "by_evaluator": ("school", "evaluator_id"),
        "by_course": ("school", "course_id"),
        "by_student_and_course": ("school", "evaluated_id", "course_id"),
    },
)

QUESTIONS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="questions",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("text", TEXT),
        Column("time_added", TIMESTAMP),
        Column("added_by_user_id", UUID_CODEC),
    ),
    partition_key=("school", "id"),
    factory=Question,
)

ANSWERS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="answers",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("created_at", TIMESTAMP),
        Column("created_by", UUID_CODEC),
        Column("content", TEXT),
    ),
    partition_key=("school", "id"),
    clustering_key=("created_at",),
    clustering_order="DESC",
    factory=Answer,
    selects={"by_id": ("school", "id")},
    deletes={"by_id": ("school", "id")},
)

ANNOUNCEMENTS = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="announcements",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("created_at", TIMESTAMP),
        Column("created_by", UUID_CODEC),
        Column("title", TEXT),
        Column("content", TEXT),
        Column("allow_answers", BOOLEAN),
        Column("files", UUID_LIST),
    ),
    partition_key=("school", "id"),
    clustering_key=("created_at",),
    clustering_order="DESC",
    factory=Announcement,
    selects={
        "by_id": ("school", "id"),
        "by_school": ("school",),
        "by_creator": ("school", "created_by"),
    },
    deletes={"by_id": ("school", "id")},
)

FILES = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="files",
    columns=(
        SCHOOL,
        Column("id", UUID_CODEC),
        Column("type", INT),
        Column("files", UUID_LIST),
        Column("name", TEXT),
        Column("path_to_file", TEXT),
        Column("size", INT),
        Column("added_by_user", UUID_CODEC),
        Column("visible_to_students", BOOLEAN),
        Column("students_can_add", BOOLEAN),
    ),
    partition_key=("school", "id"),
    factory=File,
)

STUDENT_REFERENCES = TableSpec(
    keyspace=SCHOOLS_KEYSPACE,
    name="student_reference",
    columns=(
        SCHOOL,
        Column("student_id", UUID_CODEC),
        Column("reference", TEXT),
        Column("type", INT),
    ),
    partition_key=("school", "student_id"),
    clustering_key=("reference",),
    factory=StudentReference,
    selects={"by_student": ("school", "student_id")},
    deletes={"by_student": ("school", "student_id")},
)

# ==========================================
# TABLAS ÍNDICE
# ==========================================

COURSES_BY_USER = relation_spec(SCHOOLS_KEYSPACE, "courses_by_user", "user_id", "course_id")
USERS_BY_COURSE = relation_spec(SCHOOLS_KEYSPACE, "users_by_course", "course_id", "user_id")
TAGS_BY_USER = relation_spec(SCHOOLS_KEYSPACE, "tags_by_user", "user_id", "tag_id")
USERS_BY_TAG = relation_spec(SCHOOLS_KEYSPACE, "users_by_tag", "tag_id", "user_id")
TODOS_BY_USER = relation_spec(SCHOOLS_KEYSPACE, "todos_by_user", "user_id", "todo_id")
QUESTIONS_BY_COURSE = relation_spec(SCHOOLS_KEYSPACE, "questions_by_course", "course_id", "question_id",
                                    owners=True)
ANNOUNCEMENTS_BY_TAG = relation_spec(SCHOOLS_KEYSPACE, "announcements_by_tag", "tag_id",
                                     "announcement_id", owners=True)
ANSWERS_BY_OWNER = relation_spec(SCHOOLS_KEYSPACE, "answers_by_announcement_or_question", "id",
                                 "answer_id", extra_partition=(("type", INT),))


@dataclass
class Tables:
    countries: CqlTable
    schools: CqlTable
    holidays: CqlTable
    users: CqlTable
    tokens: CqlTable
    todos: CqlTable
    tags: CqlTable
    courses: CqlTable
    lectures: CqlTable
    grades: CqlTable
    questions: CqlTable
    answers: CqlTable
    announcements: CqlTable
    files: CqlTable
    student_references: CqlTable
    courses_by_user: RelationTable
    users_by_course: RelationTable
    tags_by_user: RelationTable
    users_by_tag: RelationTable
    todos_by_user: RelationTable
    questions_by_course: RelationTable
    announcements_by_tag: RelationTable
    answers_by_owner: RelationTable

    def __iter__(self):
        return (getattr(self, f.name) for f in fields(self))


def build_tables(client, replication_factor=3) -> Tables:
    def table(spec):
        return CqlTable(client, spec, replication_factor)

    def relation(spec):
        return RelationTable(client, spec, replication_factor)

    return Tables(
        countries=table(COUNTRIES),
        schools=table(SCHOOLS),
        holidays=table(HOLIDAYS),
        users=table(USERS),
        tokens=table(TOKENS),
        todos=table(TODOS),
        tags=table(TAGS),
        courses=table(COURSES),
        lectures=table(LECTURES),
        grades=table(GRADES),
        questions=table(QUESTIONS),
        answers=table(ANSWERS),
        announcements=table(ANNOUNCEMENTS),
        files=table(FILES),
        student_references=table(STUDENT_REFERENCES),
        courses_by_user=relation(COURSES_BY_USER),
        users_by_course=relation(USERS_BY_COURSE),
        tags_by_user=relation(TAGS_BY_USER),
        users_by_tag=relation(USERS_BY_TAG),
        todos_by_user=relation(TODOS_BY_USER),
        questions_by_course=relation(QUESTIONS_BY_COURSE),
        announcements_by_tag=relation(ANNOUNCEMENTS_BY_TAG),
        answers_by_owner=relation(ANSWERS_BY_OWNER),
    )


def configure_tables(tables: Tables, create_schema: bool):
    """Configura todas las tablas; corta en el primer error."""
    for table in tables:
        result = table.configure(create_schema)
        if not result.ok:
            logger.error("Could not configure %s: %s", table.spec.full_name, result)
            return result
    logger.info("Cassandra tables configured (create_schema=%s)", create_schema)
    return OK
