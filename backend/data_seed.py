"""
Sembrado inicial: país, escuela, administrador y un curso de ejemplo.

El primer administrador no puede crearse por la API (create_user exige un
admin), así que se inserta directo en la tabla users. El resto pasa por los
servicios como cualquier request.
"""
import uuid

from schoolhub.config.logging import setup_logging
from schoolhub.config.settings import load_settings
from schoolhub.context import build_context
from schoolhub.models import HolidayType, User, UserType
from schoolhub.security.passwords import generate_password, hash_password

ADMIN_EMAIL = "admin@schoolhub.com"


def log(step, msg):
    print(f"\n[{step}] {msg}")


def check(result, what):
    if not result.ok:
        raise SystemExit(f"❌ {what}: {result.status} {result.payload}")
    return result.payload


def find_or_create_country(ctx, name, code):
    for country in check(ctx.environment.get_all_countries(), "listar países"):
        if country["code"] == code:
            return country["id"]
    return check(ctx.environment.create_country(name, code), "crear país")["id"]


def find_or_create_school(ctx, name, country_id):
    for school in check(ctx.environment.get_all_schools(), "listar escuelas"):
        if school["name"] == name:
            return school["id"]
    return check(ctx.environment.create_school(name, country_id), "crear escuela")["id"]


def create_admin(ctx, school_id):
    """Devuelve la contraseña del admin, o None si ya existía."""
    result, users = ctx.tables.users.get_many("by_email", school_id, ADMIN_EMAIL)
    if result.ok and users:
        return None

    password = generate_password()
    admin = User(
        school_id=school_id,
        user_id=uuid.uuid1(),
        email=ADMIN_EMAIL,
        password=hash_password(password),
        user_type=UserType.ADMIN,
        changed_password=False,
        first_name="Admin",
        last_name="Global",
    )
    result = ctx.tables.users.create(admin)
    if not result.ok:
        raise SystemExit(f"❌ No se pudo crear el admin: {result}")
    return password


def run_seed():
    settings = load_settings()
    setup_logging(settings.log_level, json_output=False)
    ctx = build_context(settings)
    print("🌱 INICIANDO SEMBRADO DE DATOS (SCHOOLHUB)...")

    try:
        # ══════════════════════════════════════════
        # 1. PAÍS, ESCUELA Y FERIADOS
        # ══════════════════════════════════════════
        log("1", "Creando país y escuela...")
        country_id = find_or_create_country(ctx, "Argentina", "AR")
        school_id = find_or_create_school(ctx, "Colegio Nacional", country_id)
        ctx.environment.create_holiday(country_id, HolidayType.NATIONAL, 1716595200, "Revolucion de Mayo")
        ctx.environment.create_holiday(school_id, HolidayType.CUSTOM, 1718409600, "Aniversario")
        print(f"   ✅ País {country_id}, escuela {school_id}.")

        # ══════════════════════════════════════════
        # 2. ADMINISTRADOR
        # ══════════════════════════════════════════
        log("2", "Creando administrador...")
        password = create_admin(ctx, school_id)
        if password is None:
            print("   ⚠️ El admin ya existía, no se creó ni se cambió su contraseña.")
            return
        print(f"   ✅ Admin: {ADMIN_EMAIL} / {password}")

        # ══════════════════════════════════════════
        # 3. DOCENTE, ALUMNO Y CURSO DE EJEMPLO
        # ══════════════════════════════════════════
        log("3", "Creando docente, alumno y curso...")
        admin_token = check(ctx.users.log_in(school_id, ADMIN_EMAIL, password), "login admin")["token"]

        teacher = check(ctx.users.create_user(school_id, admin_token, "jorge@schoolhub.com",
                                              UserType.TEACHER, "Jorge", "Borges"), "crear docente")
        student = check(ctx.users.create_user(school_id, admin_token, "maria@schoolhub.com",
                                              UserType.STUDENT, "Maria", "Garcia"), "crear alumno")
        teacher_token = check(ctx.users.log_in(school_id, teacher["email"], teacher["password"]),
                              "login docente")["token"]

        tag = check(ctx.tags.create_tag(school_id, teacher_token, "5to A", "blue"), "crear tag")
        tag_id = uuid.UUID(tag["id"])
        check(ctx.tags.create_tag_user_relation(school_id, teacher_token, tag_id,
                                                uuid.UUID(student["user_id"])), "asignar tag")

        course = check(ctx.courses.create_course(school_id, teacher_token, "Bases de Datos I",
                                                 1709251200, 1719705600), "crear curso")
        check(ctx.courses.add_users(school_id, teacher_token, uuid.UUID(course["id"]),
                                    tag_ids=[tag_id]), "inscribir alumnos")
        check(ctx.announcements.create_announcement(
            school_id, teacher_token, "Bienvenidos", "Primera clase el lunes.", tag_ids=[tag_id]),
            "crear anuncio")

        print(f"   ✅ Docente: {teacher['email']} / {teacher['password']}")
        print(f"   ✅ Alumno:  {student['email']} / {student['password']}")
        print("\n🏁 SEMBRADO COMPLETO")
    finally:
        ctx.shutdown()


if __name__ == "__main__":
    run_seed()
