#!/usr/bin/env python3
"""
END-TO-END TESTING SCRIPT
Recorrido completo de la API SchoolHub contra un servidor levantado.

Requiere haber corrido backend/data_seed.py y pasar las credenciales del
admin que imprime:

    python test_end_to_end.py admin@schoolhub.com <password> [school_id]

Pasos:
1. Entorno: países, escuelas y feriados
2. Login del admin y alta de docente y alumno
3. Tag, curso, clases y preguntas
4. Calificación y anuncio visibles para el alumno
5. Limpieza y logout
"""

import json
import sys
import time

import requests

BASE_URL = 'http://localhost:5000/api/v1'

# ============================================================================
# UTILITIES
# ============================================================================

def print_section(title):
    print(f"\n{'='*70}")
    print(f"  {title}")
    print(f"{'='*70}\n")

def print_request(method, url, data=None):
    print(f"→ {method} {url}")
    if data:
        print(f"  Payload: {json.dumps(data, indent=2, default=str)[:200]}...")

def print_response(response):
    print(f"← {response.status_code}")
    try:
        data = response.json()
        print(f"  {json.dumps(data, indent=2, default=str)[:300]}...")
    except ValueError:
        print(f"  {response.text[:300]}...")

def call(method, path, data=None, token=None, expected=(200, 201)):
    url = f"{BASE_URL}{path}"
    headers = {'Authorization': f'Bearer {token}'} if token else {}
    print_request(method, url, data)
    response = requests.request(method, url, json=data, headers=headers, timeout=10)
    print_response(response)
    if response.status_code not in expected:
        raise RuntimeError(f"{method} {path} devolvió {response.status_code}")
    return response.json()

# ============================================================================
# STEP 1: ENVIRONMENT
# ============================================================================

def step_1_environment():
    print_section("Step 1: Países, escuelas y feriados")

    countries = call('GET', '/environment/countries')
    print(f"✓ {len(countries)} países cargados")

    schools = call('GET', '/environment/schools')
    print(f"✓ {len(schools)} escuelas cargadas")

    country_id = countries[0]['id']
    call('POST', '/environment/holidays', {
        "id": country_id,
        "type": 0,
        "date": 1720569600,
        "name": "Dia de la Independencia"
    }, expected=(201, 409))
    holidays = call('GET', f'/environment/holidays?id={country_id}&type=0')
    print(f"✓ {len(holidays)} feriados nacionales")

# ============================================================================
# STEP 2: LOGIN AND USERS
# ============================================================================

def step_2_users(school_id, admin_email, admin_password):
    print_section("Step 2: Login del admin y alta de usuarios")

    admin = call('POST', '/auth/login', {
        "school_id": school_id,
        "email": admin_email,
        "password": admin_password
    })
    admin_token = admin['token']
    print(f"✓ Admin logueado: {admin['first_name']}")

    suffix = int(time.time())
    teacher = call('POST', '/users/', {
        "email": f"docente.{suffix}@schoolhub.com",
        "user_type": 1,
        "first_name": "Julio",
        "last_name": "Cortazar"
    }, token=admin_token)
    student = call('POST', '/users/', {
        "email": f"alumno.{suffix}@schoolhub.com",
        "user_type": 2,
        "first_name": "Alfonsina",
        "last_name": "Storni"
    }, token=admin_token)

    tokens = {'admin': admin_token}
    for role, user in (('teacher', teacher), ('student', student)):
        login = call('POST', '/auth/login', {
            "school_id": school_id,
            "email": user['email'],
            "password": user['password']
        })
        tokens[role] = login['token']
        print(f"✓ {role} creado y logueado: {user['user_id']}")

    return tokens, teacher, student

# ============================================================================
# STEP 3: TAG, COURSE, LECTURES, QUESTIONS
# ============================================================================

def step_3_course(tokens, student):
    print_section("Step 3: Tag, curso, clases y preguntas")

    tag = call('POST', '/tags/', {"value": "E2E", "colour": "purple"}, token=tokens['teacher'])
    call('POST', f"/tags/{tag['id']}/users", {"user_id": student['user_id']}, token=tokens['teacher'])

    course = call('POST', '/courses/', {
        "name": "Bases de Datos II",
        "start_date": 1709251200,
        "end_date": 1719705600
    }, token=tokens['teacher'])
    course_id = course['id']
    call('POST', f'/courses/{course_id}/users', {"tags": [tag['id']]}, token=tokens['teacher'])

    users = call('GET', f'/courses/{course_id}/users', token=tokens['student'])
    print(f"✓ {len(users)} miembros en el curso")

    call('POST', f'/courses/{course_id}/lectures', {
        "starting_time": 1709550000,
        "duration": 90,
        "location": "Aula 3"
    }, token=tokens['teacher'])

    question = call('POST', f'/courses/{course_id}/questions',
                    {"content": "¿Entra el tema de índices?"}, token=tokens['student'])
    call('POST', f"/courses/{course_id}/questions/{question['id']}/answers",
         {"content": "Sí, entra."}, token=tokens['teacher'])
    answers = call('GET', f"/courses/{course_id}/questions/{question['id']}/answers",
                   token=tokens['student'])
    print(f"✓ Pregunta con {len(answers)} respuesta(s)")

    return tag['id'], course_id

# ============================================================================
# STEP 4: GRADE AND ANNOUNCEMENT
# ============================================================================

def step_4_grade_and_announcement(tokens, student, tag_id, course_id):
    print_section("Step 4: Calificación y anuncio")

    call('POST', '/grades/', {
        "student_id": student['user_id'],
        "course_id": course_id,
        "grade": 9,
        "out_of": 10,
        "weight": 0.4
    }, token=tokens['teacher'])
    grades = call('GET', '/grades/', token=tokens['student'])
    print(f"✓ El alumno ve {len(grades)} calificación(es)")

    call('POST', '/announcements/', {
        "title": "Parcial",
        "content": "El parcial es el viernes.",
        "tags": [tag_id]
    }, token=tokens['teacher'])
    announcements = call('GET', '/announcements/', token=tokens['student'])
    print(f"✓ El alumno ve {len(announcements)} anuncio(s)")

# ============================================================================
# STEP 5: CLEANUP
# ============================================================================

def step_5_cleanup(tokens, teacher, student, tag_id, course_id):
    print_section("Step 5: Limpieza y logout")

    call('DELETE', f'/courses/{course_id}', token=tokens['teacher'])
    call('DELETE', f'/tags/{tag_id}', token=tokens['teacher'])
    for user in (student, teacher):
        call('DELETE', f"/users/{user['user_id']}", token=tokens['admin'])

    call('POST', '/auth/logout', token=tokens['admin'])
    call('GET', '/users/me', token=tokens['admin'], expected=(400, 401))
    print("✓ Sesión del admin cerrada")

# ============================================================================
# MAIN
# ============================================================================

def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    admin_email, admin_password = sys.argv[1], sys.argv[2]
    school_id = int(sys.argv[3]) if len(sys.argv) > 3 else 1

    step_1_environment()
    tokens, teacher, student = step_2_users(school_id, admin_email, admin_password)
    tag_id, course_id = step_3_course(tokens, student)
    step_4_grade_and_announcement(tokens, student, tag_id, course_id)
    step_5_cleanup(tokens, teacher, student, tag_id, course_id)

    print_section("✅ END-TO-END COMPLETO")


if __name__ == '__main__':
    main()
