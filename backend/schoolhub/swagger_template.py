"""
Especificación OpenAPI/Swagger de la API SchoolHub.
Usado por Flasgger para documentación interactiva en /apidocs
"""


def _body(required, properties):
    return {
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {"type": "object", "required": required, "properties": properties},
    }


def _path_id(name):
    return {"in": "path", "name": name, "type": "string", "required": True}


AUTH = [{"Bearer": []}]

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "SchoolHub API",
        "description": "API de gestión escolar: escuelas, usuarios, cursos, notas y anuncios.",
        "version": "1.0.0",
        "contact": {
            "name": "SchoolHub"
        }
    },
    "basePath": "/api/v1",
    "schemes": ["http"],
    "consumes": ["application/json"],
    "produces": ["application/json"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Bearer <jwt> devuelto por /auth/login"
        }
    },
    "tags": [
        {"name": "Entorno", "description": "Países, escuelas y feriados"},
        {"name": "Sesión", "description": "Login y logout"},
        {"name": "Usuarios", "description": "Usuarios de la escuela"},
        {"name": "Todos", "description": "Tareas personales"},
        {"name": "Tags", "description": "Grupos de usuarios"},
        {"name": "Notas", "description": "Notas por curso"},
        {"name": "Cursos", "description": "Cursos, miembros, clases, preguntas y respuestas"},
        {"name": "Anuncios", "description": "Anuncios dirigidos por tags"}
    ],
    "paths": {
        # --- ENTORNO ---
        "/environment/countries": {
            "get": {
                "tags": ["Entorno"],
                "summary": "Listar países",
                "responses": {"200": {"description": "Lista de países"}}
            },
            "post": {
                "tags": ["Entorno"],
                "summary": "Crear país",
                "parameters": [_body(["name", "code"], {
                    "name": {"type": "string", "example": "Romania"},
                    "code": {"type": "string", "example": "RO"}
                })],
                "responses": {
                    "201": {"description": "País creado"},
                    "400": {"description": "Nombre o código inválido o repetido"},
                    "409": {"description": "Conflicto de id, reintentar"}
                }
            }
        },
        "/environment/countries/{country_id}": {
            "delete": {
                "tags": ["Entorno"],
                "summary": "Borrar país con sus feriados y escuelas",
                "parameters": [{"in": "path", "name": "country_id", "type": "integer", "required": True}],
                "responses": {"200": {"description": "Borrado"}, "404": {"description": "No existe"}}
            }
        },
        "/environment/schools": {
            "get": {
                "tags": ["Entorno"],
                "summary": "Listar escuelas",
                "responses": {"200": {"description": "Lista de escuelas"}}
            },
            "post": {
                "tags": ["Entorno"],
                "summary": "Crear escuela",
                "parameters": [_body(["name", "country_id"], {
                    "name": {"type": "string", "example": "Colegio Nacional"},
                    "country_id": {"type": "integer", "example": 1},
                    "image_path": {"type": "string"}
                })],
                "responses": {"201": {"description": "Escuela creada"}}
            }
        },
        "/environment/holidays": {
            "get": {
                "tags": ["Entorno"],
                "summary": "Feriados de un país (type=0) o de una escuela (type=1)",
                "parameters": [
                    {"in": "query", "name": "id", "type": "integer", "required": True},
                    {"in": "query", "name": "type", "type": "integer", "required": True}
                ],
                "responses": {"200": {"description": "Feriados ordenados por fecha"}}
            },
            "post": {
                "tags": ["Entorno"],
                "summary": "Crear feriado",
                "parameters": [_body(["id", "type", "date", "name"], {
                    "id": {"type": "integer"},
                    "type": {"type": "integer", "enum": [0, 1]},
                    "date": {"type": "integer", "description": "segundos desde epoch"},
                    "name": {"type": "string"}
                })],
                "responses": {"201": {"description": "Creado"}, "409": {"description": "Ya existe"}}
            }
        },
        # --- SESIÓN ---
        "/auth/login": {
            "post": {
                "tags": ["Sesión"],
                "summary": "Iniciar sesión",
                "parameters": [_body(["school_id", "email", "password"], {
                    "school_id": {"type": "integer"},
                    "email": {"type": "string", "format": "email"},
                    "password": {"type": "string"}
                })],
                "responses": {
                    "200": {"description": "Usuario y JWT en 'token'"},
                    "404": {"description": "Credenciales inválidas"}
                }
            }
        },
        "/auth/logout": {
            "post": {
                "tags": ["Sesión"],
                "summary": "Cerrar sesión",
                "security": AUTH,
                "responses": {"200": {"description": "Sesión cerrada"}}
            }
        },
        # --- USUARIOS ---
        "/users": {
            "get": {
                "tags": ["Usuarios"],
                "summary": "Listar usuarios (admin)",
                "security": AUTH,
                "responses": {"200": {"description": "Usuarios"}, "401": {"description": "No es admin"}}
            },
            "post": {
                "tags": ["Usuarios"],
                "summary": "Crear usuario (admin)",
                "security": AUTH,
                "parameters": [_body(["email", "user_type", "first_name", "last_name"], {
                    "email": {"type": "string", "format": "email"},
                    "user_type": {"type": "integer", "enum": [0, 1, 2]},
                    "first_name": {"type": "string"},
                    "last_name": {"type": "string"},
                    "phone_number": {"type": "string"}
                })],
                "responses": {
                    "201": {"description": "Usuario creado con su contraseña inicial"},
                    "409": {"description": "Email en uso"}
                }
            }
        },
        "/users/{user_id}": {
            "delete": {
                "tags": ["Usuarios"],
                "summary": "Borrar usuario y todo lo asociado (admin)",
                "security": AUTH,
                "parameters": [_path_id("user_id")],
                "responses": {"200": {"description": "Borrado"}}
            }
        },
        # --- TODOS ---
        "/todos": {
            "post": {
                "tags": ["Todos"],
                "summary": "Crear tarea",
                "security": AUTH,
                "parameters": [_body(["text"], {
                    "text": {"type": "string"},
                    "type": {"type": "integer", "enum": [0, 1, 2]}
                })],
                "responses": {"201": {"description": "Creada"}}
            }
        },
        # --- TAGS ---
        "/tags": {
            "post": {
                "tags": ["Tags"],
                "summary": "Crear tag (docente o admin)",
                "security": AUTH,
                "parameters": [_body(["value", "colour"], {
                    "value": {"type": "string", "example": "5to A"},
                    "colour": {"type": "string", "example": "blue"}
                })],
                "responses": {"201": {"description": "Creado"}, "403": {"description": "Sin permiso"}}
            }
        },
        # --- NOTAS ---
        "/grades": {
            "post": {
                "tags": ["Notas"],
                "summary": "Cargar nota",
                "security": AUTH,
                "parameters": [_body(["student_id", "course_id", "grade"], {
                    "student_id": {"type": "string"},
                    "course_id": {"type": "string"},
                    "grade": {"type": "integer"},
                    "out_of": {"type": "integer"},
                    "weight": {"type": "number"}
                })],
                "responses": {"201": {"description": "Nota cargada"}}
            }
        },
        # --- CURSOS ---
        "/courses": {
            "post": {
                "tags": ["Cursos"],
                "summary": "Crear curso",
                "security": AUTH,
                "parameters": [_body(["name", "start_date", "end_date"], {
                    "name": {"type": "string"},
                    "start_date": {"type": "integer"},
                    "end_date": {"type": "integer"},
                    "course_thumbnail": {"type": "string"}
                })],
                "responses": {"201": {"description": "Curso creado"}}
            }
        },
        "/courses/{course_id}/users": {
            "post": {
                "tags": ["Cursos"],
                "summary": "Inscribir usuarios (por id y por tag)",
                "security": AUTH,
                "parameters": [_path_id("course_id"), _body([], {
                    "users": {"type": "array", "items": {"type": "string"}},
                    "tags": {"type": "array", "items": {"type": "string"}}
                })],
                "responses": {"200": {"description": "Inscriptos"}}
            }
        },
        # --- ANUNCIOS ---
        "/announcements": {
            "get": {
                "tags": ["Anuncios"],
                "summary": "Anuncios visibles para el usuario",
                "security": AUTH,
                "responses": {"200": {"description": "Anuncios, más nuevos primero"}}
            },
            "post": {
                "tags": ["Anuncios"],
                "summary": "Crear anuncio",
                "security": AUTH,
                "parameters": [_body(["title", "content"], {
                    "title": {"type": "string"},
                    "content": {"type": "string"},
                    "allow_answers": {"type": "boolean"},
                    "tags": {"type": "array", "items": {"type": "string"}}
                })],
                "responses": {"201": {"description": "Creado"}}
            }
        }
    }
}
