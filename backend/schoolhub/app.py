from flask import Flask
from flask_cors import CORS
from flasgger import Swagger

from schoolhub.routes.announcement_routes import announcement_bp
from schoolhub.routes.auth_routes import auth_bp
from schoolhub.routes.common import EXTENSION
from schoolhub.routes.course_routes import course_bp
from schoolhub.routes.environment_routes import environment_bp
from schoolhub.routes.grade_routes import grade_bp
from schoolhub.routes.tag_routes import tag_bp
from schoolhub.routes.todo_routes import todo_bp
from schoolhub.routes.user_routes import user_bp
from schoolhub.swagger_template import SWAGGER_TEMPLATE


def create_app(context):
    app = Flask(__name__)
    # Evitar redirecciones por trailing slash (causan "Redirect not allowed for preflight" en CORS)
    app.url_map.strict_slashes = False
    app.extensions[EXTENSION] = context

    CORS(
        app,
        origins=context.settings.cors_origins,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        supports_credentials=True,
    )

    # Registros
    app.register_blueprint(environment_bp, url_prefix='/api/v1/environment')
    app.register_blueprint(auth_bp, url_prefix='/api/v1/auth')
    app.register_blueprint(user_bp, url_prefix='/api/v1/users')
    app.register_blueprint(todo_bp, url_prefix='/api/v1/todos')
    app.register_blueprint(tag_bp, url_prefix='/api/v1/tags')
    app.register_blueprint(grade_bp, url_prefix='/api/v1/grades')
    app.register_blueprint(course_bp, url_prefix='/api/v1/courses')
    app.register_blueprint(announcement_bp, url_prefix='/api/v1/announcements')

    # Swagger / OpenAPI - disponible en /apidocs
    Swagger(app, template=SWAGGER_TEMPLATE)
    return app
