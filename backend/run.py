import logging

from schoolhub.app import create_app
from schoolhub.config.logging import setup_logging
from schoolhub.config.settings import load_settings
from schoolhub.context import build_context

logger = logging.getLogger("schoolhub")


def main():
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_json)

    context = build_context(settings)
    app = create_app(context)
    logger.info("SchoolHub iniciado en puerto %s", settings.api_port)
    logger.info("Documentación Swagger: http://localhost:%s/apidocs", settings.api_port)
    try:
        app.run(host=settings.api_host, port=settings.api_port)
    finally:
        context.shutdown()


if __name__ == '__main__':
    main()
