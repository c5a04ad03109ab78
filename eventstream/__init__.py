"""Application factory for the eventstream backend."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from eventstream.app import App
from eventstream.config import Settings
from eventstream.services.container import ServiceContainer
from eventstream.utils import init_request_id
from eventstream.utils.cors import configure_cors, parse_allowed_origins
from eventstream.utils.flask_error_handlers import register_app_error_handlers
from eventstream.utils.spectree_config import configure_spectree

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> App:
    """Application factory used by both tests and runtime."""

    logger.info("Creating app")

    if settings is None:
        load_dotenv()
        settings = Settings.load()
    settings.validate_production_config()

    app = App(__name__)
    app.config.from_object(settings.to_flask_config())

    container = ServiceContainer()
    container.config.override(settings)

    from eventstream.api import connections, create_api_blueprint, demo
    from eventstream.api.metrics import metrics_bp

    container.wire(modules=[connections, demo])
    app.container = container

    init_request_id(app)
    register_app_error_handlers(app)

    allowed_origins = parse_allowed_origins(settings.cors_origins)
    if allowed_origins:
        configure_cors(app, allowed_origins)

    app.register_blueprint(create_api_blueprint())
    app.register_blueprint(demo.demo_bp)
    app.register_blueprint(metrics_bp)
    configure_spectree(app)

    logger.info(
        "App created",
        extra={
            "flask_env": settings.flask_env,
            "sse_retry_milliseconds": settings.sse_retry_milliseconds,
            "sse_demo_enabled": settings.sse_demo_enabled,
        },
    )
    return app
