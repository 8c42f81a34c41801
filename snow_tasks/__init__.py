"""Flask application factory for the snow-clearing task board."""

import logging
import os

from flask import Flask

from snow_tasks.extensions import db, ma


def create_app(config_class: type | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to Config.

    Returns:
        Configured Flask application instance.
    """
    telemetry_enabled = not os.getenv("OTEL_SDK_DISABLED")

    # Telemetry must be set up before the app and its engine exist
    if telemetry_enabled:
        from snow_tasks.telemetry import instrument_flask_app, setup_telemetry

        setup_telemetry()

    app = Flask(__name__)

    # Per-app so Gunicorn worker forks are covered
    if telemetry_enabled:
        instrument_flask_app(app)

    if config_class is None:
        from snow_tasks.config import Config

        config_class = Config
    app.config.from_object(config_class)

    db.init_app(app)
    ma.init_app(app)

    from snow_tasks.routes import access_bp, health_bp, tasks_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(access_bp)
    app.register_blueprint(tasks_bp)

    from snow_tasks.errors import register_error_handlers

    register_error_handlers(app)

    if telemetry_enabled:
        from snow_tasks.middleware.metrics import register_metrics_middleware

        register_metrics_middleware(app)

    _configure_logging(telemetry_enabled)

    from snow_tasks.services.estimate import init_estimator

    init_estimator(app)

    with app.app_context():
        db.create_all()

    return app


def _configure_logging(telemetry_enabled: bool) -> None:
    """Route package logs to the root logger and quiet framework noise."""
    if telemetry_enabled:
        from snow_tasks.telemetry import get_otel_log_handler

        handler = get_otel_log_handler()
        root_logger = logging.getLogger()
        if handler and handler not in root_logger.handlers:
            root_logger.addHandler(handler)

    logging.getLogger("snow_tasks").setLevel(logging.DEBUG)
    logging.getLogger("snow_tasks").propagate = True

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
