"""Application factory for the transbundle translation proxy."""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from transbundle.backend.config.schema import ServiceSettings
from transbundle.backend.config.settings import load_settings
from transbundle.backend.version import get_project_version

from .http import problem_response
from .routes import register_routes
from .routes.translations import PIPELINE_EXTENSION
from .services.pipeline import TranslationPipeline

PACKAGE_LOGGER = "transbundle"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(level: str) -> None:
    """Apply the configured level, adding a handler only when nothing is set up."""

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    if not logging.getLogger().handlers and not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)


def create_app(
    settings: ServiceSettings | None = None,
    *,
    pipeline: TranslationPipeline | None = None,
) -> Flask:
    """Create and configure the Flask application instance."""

    settings = settings or load_settings()
    _configure_logging(settings.log_level)

    app = Flask(__name__)
    app.extensions[PIPELINE_EXTENSION] = pipeline or TranslationPipeline(settings)

    origins: list[str] | str = sorted(settings.allowed_origins) or "*"
    CORS(
        app,
        resources={r"/translations(/.*)?": {"origins": origins}},
        supports_credentials=False,
        methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {
            "status": "ok",
            "version": get_project_version(),
            "project_configured": bool(settings.provider.project_id),
            "fetch_mode": settings.fetch_mode.value,
        }
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed requests."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
