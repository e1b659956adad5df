"""Error kinds raised by QuestionHour and their JSON rendering.

Every error carries the HTTP status it maps to, so blueprints can simply let
them propagate and the handlers registered in :func:`register_error_handlers`
produce ``{"error": ...}`` bodies.
"""

import logging
from typing import Optional

from flask import jsonify, request

logger = logging.getLogger(__name__)


class PollingError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update(self.details)
        return body


class ValidationError(PollingError):
    """Malformed submission or response record."""
    status_code = 400


class NotFoundError(PollingError):
    """Unknown question, or a geocoding lookup with no match."""
    status_code = 404


class LifecycleConflictError(PollingError):
    """Concurrent transition, or a write against a question that is not current."""
    status_code = 409


class StoreUnavailableError(PollingError):
    status_code = 503


class GeocodingUnavailableError(PollingError):
    status_code = 503


def register_error_handlers(app):
    @app.errorhandler(PollingError)
    def _polling_error(e):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__} on {request.path}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    # 所有 /api/* 错误都返回 JSON
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "method not allowed", "path": request.path}), 405
        return e

    @app.errorhandler(500)
    def _500(e):
        original = getattr(e, "original_exception", None) or e
        logger.error(f"Unhandled error on {request.path}: {original!r}")
        return jsonify({"error": "Internal server error"}), 500
