"""
Error types for Live Hub.
Every error maps to an HTTP status and a machine-readable error code.
"""

import logging
from flask import jsonify, redirect, request
from werkzeug.exceptions import HTTPException, NotFound

logger = logging.getLogger(__name__)


class LiveHubError(Exception):
    status_code = 500
    error = "INTERNAL"

    def __init__(self, message, error=None, **extra):
        super().__init__(message)
        self.message = message
        if error:
            self.error = error
        self.extra = extra

    def to_dict(self):
        payload = {"error": self.error, "message": self.message}
        payload.update(self.extra)
        return payload


class InvalidInputError(LiveHubError):
    status_code = 400
    error = "INVALID_INPUT"


class UnauthorizedError(LiveHubError):
    status_code = 401
    error = "UNAUTHORIZED"


class ForbiddenByFlagError(LiveHubError):
    """Action refused because a global switch (voteOpen, aiEnabled) is off"""
    status_code = 403
    error = "FORBIDDEN_BY_FLAG"


class NotFoundError(LiveHubError):
    status_code = 404
    error = "NOT_FOUND"


class MethodNotAllowedError(LiveHubError):
    status_code = 405
    error = "METHOD_NOT_ALLOWED"


class ConflictError(LiveHubError):
    status_code = 409
    error = "CONFLICT"


class UpstreamError(LiveHubError):
    status_code = 500
    error = "GENERATION_FAILED"


class StoreError(LiveHubError):
    status_code = 500
    error = "INTERNAL"


class StoreConflictError(StoreError):
    """Compare-and-swap retries were exhausted"""


def register_error_handlers(app):
    """Render every error as a JSON body with the matching status"""

    @app.errorhandler(LiveHubError)
    def handle_livehub_error(e):
        if e.status_code >= 500:
            logger.error(f"{e.error}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if isinstance(e, NotFound):
            # Unknown paths belong to the static site
            return redirect(app.config["STATIC_HOST_URL"].rstrip("/") + request.path, 302)
        error = "METHOD_NOT_ALLOWED" if e.code == 405 else e.name.upper().replace(" ", "_")
        return jsonify({"error": error, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"error": "INTERNAL", "message": str(e)}), 500
