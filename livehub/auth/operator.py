"""
Operator authentication for Live Hub.
Console-only actions need the configured bearer token; with none configured they stay open.
"""

import hmac
import logging

from flask import current_app, request

from livehub.utils.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def bearer_token():
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip()
    return None


def require_operator():
    """Raise UnauthorizedError unless the request carries the operator token"""
    expected = current_app.config.get("OPERATOR_TOKEN")
    if not expected:
        return

    provided = bearer_token()
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning(f"Operator action refused for {request.remote_addr} on {request.path}")
        raise UnauthorizedError("Operator token required")
