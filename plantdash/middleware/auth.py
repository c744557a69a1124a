"""API key authentication for the ``/api`` routes."""

from __future__ import annotations

import logging
from functools import wraps

from flask import current_app, jsonify, request

logger = logging.getLogger("plantdash.security")

API_KEY_HEADER = "X-API-Key"


def _log_auth_failure(reason: str) -> None:
    logger.warning(
        "Authentication failed: %s (ip=%s url=%s agent=%s)",
        reason,
        request.remote_addr,
        request.full_path.rstrip("?"),
        request.user_agent.string,
    )


def require_api_key(view):
    """Reject the request unless ``X-API-Key`` is in ``ALLOWED_API_KEYS``."""

    @wraps(view)
    def wrapped_view(*args, **kwargs):
        if current_app.config.get("AUTH_DISABLED"):
            logger.warning("[TEST MODE] Skipping authentication for %s %s", request.method, request.path)
            return view(*args, **kwargs)

        api_key = request.headers.get(API_KEY_HEADER)
        if not api_key:
            _log_auth_failure("Missing API key")
            return (
                jsonify(
                    {
                        "success": False,
                        "error": "Authentication required",
                        "message": "API key is missing. Please provide X-API-Key header.",
                    }
                ),
                401,
            )

        allowed = current_app.config.get("ALLOWED_API_KEYS") or []
        if api_key not in allowed:
            _log_auth_failure("Invalid API key")
            return (
                jsonify(
                    {
                        "success": False,
                        "error": "Invalid API key",
                        "message": "The provided API key is not authorized.",
                    }
                ),
                403,
            )

        return view(*args, **kwargs)

    return wrapped_view


__all__ = ["API_KEY_HEADER", "require_api_key"]
