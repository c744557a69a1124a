"""Error envelopes and error-only request logging."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Optional

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound

from plantdash.services.labview import UpstreamError

logger = logging.getLogger("plantdash")

ERROR_CODES = {
    "UPSTREAM": "UPSTREAM_ERROR",
    "QUERY_FAILED": "QUERY_FAILED",
    "VALIDATION_ERROR": "VALIDATION_ERROR",
    "NOT_FOUND": "NOT_FOUND",
}


def _now_iso() -> str:
    clock = current_app.extensions.get("clock", datetime.now)
    return clock().isoformat()


def error_envelope(code: str, message: str, status: int, details: Optional[str] = None):
    body = {"success": False, "error": {"code": code, "message": message}, "timestamp": _now_iso()}
    if details and current_app.debug:
        body["error"]["details"] = details
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(NotFound)
    def not_found(exc):
        return error_envelope(
            ERROR_CODES["NOT_FOUND"], f"Route {request.method} {request.path} not found", 404
        )

    @app.errorhandler(UpstreamError)
    def upstream_failed(exc):
        return error_envelope(ERROR_CODES["UPSTREAM"], str(exc), 500)

    @app.errorhandler(HTTPException)
    def http_error(exc):
        return error_envelope(ERROR_CODES["QUERY_FAILED"], exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def unhandled(exc):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_envelope(
            ERROR_CODES["QUERY_FAILED"], "An unexpected error occurred", 500, details=str(exc)
        )


def register_request_logging(app: Flask) -> None:
    """Log failed requests only; the dashboard polls every few seconds."""

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_failures(response):
        if response.status_code >= 400:
            started = g.get("request_started")
            duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
            level = logging.ERROR if response.status_code >= 500 else logging.WARNING
            logger.log(
                level,
                "%s %s - %s (%.1fms ip=%s)",
                request.method,
                request.full_path.rstrip("?"),
                response.status_code,
                duration_ms,
                request.remote_addr,
            )
        return response


__all__ = ["ERROR_CODES", "error_envelope", "register_error_handlers", "register_request_logging"]
