"""Dashboard API blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("api", __name__)


def get_generator():
    from flask import current_app

    return current_app.extensions["generator"]


def get_labview():
    from flask import current_app

    return current_app.extensions["labview"]


def get_now():
    from flask import current_app

    return current_app.extensions["clock"]()


def use_mock_data() -> bool:
    from flask import current_app

    return bool(current_app.config.get("USE_MOCK_DATA"))


from . import export, health, line_status, meta, station_status  # noqa: E402,F401

__all__ = ["bp", "get_generator", "get_labview", "get_now", "use_mock_data"]
