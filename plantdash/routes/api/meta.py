"""Dropdown metadata endpoint."""

from __future__ import annotations

from flask import jsonify

from plantdash.middleware.auth import require_api_key

from . import bp, get_generator, get_labview, get_now, use_mock_data
from .helpers import envelope


@bp.route("/api/meta", methods=["GET"])
@require_api_key
def meta():
    """Plants, lines, stations and shifts; fetched once on app load."""
    if use_mock_data():
        data = get_generator().metadata()
    else:
        data = get_labview().get_metadata()
    return jsonify(envelope(get_now(), data=data))
