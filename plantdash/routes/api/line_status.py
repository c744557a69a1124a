"""Line status endpoint: production KPIs plus SPC data."""

from __future__ import annotations

from flask import jsonify

from plantdash.middleware.auth import require_api_key
from plantdash.middleware.validation import LINE_STATUS_RULES, validate_query

from . import bp, get_generator, get_labview, get_now, use_mock_data
from .helpers import build_filter, envelope


@bp.route("/api/line_status", methods=["GET"])
@require_api_key
@validate_query(LINE_STATUS_RULES)
def line_status():
    filters = build_filter()
    now = get_now()

    if use_mock_data():
        data = get_generator().line_status(filters, now)
    else:
        data = get_labview().get_line_status(filters.to_query())

    return jsonify(envelope(now, filters=filters.to_dict(), data=data))
