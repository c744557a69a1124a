"""Station drill-down endpoint."""

from __future__ import annotations

from flask import g, jsonify

from plantdash.middleware.auth import require_api_key
from plantdash.middleware.validation import STATION_STATUS_RULES, validate_query

from . import bp, get_generator, get_labview, get_now, use_mock_data
from .helpers import build_filter, envelope

DEFAULT_STATION = "op10"


@bp.route("/api/station_status", methods=["GET"])
@require_api_key
@validate_query(STATION_STATUS_RULES)
def station_status():
    station_id = g.query.get("id") or DEFAULT_STATION
    filters = build_filter()
    now = get_now()

    if use_mock_data():
        data = get_generator().station_details(station_id, filters, now)
    else:
        params = {"dateRange": filters.date_range, "shift": filters.shift}
        data = get_labview().get_station_details(station_id, params)

    return jsonify(
        envelope(
            now,
            station=station_id,
            filters={"dateRange": filters.date_range, "shift": filters.shift},
            data=data,
        )
    )
