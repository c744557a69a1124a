"""Liveness probe and service banner."""

from __future__ import annotations

from flask import jsonify

from . import bp, get_now


@bp.route("/health", methods=["GET"])
def health():
    return jsonify(
        {
            "status": "ok",
            "timestamp": get_now().isoformat(),
            "message": "API server is running",
        }
    )


@bp.route("/", methods=["GET"])
def index():
    return jsonify(
        {
            "message": "Plant Production Dashboard API",
            "version": "1.0.0",
            "endpoints": {
                "health": "/health",
                "dashboard": {
                    "metadata": "/api/meta",
                    "lineStatus": "/api/line_status?plant={plant}&line={line}&station={station}"
                    "&shift={shift}&dateRange={dateRange}",
                    "stationDetails": "/api/station_status?id={stationId}&dateRange={dateRange}&shift={shift}",
                    "export": "/api/export?reportType={graph|table|spc}",
                },
            },
        }
    )
