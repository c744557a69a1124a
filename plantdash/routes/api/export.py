"""Report export endpoint."""

from __future__ import annotations

import logging

from flask import Response, g, jsonify, stream_with_context

from plantdash.middleware.auth import require_api_key
from plantdash.middleware.validation import EXPORT_RULES, validate_query
from plantdash.services.labview import SPREADSHEET_MIMETYPE

from . import bp, get_labview, get_now, use_mock_data
from .helpers import build_filter

logger = logging.getLogger("plantdash.export")

REPORT_TYPES = ("graph", "table", "spc")


@bp.route("/api/export", methods=["GET"])
@require_api_key
@validate_query(EXPORT_RULES)
def export():
    """Stream the LabVIEW-generated spreadsheet for the current filters."""
    filters = build_filter()
    report_type = g.query.get("reportType") or "graph"

    if report_type not in REPORT_TYPES:
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Invalid request parameters",
                    "message": f"reportType must be one of {', '.join(REPORT_TYPES)}",
                    "details": [
                        {"field": "reportType", "message": "Unknown report type", "value": report_type}
                    ],
                }
            ),
            400,
        )

    if use_mock_data():
        return (
            jsonify(
                {
                    "success": False,
                    "message": "Export is only available when connected to LabVIEW",
                }
            ),
            501,
        )

    upstream = get_labview().export_report(filters.to_query(), report_type)

    ts = get_now().strftime("%Y%m%d_%H%M%S")
    filename = f"{report_type}_report_{ts}.xlsx"
    disposition = upstream.headers.get("Content-Disposition") or f"attachment; filename={filename}"

    def generate():
        try:
            for chunk in upstream.iter_content(chunk_size=64 * 1024):
                if chunk:
                    yield chunk
        finally:
            upstream.close()

    return Response(
        stream_with_context(generate()),
        mimetype=upstream.headers.get("Content-Type") or SPREADSHEET_MIMETYPE,
        headers={"Content-Disposition": disposition},
    )
