"""Shared helper functions for API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import current_app, g

from plantdash.utils.filter_params import Filter


def build_filter() -> Filter:
    """Build the request ``Filter`` from the validated query parameters."""
    return Filter.from_args(g.get("query", {}), current_app.config.get("DEFAULT_FILTERS"))


def envelope(now, **fields: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    body.update(fields)
    body["timestamp"] = now.isoformat()
    return body


__all__ = ["build_filter", "envelope"]
