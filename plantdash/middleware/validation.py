"""Security-focused query parameter validation.

Only shape is checked here (length, character whitelist); business rules are
left to the data source.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import wraps
from typing import Dict, List, Sequence

from flask import g, jsonify, request
from markupsafe import escape

logger = logging.getLogger("plantdash.security")

SAFE_VALUE = re.compile(r"^[a-zA-Z0-9_-]+$")


@dataclass(frozen=True)
class QueryRule:
    field: str
    label: str
    max_length: int = 100

    def check(self, raw: str) -> List[str]:
        value = str(escape(raw.strip()))
        errors = []
        if len(value) > self.max_length:
            errors.append(f"{self.label} must be at most {self.max_length} characters")
        if not SAFE_VALUE.match(value):
            errors.append(f"{self.label} must be alphanumeric")
        return errors


LINE_STATUS_RULES = (
    QueryRule("plant", "Plant"),
    QueryRule("line", "Line"),
    QueryRule("station", "Station"),
    QueryRule("shift", "Shift", 50),
    QueryRule("dateRange", "Date range", 50),
    QueryRule("resolution", "Resolution", 50),
    QueryRule("startDate", "Start date", 50),
    QueryRule("endDate", "End date", 50),
)

STATION_STATUS_RULES = (
    QueryRule("id", "Station ID"),
    QueryRule("dateRange", "Date range", 50),
    QueryRule("shift", "Shift", 50),
    QueryRule("startDate", "Start date", 50),
    QueryRule("endDate", "End date", 50),
)

EXPORT_RULES = LINE_STATUS_RULES + (QueryRule("reportType", "Report type", 50),)


def validate_query(rules: Sequence[QueryRule]):
    """Reject the request with 400 if any optional query param is malformed.

    Clean values are exposed to the view as ``g.query``.
    """

    def decorator(view):
        @wraps(view)
        def wrapped_view(*args, **kwargs):
            details: List[Dict[str, str]] = []
            cleaned: Dict[str, str] = {}
            for rule in rules:
                raw = request.args.get(rule.field)
                if raw is None or raw.strip() == "":
                    continue
                problems = rule.check(raw)
                if problems:
                    details.extend(
                        {"field": rule.field, "message": msg, "value": raw} for msg in problems
                    )
                else:
                    cleaned[rule.field] = raw.strip()

            if details:
                logger.warning(
                    "Validation failed - potential attack (ip=%s url=%s errors=%s)",
                    request.remote_addr,
                    request.full_path.rstrip("?"),
                    details,
                )
                return (
                    jsonify(
                        {
                            "success": False,
                            "error": "Invalid request parameters",
                            "message": "One or more parameters failed security validation",
                            "details": details,
                        }
                    ),
                    400,
                )

            g.query = cleaned
            return view(*args, **kwargs)

        return wrapped_view

    return decorator


__all__ = [
    "EXPORT_RULES",
    "LINE_STATUS_RULES",
    "QueryRule",
    "STATION_STATUS_RULES",
    "validate_query",
]
