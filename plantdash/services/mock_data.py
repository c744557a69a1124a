"""Synthetic payloads for the dashboard endpoints."""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from plantdash.services import statistics
from plantdash.services.bucketer import Bucket, bucketize
from plantdash.services.noise import in_range, noise
from plantdash.services.spc import is_out_of_control, synthesize_points
from plantdash.utils.filter_params import DateBounds, Filter, Resolution

logger = logging.getLogger("plantdash.mock")

PLANTS = [
    {"id": "pune", "name": "Pune Plant"},
    {"id": "chennai", "name": "Chennai Plant"},
]

LINES = [
    {"id": "fcpv", "name": "FCPV Line", "plant_id": "pune"},
    {"id": "lacv", "name": "LACV Line", "plant_id": "pune"},
    {"id": "compressor", "name": "Compressor Line", "plant_id": "chennai"},
]

STATIONS_META = [
    {"id": "op10", "name": "OP-10", "line_id": "fcpv"},
    {"id": "op20", "name": "OP-20", "line_id": "fcpv"},
    {"id": "op30", "name": "OP-30", "line_id": "fcpv"},
    {"id": "op10_lacv", "name": "OP-10", "line_id": "lacv"},
    {"id": "op20_lacv", "name": "OP-20", "line_id": "lacv"},
    {"id": "op10_comp", "name": "OP-10", "line_id": "compressor"},
]

SHIFTS = [
    {"id": "all", "name": "All Shifts"},
    {"id": "A", "name": "Shift A (06:00-14:00)"},
    {"id": "B", "name": "Shift B (14:00-22:00)"},
    {"id": "C", "name": "Shift C (22:00-06:00)"},
]

DOWNTIME_REASONS = ["Tool Change", "No Material", "Quality Check"]
DEFECTS = ["LVDT Fail", "Camera Fail", "Dimension Error", "Surface Defect"]
OPERATORS = ["Auto", "John", "Sarah", "Mike", "Auto"]

TARGET_PER_HOUR = 120
TARGET_PRODUCTION = 1400

# Specification limits for capability indices (control limits are 95-105)
USL = 110
LSL = 90

HISTOGRAM_BINS = 6
MAX_ALERTS = 5
LOG_COUNT = 50


def bucket_target(resolution: Resolution, bucket: Bucket, step_minutes: int = 10) -> int:
    """Expected output for one bucket at the nominal hourly rate."""
    if resolution == "raw":
        return TARGET_PER_HOUR * step_minutes // 60
    if resolution == "hour":
        return TARGET_PER_HOUR
    if resolution == "shift":
        return TARGET_PER_HOUR * 8
    if resolution == "day":
        return TARGET_PER_HOUR * 24
    days = calendar.monthrange(bucket.at.year, bucket.at.month)[1]
    return TARGET_PER_HOUR * 24 * days


def capability_status(cp: Optional[float]) -> str:
    if cp is None:
        return "Unknown"
    if cp >= 1.33:
        return "Excellent"
    if cp >= 1.0:
        return "Adequate"
    return "Poor"


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    return None if value is None else round(value, digits)


class MockDataGenerator:
    """Build response bodies from the seeded generators.

    Every method is a pure function of its arguments; "now" is always passed
    in by the caller.
    """

    def __init__(self, velocity_step_minutes: int = 10):
        self.velocity_step_minutes = velocity_step_minutes

    # ---------- catalogue ----------

    def metadata(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            "plants": [dict(p) for p in PLANTS],
            "lines": [dict(line) for line in LINES],
            "stations_meta": [dict(s) for s in STATIONS_META],
            "shifts": [dict(s) for s in SHIFTS],
        }

    # ---------- production ----------

    def line_kpi(self, now: datetime) -> Dict[str, Any]:
        # Drifts slowly with the clock
        seed = now.timestamp() / 10000
        return {
            "production": {
                "current": int(in_range(1100, 1450, seed)),
                "target": TARGET_PRODUCTION,
                "trend": round(in_range(-5, 8, seed), 1),
            },
            "oee": {
                "value": round(in_range(75, 92, seed + 1), 1),
                "trend": round(in_range(-5, 8, seed + 1), 1),
            },
            "rejection": {"count": int(in_range(8, 25, seed + 2))},
            "efficiency": {"value": round(in_range(85, 96, seed + 3), 1)},
        }

    def velocity(self, resolution: Resolution, bounds: DateBounds, shift: Optional[str] = None) -> List[Dict[str, Any]]:
        step = self.velocity_step_minutes
        spread = 0.10 if resolution != "raw" else 0.25
        points = []
        for bucket in bucketize(resolution, bounds.start, bounds.end, step_minutes=step, shift=shift):
            target = bucket_target(resolution, bucket, step)
            points.append(
                {
                    "time": bucket.label,
                    "output": int(in_range(target * (1 - spread), target * (1 + spread), bucket.seed)),
                    "target": target,
                }
            )
        return points

    def downtime_reasons(self) -> List[Dict[str, Any]]:
        return [
            {
                "reason": reason,
                "station": f"OP-{(idx + 1) * 10}",
                "duration": int(in_range(5, 60, idx)),
            }
            for idx, reason in enumerate(DOWNTIME_REASONS)
        ]

    def stations(self, line_id: str = "fcpv") -> List[Dict[str, Any]]:
        station_ids = [s["id"] for s in STATIONS_META if s["line_id"] == line_id]
        if not station_ids:
            station_ids = [s["id"] for s in STATIONS_META if s["line_id"] == "fcpv"]

        out = []
        for idx, station_id in enumerate(station_ids):
            status = "fault" if idx == 1 else ("idle" if idx == 2 else "running")
            running = status == "running"
            out.append(
                {
                    "id": station_id,
                    "name": station_id.upper().replace("_", " ", 1),
                    "operator": OPERATORS[idx] if idx < len(OPERATORS) else "Auto",
                    "status": status,
                    "produced": int(in_range(400, 500, idx) if running else in_range(100, 200, idx)),
                    "cycle_time": round(in_range(40, 50, idx), 1) if running else 0.0,
                    "efficiency": int(in_range(80, 95, idx) if running else in_range(50, 75, idx)),
                }
            )
        return out

    # ---------- SPC ----------

    def spc_metrics(self, points: List[Dict[str, Any]]) -> Dict[str, Any]:
        means = [p["mean"] for p in points]
        cp = statistics.calculate_cp(means, USL, LSL)
        return {
            "cp": {"value": _round(cp), "status": capability_status(cp)},
            "cpk": {"value": _round(statistics.calculate_cpk(means, USL, LSL))},
            "pp": {"value": _round(statistics.calculate_cp(means, USL, LSL, sample=False))},
            "ppk": {"value": _round(statistics.calculate_cpk(means, USL, LSL, sample=False))},
        }

    def histogram(self, points: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        bins = statistics.create_histogram([p["mean"] for p in points], HISTOGRAM_BINS)
        return [
            {"range": f"{b['start']:.1f}-{b['end']:.1f}", "count": b["count"]}
            for b in bins
        ]

    def defects(self) -> List[Dict[str, Any]]:
        bands = [(40, 60), (25, 40), (15, 30), (10, 20)]
        return [
            {"name": name, "value": int(in_range(low, high, idx + 1))}
            for idx, (name, (low, high)) in enumerate(zip(DEFECTS, bands))
        ]

    def alerts(self, points: List[Dict[str, Any]], station: str = "OP-20") -> List[Dict[str, str]]:
        violations = [p for p in points if is_out_of_control(p)]
        return [
            {
                "message": "Rule 1 Violation: Point beyond control limit",
                "time": p["time"],
                "station": station,
            }
            for p in violations[-MAX_ALERTS:]
        ]

    # ---------- payloads ----------

    def line_status(self, filters: Filter, now: datetime) -> Dict[str, Any]:
        resolution, bounds = filters.resolve(now)
        shift = filters.shift_selector()
        points = synthesize_points(resolution, bounds.start, bounds.end, shift=shift)
        logger.debug(
            "line_status %s resolution=%s %s..%s points=%d",
            filters.date_range,
            resolution,
            bounds.start,
            bounds.end,
            len(points),
        )

        return {
            "line_kpi": self.line_kpi(now),
            "charts": {"velocity": self.velocity(resolution, bounds, shift)},
            "downtime": {"top_reasons": self.downtime_reasons()},
            "stations": self.stations(filters.line),
            "spc": {
                "metrics": self.spc_metrics(points),
                "charts": {
                    "control_points": points,
                    "histogram": self.histogram(points),
                    "defects": self.defects(),
                },
                "alerts": self.alerts(points),
            },
            "meta": {"resolution": resolution, "generated_at": now.isoformat()},
        }

    def production_trend(self, resolution: Resolution, bounds: DateBounds, shift: Optional[str] = None) -> List[Dict[str, Any]]:
        # Intraday station trends are hourly
        trend_resolution: Resolution = "hour" if resolution == "raw" else resolution
        return [
            {
                "time": bucket.label,
                "output": int(in_range(0, 500, bucket.seed)),
                "cycle_time": round(in_range(40, 55, bucket.seed + 100), 1),
            }
            for bucket in bucketize(trend_resolution, bounds.start, bounds.end, shift=shift)
        ]

    def logs(self, now: datetime, count: int = LOG_COUNT) -> List[Dict[str, Any]]:
        out = []
        for i in range(count):
            at = now - timedelta(minutes=2 * i)
            out.append(
                {
                    "timestamp": f"{at:%H:%M:%S}",
                    "part_id": f"PN-{10000 + i}",
                    "value": round(in_range(98, 102, i), 2),
                    "status": "OK" if noise(i) > 0.1 else "NOK",
                    "cycle_time": round(in_range(40, 50, i + 200), 1),
                }
            )
        return out

    def station_details(self, station_id: str, filters: Filter, now: datetime) -> Dict[str, Any]:
        resolution, bounds = filters.resolve(now)
        return {
            "station_details": {
                "station": station_id,
                "production_trend": self.production_trend(resolution, bounds, filters.shift_selector()),
                "logs": self.logs(now),
            },
            "meta": {"resolution": resolution, "generated_at": now.isoformat()},
        }


__all__ = ["MockDataGenerator", "bucket_target", "capability_status"]
