"""Synthetic X-bar/R control chart points."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from plantdash.services.bucketer import bucketize
from plantdash.services.noise import in_range, noise
from plantdash.utils.filter_params import Resolution

TARGET = 100
UCL = 105
LCL = 95
CL = 100
UCL_R = 3
LCL_R = 0

# Raw SPC samples are taken every half hour
SPC_STEP_MINUTES = 30


def synthesize_point(label: str, seed: int, aggregated: bool) -> Dict[str, float]:
    # Averaged buckets vary less and go out of control less often
    variation = 2 if aggregated else 4
    threshold = 0.97 if aggregated else 0.90

    if noise(seed) > threshold:
        mean = UCL + 2 if noise(seed + 100) > 0.5 else LCL - 2
    else:
        mean = TARGET + in_range(-variation, variation, seed)

    return {
        "time": label,
        "mean": round(mean, 2),
        "range": round(in_range(0.5, 1.5 if aggregated else 2.5, seed + 50), 2),
        "ucl": UCL,
        "lcl": LCL,
        "cl": CL,
        "ucl_r": UCL_R,
        "lcl_r": LCL_R,
    }


def synthesize_points(
    resolution: Resolution,
    start: datetime,
    end: datetime,
    shift: Optional[str] = None,
) -> List[Dict[str, float]]:
    aggregated = resolution != "raw"
    return [
        synthesize_point(bucket.label, bucket.seed, aggregated)
        for bucket in bucketize(resolution, start, end, step_minutes=SPC_STEP_MINUTES, shift=shift)
    ]


def is_out_of_control(point: Dict[str, float]) -> bool:
    return point["mean"] > point["ucl"] or point["mean"] < point["lcl"]


__all__ = [
    "CL",
    "LCL",
    "LCL_R",
    "TARGET",
    "UCL",
    "UCL_R",
    "is_out_of_control",
    "synthesize_point",
    "synthesize_points",
]
