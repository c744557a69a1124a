"""Statistical process control formulas.

All helpers fail soft: too little data, or a zero standard deviation, gives
``None`` (or ``0.0`` for the plain mean/std helpers) instead of raising.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

Number = Union[int, float]

# OLE Automation dates count days from this epoch
OLE_EPOCH = datetime(1899, 12, 30)


def _as_array(values: Optional[Sequence[Number]]) -> np.ndarray:
    if values is None:
        return np.array([], dtype=float)
    return np.asarray(list(values), dtype=float)


def calculate_mean(values: Optional[Sequence[Number]]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def calculate_std_dev(values: Optional[Sequence[Number]], sample: bool = True) -> float:
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0
    return float(arr.std(ddof=1 if sample else 0))


def calculate_cpk(values, usl: float, lsl: float, sample: bool = True) -> Optional[float]:
    """Cpk = min((USL - mean) / 3σ, (mean - LSL) / 3σ)."""
    arr = _as_array(values)
    if arr.size < 2:
        return None
    std_dev = calculate_std_dev(arr, sample=sample)
    if std_dev == 0:
        return None
    mean = float(arr.mean())
    cpu = (usl - mean) / (3 * std_dev)
    cpl = (mean - lsl) / (3 * std_dev)
    return min(cpu, cpl)


def calculate_cp(values, usl: float, lsl: float, sample: bool = True) -> Optional[float]:
    """Cp = (USL - LSL) / 6σ."""
    arr = _as_array(values)
    if arr.size < 2:
        return None
    std_dev = calculate_std_dev(arr, sample=sample)
    if std_dev == 0:
        return None
    return (usl - lsl) / (6 * std_dev)


def calculate_control_limits(values, sigma: float = 3) -> Optional[Dict[str, float]]:
    arr = _as_array(values)
    if arr.size < 2:
        return None
    mean = float(arr.mean())
    std_dev = calculate_std_dev(arr)
    return {
        "ucl": mean + sigma * std_dev,
        "lcl": mean - sigma * std_dev,
        "mean": mean,
        "std_dev": std_dev,
    }


def create_histogram(values, bin_count: int = 10) -> List[Dict[str, float]]:
    """Equal-width bins from min to max; the last bin includes the max."""
    arr = _as_array(values)
    if arr.size == 0 or bin_count < 1:
        return []

    low = float(arr.min())
    high = float(arr.max())
    width = (high - low) / bin_count

    if width == 0:
        index = np.zeros(arr.size, dtype=int)
    else:
        index = np.minimum(np.floor((arr - low) / width).astype(int), bin_count - 1)
    counts = np.bincount(index, minlength=bin_count)

    return [
        {
            "start": low + i * width,
            "end": low + (i + 1) * width,
            "count": int(counts[i]),
            "percentage": float(counts[i]) / arr.size * 100,
        }
        for i in range(bin_count)
    ]


def calculate_correlation(x_values, y_values) -> Optional[float]:
    """Pearson correlation; ``None`` for mismatched, short or flat input."""
    if x_values is None or y_values is None:
        return None
    x = _as_array(x_values)
    y = _as_array(y_values)
    if x.size != y.size or x.size < 2:
        return None

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(np.sqrt((dx * dx).sum() * (dy * dy).sum()))
    if denominator == 0:
        return None
    return float((dx * dy).sum()) / denominator


def filter_outliers(values, multiplier: float = 1.5) -> List[float]:
    """Drop values outside ``[Q1 - k*IQR, Q3 + k*IQR]``.

    Quartiles are taken by index into the sorted data (no interpolation).
    Fewer than four values are returned unchanged.
    """
    if values is None:
        return []
    values = list(values)
    if len(values) < 4:
        return values

    ordered = np.sort(_as_array(values))
    q1 = ordered[int(len(ordered) * 0.25)]
    q3 = ordered[int(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower = q1 - multiplier * iqr
    upper = q3 + multiplier * iqr
    return [v for v in values if lower <= v <= upper]


def parse_numeric(value) -> Optional[float]:
    """Coerce NVARCHAR-style numbers from LabVIEW rows to float."""
    if value is None or value == "":
        return None
    parsed = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    return float(parsed) if pd.notna(parsed) else None


def ole_to_datetime(ole_date: Optional[float]) -> Optional[datetime]:
    if not ole_date:
        return None
    return OLE_EPOCH + timedelta(days=float(ole_date))


__all__ = [
    "calculate_control_limits",
    "calculate_correlation",
    "calculate_cp",
    "calculate_cpk",
    "calculate_mean",
    "calculate_std_dev",
    "create_histogram",
    "filter_outliers",
    "ole_to_datetime",
    "parse_numeric",
]
