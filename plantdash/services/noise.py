"""Seeded noise shared by every synthetic generator."""

from __future__ import annotations

import math


def noise(seed: float) -> float:
    """Return a reproducible value in ``[0, 1)`` for ``seed``.

    Hash-like trigonometric transform, not a random number generator: the same
    seed always gives the same value, which keeps mock charts stable between
    polls with unchanged filters.
    """
    t = math.sin(seed * 12.9898 + 78.233) * 43758.5453
    return t - math.floor(t)


def in_range(low: float, high: float, seed: float) -> float:
    return low + noise(seed) * (high - low)


__all__ = ["in_range", "noise"]
