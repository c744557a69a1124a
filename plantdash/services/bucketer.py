"""Walk a date span at a chart resolution and emit seeded buckets."""

from __future__ import annotations

import calendar
from datetime import MAXYEAR, datetime, timedelta
from typing import List, NamedTuple, Optional

from plantdash.utils.filter_params import Resolution, midnight

# Shift letter -> starting hour; each shift lasts eight hours
SHIFT_STARTS = (("A", 6), ("B", 14), ("C", 22))


class Bucket(NamedTuple):
    label: str
    seed: int
    at: datetime


def shift_for_hour(hour: int) -> str:
    if 6 <= hour < 14:
        return "A"
    if 14 <= hour < 22:
        return "B"
    return "C"


def _advance(cursor: datetime, step: timedelta) -> Optional[datetime]:
    """``cursor + step``, or ``None`` once the step would pass ``datetime.max``."""
    try:
        return cursor + step
    except OverflowError:
        return None


def _next_month(cursor: datetime) -> Optional[datetime]:
    if cursor.month == 12:
        if cursor.year == MAXYEAR:
            return None
        return cursor.replace(year=cursor.year + 1, month=1)
    return cursor.replace(month=cursor.month + 1)


def bucketize(
    resolution: Resolution,
    start: datetime,
    end: datetime,
    step_minutes: int = 10,
    shift: Optional[str] = None,
) -> List[Bucket]:
    """
    Split ``[start, end]`` into labelled buckets in ascending order.

    The cursor snaps to the resolution's grid (``step_minutes`` for raw, the
    hour, midnight, the first of the month) and advances while ``<= end``.
    Seeds count ``0, 1, 2, ...`` per call; a shift day consumes three.

    When ``shift`` names a single shift, buckets outside it are dropped but
    their seeds are still consumed, so the surviving buckets keep the values
    they have in the unfiltered series.
    """
    buckets: List[Bucket] = []
    if start > end:
        return buckets

    seed = 0

    def emit(label: str, at: datetime, bucket_shift: Optional[str] = None) -> None:
        nonlocal seed
        if shift is None or bucket_shift is None or bucket_shift == shift:
            buckets.append(Bucket(label=label, seed=seed, at=at))
        seed += 1

    if resolution == "shift":
        day: Optional[datetime] = midnight(start.date())
        while day is not None and day <= end:
            for letter, hour in SHIFT_STARTS:
                emit(f"{day:%d/%m} - {letter}", day + timedelta(hours=hour), letter)
            day = _advance(day, timedelta(days=1))
        return buckets

    if resolution == "day":
        cursor: Optional[datetime] = midnight(start.date())
        while cursor is not None and cursor <= end:
            emit(f"{cursor:%d/%m}", cursor)
            cursor = _advance(cursor, timedelta(days=1))
        return buckets

    if resolution == "month":
        cursor = midnight(start.date()).replace(day=1)
        while cursor is not None and cursor <= end:
            emit(f"{calendar.month_name[cursor.month]} {cursor.year}", cursor)
            cursor = _next_month(cursor)
        return buckets

    if resolution == "hour":
        cursor = start.replace(minute=0, second=0, microsecond=0)
        while cursor is not None and cursor <= end:
            emit(f"{cursor:%H}:00", cursor, shift_for_hour(cursor.hour))
            cursor = _advance(cursor, timedelta(hours=1))
        return buckets

    # raw
    step = timedelta(minutes=step_minutes)
    cursor = start.replace(second=0, microsecond=0)
    cursor -= timedelta(minutes=cursor.minute % step_minutes)
    while cursor is not None and cursor <= end:
        emit(f"{cursor:%H:%M}", cursor, shift_for_hour(cursor.hour))
        cursor = _advance(cursor, step)
    return buckets


__all__ = ["Bucket", "SHIFT_STARTS", "bucketize", "shift_for_hour"]
