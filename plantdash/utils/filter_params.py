# filter_params.py
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger("plantdash.filters")

DateRange = Literal["today", "yesterday", "last7", "last30", "custom"]
Resolution = Literal["raw", "hour", "shift", "day", "month"]

DATE_RANGES: Tuple[str, ...] = ("today", "yesterday", "last7", "last30", "custom")

# Fixed ranges map straight to a resolution; custom is derived from its span
RANGE_RESOLUTION = {
    "today": "raw",
    "yesterday": "raw",
    "last7": "shift",
    "last30": "day",
}

RANGE_DAYS = {"last7": 7, "last30": 30}

END_OF_DAY = time(23, 59, 59, 999000)


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        parsed = pd.to_datetime(value, errors="coerce")
        return parsed.date() if pd.notna(parsed) else None


def midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def resolution_for_span(start: datetime, end: datetime) -> Resolution:
    """Pick a bucket granularity from the length of a custom range."""
    span_days = math.ceil((end - start) / timedelta(days=1))
    if span_days <= 1:
        return "raw"
    if span_days <= 7:
        return "shift"
    if span_days <= 30:
        return "day"
    return "month"


@dataclass(frozen=True)
class DateBounds:
    start: datetime
    end: datetime


def resolve(
    date_range: Optional[str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Tuple[Resolution, datetime, datetime]:
    """
    Turn a date-range selector into ``(resolution, start, end)``.

    Never raises. An unknown selector, or a custom range missing either
    bound, is served as ``today``.
    """
    now = now or datetime.now()
    today = now.date()

    if date_range == "custom":
        if start_date is not None and end_date is not None:
            start = midnight(start_date)
            end = end_of_day(end_date)
            return resolution_for_span(start, end), start, end
        logger.warning(
            "Custom range without valid bounds (start=%s, end=%s); using today",
            start_date,
            end_date,
        )
        date_range = "today"

    if date_range == "yesterday":
        day = today - timedelta(days=1)
        return "raw", midnight(day), end_of_day(day)

    if date_range in RANGE_DAYS:
        start = midnight((now - timedelta(days=RANGE_DAYS[date_range])).date())
        return RANGE_RESOLUTION[date_range], start, now

    if date_range not in (None, "", "today"):
        logger.warning("Unknown date range %r; using today", date_range)

    return "raw", midnight(today), now


@dataclass(frozen=True)
class Filter:
    """Request filter, built once at the HTTP boundary."""

    date_range: DateRange = "today"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    plant: str = "pune"
    line: str = "fcpv"
    station: str = "all"
    shift: str = "all"

    @classmethod
    def from_args(cls, args: Mapping[str, str], defaults: Optional[Mapping[str, str]] = None) -> "Filter":
        defaults = defaults or {}

        def pick(key: str, fallback: str) -> str:
            return args.get(key) or defaults.get(key) or fallback

        date_range = pick("dateRange", "today")
        if date_range not in DATE_RANGES:
            logger.warning("Unknown date range %r; using today", date_range)
            date_range = "today"

        start_date = end_date = None
        if date_range == "custom":
            start_date = parse_date(args.get("startDate"))
            end_date = parse_date(args.get("endDate"))

        return cls(
            date_range=date_range,
            start_date=start_date,
            end_date=end_date,
            plant=pick("plant", "pune"),
            line=pick("line", "fcpv"),
            station=pick("station", "all"),
            shift=pick("shift", "all"),
        )

    def resolve(self, now: Optional[datetime] = None) -> Tuple[Resolution, DateBounds]:
        resolution, start, end = resolve(self.date_range, self.start_date, self.end_date, now)
        return resolution, DateBounds(start=start, end=end)

    @property
    def resolution(self) -> Resolution:
        if self.date_range == "custom":
            if self.start_date is None or self.end_date is None:
                return "raw"
            return resolution_for_span(midnight(self.start_date), end_of_day(self.end_date))
        return RANGE_RESOLUTION.get(self.date_range, "raw")

    def shift_selector(self) -> Optional[str]:
        """The single shift letter requested, or ``None`` for all shifts."""
        return self.shift if self.shift in ("A", "B", "C") else None

    def to_dict(self) -> dict:
        out = {
            "plant": self.plant,
            "line": self.line,
            "station": self.station,
            "shift": self.shift,
            "dateRange": self.date_range,
        }
        if self.date_range == "custom":
            out["startDate"] = self.start_date.isoformat() if self.start_date else None
            out["endDate"] = self.end_date.isoformat() if self.end_date else None
        return out

    def to_query(self) -> dict:
        """Query parameters for the LabVIEW proxy, ``None`` values removed."""
        return {k: v for k, v in self.to_dict().items() if v is not None}


__all__ = [
    "DATE_RANGES",
    "DateBounds",
    "DateRange",
    "Filter",
    "Resolution",
    "end_of_day",
    "midnight",
    "parse_date",
    "resolution_for_span",
    "resolve",
]
