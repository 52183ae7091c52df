"""
Neighborhood Safety - Temporal Parsing

Timestamp normalization and reporting-window helpers. All timestamps are
normalized to timezone-aware UTC; naive inputs are assumed to be UTC.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import pandas as pd

SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DateRange:
    """Closed reporting window [start, end]."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            value = getattr(self, name)
            parsed = parse_timestamp(value)
            if parsed is None:
                raise ValueError(f"Date range {name} is not a timestamp: {value!r}")
            object.__setattr__(self, name, parsed)

        if self.start > self.end:
            raise ValueError(f"Date range start {self.start} is after end {self.end}")

    @property
    def days(self) -> float:
        return (self.end - self.start).total_seconds() / SECONDS_PER_DAY

    @property
    def weeks(self) -> float:
        """Window length in weeks, never shorter than one day."""
        return max(self.days, 1.0) / DAYS_PER_WEEK

    def union(self, other: DateRange | None) -> DateRange:
        """Smallest window covering both ranges."""
        if other is None:
            return self
        return DateRange(start=min(self.start, other.start), end=max(self.end, other.end))

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a timestamp-like value into an aware UTC datetime.

    Returns None for missing or unparseable values instead of raising.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)

    try:
        parsed = pd.to_datetime(value, errors="coerce", utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def infer_date_range(timestamps: Iterable[Any]) -> DateRange | None:
    """
    Window spanning the earliest and latest of the given timestamps.

    Values are normalized with ``parse_timestamp``; missing or unparseable
    ones are skipped.
    """
    parsed = (parse_timestamp(ts) for ts in timestamps)
    valid = [ts for ts in parsed if ts is not None]
    if not valid:
        return None
    return DateRange(start=min(valid), end=max(valid))


def period_weeks(date_range: DateRange | None, default: float) -> float:
    """
    Length of the reporting period in weeks.

    ``default`` applies when the window is unknown or has zero length, as
    when it was inferred from a single timestamp.
    """
    if date_range is None or date_range.days == 0:
        return default
    return date_range.weeks


def age_in_days(timestamp: datetime, as_of: datetime) -> float:
    """Days elapsed between ``timestamp`` and ``as_of`` (negative if in the future)."""
    return (as_of - timestamp).total_seconds() / SECONDS_PER_DAY
