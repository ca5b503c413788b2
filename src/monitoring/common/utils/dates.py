"""Calendar helpers for monthly reporting periods.

Month arithmetic follows the platform web UI conventions: adding months
clamps the day to the target month length, and fractional month differences
are measured against the nearest month anchors.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Iterator

PERIOD_FORMAT = "%Y%m"
ISO_FORMAT = "%Y-%m-%dT%H:%M:%S"


def period_from_date(value: date) -> str:
    return value.strftime(PERIOD_FORMAT)


def date_from_period(period: str) -> datetime:
    """Return the first instant of a `YYYYMM` period."""

    if len(period) != 6 or not period.isdigit():
        raise ValueError(f"Invalid period: {period!r}")
    return datetime(int(period[:4]), int(period[4:]), 1)


def to_iso_string(value: datetime) -> str:
    return value.strftime(ISO_FORMAT)


def parse_iso_datetime(value: str) -> datetime:
    """Parse a platform timestamp (`2024-01-01T00:00:00.000`) as a naive datetime."""

    parsed = datetime.fromisoformat(value.strip())
    return parsed.replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time(23, 59, 59, 999000))


def start_of_month(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def end_of_month(value: datetime) -> datetime:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return datetime(value.year, value.month, last_day, 23, 59, 59, 999000)


def add_months(value: datetime, months: int) -> datetime:
    index = value.year * 12 + (value.month - 1) + months
    year, month0 = divmod(index, 12)
    day = min(value.day, calendar.monthrange(year, month0 + 1)[1])
    return value.replace(year=year, month=month0 + 1, day=day)


def month_diff(a: datetime, b: datetime) -> float:
    """Fractional number of months from `b` to `a` (positive when `a` is later)."""

    if a.day < b.day:
        return -month_diff(b, a)

    whole = (b.year - a.year) * 12 + (b.month - a.month)
    anchor = add_months(a, whole)
    if b < anchor:
        anchor2 = add_months(a, whole - 1)
        adjust = (b - anchor) / (anchor - anchor2)
    else:
        anchor2 = add_months(a, whole + 1)
        adjust = (b - anchor) / (anchor2 - anchor)

    return -(whole + adjust) or 0.0


def whole_month_diff(a: datetime, b: datetime) -> int:
    # Truncates toward zero.
    return int(month_diff(a, b))


def iter_months(start: datetime, end: datetime) -> Iterator[datetime]:
    """Yield the first instant of every month from `start` to `end`, both included."""

    current = start_of_month(start)
    last = start_of_month(end)
    while current <= last:
        yield current
        current = add_months(current, 1)
