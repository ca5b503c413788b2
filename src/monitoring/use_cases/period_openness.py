"""Period openness predicates for a data set.

No network calls here and no wall clock: every predicate takes the evaluation
instant as `now`. The approval check is injected as an async lookup so that it
only hits the platform when the time window is open.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from src.monitoring.common.models.project import DataSet
from src.monitoring.common.utils.dates import end_of_month, month_diff, period_from_date

ApprovalLookup = Callable[[str], Awaitable[bool]]


def are_periods_open(data_set: DataSet, date: datetime, now: datetime) -> bool:
    dip = data_set.get_data_input_period(period_from_date(date))
    if dip is None:
        return False
    return dip.opening_date < now < dip.closing_date


def is_future_periods_open(data_set: DataSet, date: datetime, now: datetime) -> bool:
    return math.ceil(month_diff(date, now)) < data_set.open_future_periods


def is_expiry_days_open(data_set: DataSet, date: datetime, now: datetime) -> bool:
    # None and 0 both mean the data set never expires.
    if not data_set.expiry_days:
        return True
    return end_of_month(date) + timedelta(days=data_set.expiry_days - 1) > now


def is_time_window_open(data_set: DataSet, date: datetime, now: datetime) -> bool:
    return (
        are_periods_open(data_set, date, now)
        and is_future_periods_open(data_set, date, now)
        and is_expiry_days_open(data_set, date, now)
    )


async def is_open(
    data_set: DataSet,
    date: datetime,
    *,
    now: datetime,
    approval_lookup: ApprovalLookup,
) -> bool:
    """Open for entry: inside the time window and not accepted by approval."""

    if not is_time_window_open(data_set, date, now):
        return False
    return not await approval_lookup(period_from_date(date))
