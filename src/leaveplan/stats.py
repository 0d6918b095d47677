"""Year summary counts, independent of the optimizer."""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import NamedTuple

from leaveplan.dates import (
    is_weekend,
    is_year_elapsed,
    iter_dates,
    resolve_effective_start,
    to_date_key,
    year_bounds,
)
from leaveplan.holidays import Holiday, enabled_holiday_dates


class YearStats(NamedTuple):
    total_weekends: int
    total_holidays: int
    total_off_days: int  # weekends + holidays, a holiday on a weekend counted once
    paid_leaves_available: int


def calculate_year_stats(
    year: int,
    holidays: Iterable[Holiday],
    leave_count: int = 0,
    *,
    today: datetime.date | None = None,
) -> YearStats:
    """Count the remaining weekend days and holidays of *year*.

    Counting starts at the effective start date (today, or January 1 for a
    future year).  A year that is already over has nothing left to count.
    """
    if is_year_elapsed(year, today):
        return YearStats(0, 0, 0, leave_count)

    start = resolve_effective_start(year, today)
    _, year_end = year_bounds(year)

    weekend_keys = {to_date_key(d) for d in iter_dates(start, year_end) if is_weekend(d)}
    holiday_keys = enabled_holiday_dates(holidays, year, start)

    return YearStats(
        total_weekends=len(weekend_keys),
        total_holidays=len(holiday_keys),
        total_off_days=len(weekend_keys | holiday_keys),
        paid_leaves_available=leave_count,
    )
