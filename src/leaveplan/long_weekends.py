"""Detection of natural long weekends.

A natural long weekend is a run of days off created by a holiday sitting next
to a weekend.  It costs no paid leave at all.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from typing import NamedTuple

from leaveplan.dates import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    SUNDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    add_days,
    is_year_elapsed,
    iter_dates,
    parse_date_key,
    resolve_effective_start,
    span_label,
    to_date_key,
    weekday_index,
)
from leaveplan.holidays import Holiday, enabled_holiday_dates

logger = logging.getLogger(__name__)


class LongWeekend(NamedTuple):
    """A contiguous span of days off that needs no paid leave."""

    start_date: str
    end_date: str
    days_off: int
    description: str
    dates: frozenset[str]


# weekday -> (days before the holiday, days after the holiday)
_SPAN_OFFSETS: dict[int, tuple[int, int]] = {
    FRIDAY: (0, 2),  # Fri–Sun
    MONDAY: (2, 0),  # Sat–Mon
    THURSDAY: (0, 3),  # Thu–Sun
    TUESDAY: (3, 0),  # Sat–Tue
    WEDNESDAY: (4, 0),  # Sat–Wed
}


def _holiday_span(
    day: datetime.date, holiday_keys: set[str]
) -> tuple[datetime.date, datetime.date] | None:
    """Return the long-weekend span a holiday on *day* creates, if any."""
    weekday = weekday_index(day)
    offsets = _SPAN_OFFSETS.get(weekday)
    if offsets is not None:
        before, after = offsets
        return add_days(day, -before), add_days(day, after)

    # Weekend holidays only matter when the neighbouring weekday is off too.
    if weekday == SATURDAY:
        friday = add_days(day, -1)
        if to_date_key(friday) in holiday_keys:
            return friday, add_days(day, 1)
    elif weekday == SUNDAY:
        monday = add_days(day, 1)
        if to_date_key(monday) in holiday_keys:
            return add_days(day, -1), monday
    return None


def _make_long_weekend(start: datetime.date, end: datetime.date) -> LongWeekend:
    dates = frozenset(to_date_key(d) for d in iter_dates(start, end))
    return LongWeekend(
        start_date=to_date_key(start),
        end_date=to_date_key(end),
        days_off=len(dates),
        description=f"{len(dates)} days off ({span_label(start, end)})",
        dates=dates,
    )


def detect_long_weekends(
    year: int,
    holidays: Iterable[Holiday],
    *,
    today: datetime.date | None = None,
) -> list[LongWeekend]:
    """Find the natural long weekends of *year*, ordered by start date.

    Only enabled holidays on or after the effective start are considered.
    Holidays are walked in date order; a holiday already covered by an earlier
    long weekend is skipped.  When a new span shares days with an earlier one
    (a Monday and a Tuesday holiday of the same week, say) the two are merged,
    so the returned date sets never overlap.
    """
    if is_year_elapsed(year, today):
        return []

    start = resolve_effective_start(year, today)
    start_key = to_date_key(start)
    holiday_keys = enabled_holiday_dates(holidays, year, start)

    claimed: dict[str, int] = {}  # date key -> index into spans
    spans: list[tuple[datetime.date, datetime.date] | None] = []

    for key in sorted(holiday_keys):
        if key in claimed:
            continue

        span = _holiday_span(parse_date_key(key), holiday_keys)
        if span is None:
            continue
        span_start, span_end = span
        if to_date_key(span_start) < start_key:
            continue

        # Absorb any earlier long weekend this span touches.
        overlapping = {
            claimed[k]
            for k in map(to_date_key, iter_dates(span_start, span_end))
            if k in claimed
        }
        for idx in overlapping:
            old_start, old_end = spans[idx]  # type: ignore[misc]
            span_start = min(span_start, old_start)
            span_end = max(span_end, old_end)
            spans[idx] = None

        spans.append((span_start, span_end))
        for d in iter_dates(span_start, span_end):
            claimed[to_date_key(d)] = len(spans) - 1

    long_weekends = [_make_long_weekend(s, e) for s, e in filter(None, spans)]
    long_weekends.sort(key=lambda lw: lw.start_date)
    logger.debug("Detected %d natural long weekends in %d", len(long_weekends), year)
    return long_weekends


def long_weekend_map(long_weekends: Iterable[LongWeekend]) -> dict[str, LongWeekend]:
    """Date key -> the long weekend covering it."""
    return {d: lw for lw in long_weekends for d in lw.dates}
