"""Calendar helpers shared by the planner.

Every date that crosses the public boundary is a ``YYYY-MM-DD`` key.  Keys
sort lexicographically in chronological order, so they double as sort keys.
All arithmetic happens on plain :class:`datetime.date` values, which carry no
timezone and therefore cannot drift.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Iterator

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DAY_ABBREVS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def to_date_key(value: datetime.date) -> str:
    """Return the canonical ``YYYY-MM-DD`` key for *value*.

    Aware datetimes are converted to UTC first; naive ones are used as-is.
    """
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def is_valid_date_key(key: object) -> bool:
    """Return True if *key* is a ``YYYY-MM-DD`` string naming a real date."""
    if not isinstance(key, str) or not _DATE_KEY_RE.match(key):
        return False
    y, m, d = (int(part) for part in key.split("-"))
    try:
        dt = datetime.date(y, m, d)
    except ValueError:
        return False
    return (dt.year, dt.month, dt.day) == (y, m, d)


def parse_date_key(key: str) -> datetime.date:
    """Parse a ``YYYY-MM-DD`` key.  Raises ``ValueError`` on anything else."""
    if not is_valid_date_key(key):
        msg = f"Invalid date key {key!r}. Use YYYY-MM-DD."
        raise ValueError(msg)
    y, m, d = (int(part) for part in key.split("-"))
    return datetime.date(y, m, d)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def add_days(value: datetime.date, n: int) -> datetime.date:
    return value + datetime.timedelta(days=n)


def days_between(start: datetime.date, end: datetime.date) -> int:
    """Signed number of days from *start* to *end*."""
    return (end - start).days


def iter_dates(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Yield every date from *start* to *end*, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


def weekday_index(value: datetime.date) -> int:
    """Weekday with Sunday = 0 … Saturday = 6."""
    return (value.weekday() + 1) % 7


def day_abbrev(value: datetime.date) -> str:
    return DAY_ABBREVS[weekday_index(value)]


def is_weekend(value: datetime.date) -> bool:
    return value.weekday() >= 5


def span_label(start: datetime.date, end: datetime.date) -> str:
    """``"Sat–Mon"`` style label for a span."""
    return f"{day_abbrev(start)}–{day_abbrev(end)}"


# ---------------------------------------------------------------------------
# Planning window
# ---------------------------------------------------------------------------


def today_utc() -> datetime.date:
    """Today's date on the UTC calendar."""
    return datetime.datetime.now(datetime.timezone.utc).date()


def year_bounds(year: int) -> tuple[datetime.date, datetime.date]:
    return datetime.date(year, 1, 1), datetime.date(year, 12, 31)


def is_year_elapsed(year: int, today: datetime.date | None = None) -> bool:
    """True once *today* is past December 31 of *year*."""
    today = today_utc() if today is None else today
    return today > datetime.date(year, 12, 31)


def resolve_effective_start(year: int, today: datetime.date | None = None) -> datetime.date:
    """Return the first date planning should consider for *year*.

    * *today* when it falls inside the year,
    * January 1 when the year has not started yet,
    * December 31 when the year is over.  Callers check
      :func:`is_year_elapsed` and return empty results in that case.
    """
    today = today_utc() if today is None else today
    first, last = year_bounds(year)
    if today < first:
        return first
    if today > last:
        return last
    return today
