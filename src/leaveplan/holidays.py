"""Holiday records, seed presets and the in-memory holiday book.

Seed presets are plain lists of dates.  Regional and lunar holidays move
from year to year, so nothing here computes a date; each preset only covers
the years it lists and is meant to be edited by the user.
"""

from __future__ import annotations

import datetime
import logging
import math
import re
import uuid
from collections.abc import Iterable
from typing import NamedTuple

from leaveplan.dates import is_valid_date_key, to_date_key
from leaveplan.errors import DuplicateHolidayError, HolidayValidationError

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 60
MAX_PAID_LEAVES = 200
MIN_GAP_WEEKS = 1
MAX_GAP_WEEKS = 8
DEFAULT_HOLIDAY_NAME = "Holiday"

_DIGITS_RE = re.compile(r"^\d+$")


class Holiday(NamedTuple):
    """A single public holiday.  Identity is ``id``; ``date`` is a date key."""

    id: str
    date: str
    name: str
    enabled: bool = True


def new_holiday_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def enabled_holiday_dates(
    holidays: Iterable[Holiday],
    year: int,
    start: datetime.date | None = None,
) -> set[str]:
    """Date keys of enabled holidays inside *year*, on or after *start*.

    Several records on the same date collapse into one key.
    """
    prefix = f"{year}-"
    start_key = to_date_key(start) if start is not None else ""
    return {
        h.date
        for h in holidays
        if h.enabled and h.date.startswith(prefix) and h.date >= start_key
    }


# ---------------------------------------------------------------------------
# Seed presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, str] = {
    "in": "India generic holidays (editable starter list)",
}

_INDIA_GENERIC: dict[int, list[tuple[str, str]]] = {
    2026: [
        ("2026-01-01", "New Year's Day"),
        ("2026-01-14", "Makar Sankranti / Pongal (observed)"),
        ("2026-01-26", "Republic Day"),
        ("2026-03-08", "Holi"),
        ("2026-03-29", "Good Friday"),
        ("2026-04-14", "Dr. B. R. Ambedkar Jayanti"),
        ("2026-05-01", "Labour Day / May Day"),
        ("2026-08-15", "Independence Day"),
        ("2026-10-02", "Gandhi Jayanti"),
        ("2026-10-20", "Dussehra / Vijayadashami"),
        ("2026-11-08", "Diwali (Deepavali)"),
        ("2026-12-25", "Christmas Day"),
    ],
}

_PRESET_TABLES: dict[str, dict[int, list[tuple[str, str]]]] = {
    "in": _INDIA_GENERIC,
}


def get_holidays(country: str, year: int) -> list[Holiday]:
    """Return fresh, enabled :class:`Holiday` records for a seed preset.

    Years the preset does not cover yield an empty list.
    Raises ``KeyError`` if the country is not supported.
    """
    table = _PRESET_TABLES.get(country)
    if table is None:
        supported = ", ".join(sorted(PRESETS))
        msg = f"Unknown country preset {country!r}. Supported: {supported}"
        raise KeyError(msg)
    return [Holiday(new_holiday_id(), d, name) for d, name in table.get(year, [])]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_holiday(
    year: int,
    date: str | None,
    name: str | None,
    enabled: bool = True,
) -> tuple[str, str, bool]:
    """Check and normalize a holiday's fields.

    Returns ``(date, name, enabled)`` with the name stripped and capped at
    :data:`MAX_NAME_LENGTH` characters.
    """
    if not date:
        raise HolidayValidationError("Date is required.")
    if not is_valid_date_key(date):
        raise HolidayValidationError("Date must be YYYY-MM-DD.")
    if not date.startswith(f"{year}-"):
        raise HolidayValidationError(f"Date must be within {year}.")

    clean = (name or "").strip()
    if not clean:
        raise HolidayValidationError("Holiday name cannot be empty.")

    return date, clean[:MAX_NAME_LENGTH], bool(enabled)


def validate_leave_count(value: object) -> int:
    """Parse a paid-leave count typed by the user."""
    raw = str(value).strip()
    if not raw:
        raise HolidayValidationError("Paid leaves cannot be empty.")
    if raw.startswith("-") and _DIGITS_RE.match(raw[1:]):
        raise HolidayValidationError("Paid leaves cannot be negative.")
    if not _DIGITS_RE.match(raw):
        raise HolidayValidationError("Paid leaves must be a number.")

    count = int(raw)
    if count > MAX_PAID_LEAVES:
        raise HolidayValidationError(f"Paid leaves cannot exceed {MAX_PAID_LEAVES} days.")
    return count


def clamp_gap_weeks(weeks: float) -> int:
    """Floor *weeks* and clamp it to the supported 1–8 range."""
    return max(MIN_GAP_WEEKS, min(MAX_GAP_WEEKS, math.floor(weeks)))


# ---------------------------------------------------------------------------
# Holiday book
# ---------------------------------------------------------------------------


class HolidayBook:
    """Editable, date-sorted holiday list for one year.

    The planning functions only ever read :attr:`holidays`, an immutable
    snapshot, so a book can be edited freely between runs.
    """

    def __init__(self, year: int, holidays: Iterable[Holiday] = ()):
        self.year = year
        self._items: list[Holiday] = sorted(holidays, key=lambda h: h.date)

    @classmethod
    def from_preset(cls, country: str, year: int) -> HolidayBook:
        return cls(year, get_holidays(country, year))

    @property
    def holidays(self) -> tuple[Holiday, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _index_of(self, holiday_id: str) -> int:
        for i, h in enumerate(self._items):
            if h.id == holiday_id:
                return i
        raise KeyError(f"No holiday with id {holiday_id!r}")

    def _commit(self, items: list[Holiday]) -> None:
        items.sort(key=lambda h: h.date)
        self._items = items

    def add(self, date: str, name: str, enabled: bool = True) -> Holiday:
        """Add a holiday, or overwrite name/enabled of the one already on *date*."""
        date, name, enabled = validate_holiday(self.year, date, name, enabled)
        items = list(self._items)
        for i, h in enumerate(items):
            if h.date == date:
                items[i] = h._replace(name=name, enabled=enabled)
                logger.debug("Updated holiday on %s", date)
                self._commit(items)
                return items[i]

        holiday = Holiday(new_holiday_id(), date, name, enabled)
        items.append(holiday)
        logger.debug("Added holiday %s on %s", name, date)
        self._commit(items)
        return holiday

    def update(
        self,
        holiday_id: str,
        *,
        date: str | None = None,
        name: str | None = None,
        enabled: bool | None = None,
    ) -> Holiday:
        """Patch a holiday.  Moving it onto another holiday's date is refused."""
        idx = self._index_of(holiday_id)
        current = self._items[idx]
        new_date, new_name, new_enabled = validate_holiday(
            self.year,
            current.date if date is None else date,
            current.name if name is None else name,
            current.enabled if enabled is None else enabled,
        )
        if any(h.date == new_date and h.id != holiday_id for h in self._items):
            raise DuplicateHolidayError(f"Another holiday already exists on {new_date}.")

        items = list(self._items)
        items[idx] = current._replace(date=new_date, name=new_name, enabled=new_enabled)
        self._commit(items)
        return items[idx]

    def toggle(self, holiday_id: str) -> Holiday:
        idx = self._index_of(holiday_id)
        items = list(self._items)
        items[idx] = items[idx]._replace(enabled=not items[idx].enabled)
        self._commit(items)
        return items[idx]

    def delete(self, holiday_id: str) -> None:
        idx = self._index_of(holiday_id)
        self._commit([h for i, h in enumerate(self._items) if i != idx])

    def reset_defaults(self, country: str) -> None:
        self._commit(get_holidays(country, self.year))

    def enabled_map(self) -> dict[str, Holiday]:
        """Date key -> enabled holiday, for per-day lookups."""
        return {h.date: h for h in self._items if h.enabled}
