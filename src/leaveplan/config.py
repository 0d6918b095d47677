"""Planner files: JSON documents holding a year's holidays and preferences.

Example::

    {
      "year": 2026,
      "leaves": 12,
      "min_gap_weeks": 3,
      "country": "in",
      "holidays": [
        {"date": "2026-03-17", "name": "Company day"},
        "2026-12-24"
      ]
    }
"""

from __future__ import annotations

import json
import logging
import pathlib
from collections.abc import Iterable
from typing import Any, NamedTuple

from leaveplan.dates import is_valid_date_key, today_utc
from leaveplan.errors import ConfigError, HolidayValidationError
from leaveplan.holidays import (
    DEFAULT_HOLIDAY_NAME,
    Holiday,
    clamp_gap_weeks,
    get_holidays,
    new_holiday_id,
    validate_leave_count,
)
from leaveplan.optimizer import DEFAULT_MAX_BLOCK_LENGTH, DEFAULT_MIN_GAP_WEEKS

logger = logging.getLogger(__name__)


class PlannerConfig(NamedTuple):
    year: int
    leaves: int | None
    min_gap_weeks: int
    max_block_length: int
    country: str | None
    holidays: list[Holiday]


def normalize_holidays(entries: Iterable[Any], year: int) -> list[Holiday]:
    """Turn loosely-typed holiday entries into sorted :class:`Holiday` records.

    Entries may be date-key strings or objects with ``date``, ``name``,
    ``enabled`` and ``id``.  Anything without a valid date inside *year* is
    dropped rather than rejected.
    """
    prefix = f"{year}-"
    out: list[Holiday] = []
    for item in entries:
        if isinstance(item, str):
            item = {"date": item}
        if not isinstance(item, dict):
            continue

        date = item.get("date")
        if not isinstance(date, str) or not date.startswith(prefix):
            continue
        if not is_valid_date_key(date):
            continue

        raw_id = item.get("id")
        holiday_id = raw_id if isinstance(raw_id, str) and raw_id else new_holiday_id()
        raw_name = item.get("name")
        name = raw_name.strip() if isinstance(raw_name, str) and raw_name.strip() else ""
        enabled = item.get("enabled")

        out.append(
            Holiday(
                id=holiday_id,
                date=date,
                name=name or DEFAULT_HOLIDAY_NAME,
                enabled=enabled if isinstance(enabled, bool) else True,
            )
        )

    out.sort(key=lambda h: h.date)
    return out


def merge_holidays(base: Iterable[Holiday], overrides: Iterable[Holiday]) -> list[Holiday]:
    """Combine two holiday lists; *overrides* win when both share a date."""
    by_date = {h.date: h for h in base}
    for h in overrides:
        by_date[h.date] = h
    return sorted(by_date.values(), key=lambda h: h.date)


def _read_json(path: str | pathlib.Path) -> dict[str, Any]:
    p = pathlib.Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file: {exc}") from None

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object.")
    return data


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}.") from None


def load_config(path: str | pathlib.Path, year: int | None = None) -> PlannerConfig:
    """Load a planner file.

    *year* overrides the file's ``year``; without either the current year is
    used.  Holiday entries outside the resolved year are dropped.
    """
    data = _read_json(path)

    resolved_year = year if year is not None else _optional_int(data, "year")
    if resolved_year is None:
        resolved_year = today_utc().year

    leaves = data.get("leaves")
    if leaves is not None:
        try:
            leaves = validate_leave_count(leaves)
        except HolidayValidationError as exc:
            raise ConfigError(f"Invalid 'leaves': {exc}") from None

    gap = _optional_int(data, "min_gap_weeks")
    min_gap_weeks = clamp_gap_weeks(gap) if gap is not None else DEFAULT_MIN_GAP_WEEKS

    max_block = _optional_int(data, "max_block_length")
    max_block_length = max_block if max_block is not None else DEFAULT_MAX_BLOCK_LENGTH

    country = data.get("country")
    if country is not None and not isinstance(country, str):
        raise ConfigError("'country' must be a string.")

    raw_holidays = data.get("holidays", [])
    if not isinstance(raw_holidays, list):
        raise ConfigError("'holidays' must be a list.")

    explicit = normalize_holidays(raw_holidays, resolved_year)
    if len(explicit) < len(raw_holidays):
        logger.warning(
            "Dropped %d holiday entries outside %d or without a valid date",
            len(raw_holidays) - len(explicit),
            resolved_year,
        )
    preset: list[Holiday] = []
    if country and country != "none":
        try:
            preset = get_holidays(country, resolved_year)
        except KeyError as exc:
            raise ConfigError(str(exc.args[0])) from None
    holidays = merge_holidays(preset, explicit)

    return PlannerConfig(
        year=resolved_year,
        leaves=leaves,
        min_gap_weeks=min_gap_weeks,
        max_block_length=max_block_length,
        country=country,
        holidays=holidays,
    )
