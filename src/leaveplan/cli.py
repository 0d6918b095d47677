"""Typer CLI for the long-weekend leave planner."""

from __future__ import annotations

import datetime
import json
import logging
import sys
from typing import NamedTuple

import typer

from leaveplan.config import load_config
from leaveplan.dates import parse_date_key, today_utc
from leaveplan.errors import LeavePlanError
from leaveplan.holidays import (
    MAX_GAP_WEEKS,
    MAX_PAID_LEAVES,
    MIN_GAP_WEEKS,
    PRESETS,
    Holiday,
    HolidayBook,
    get_holidays,
)
from leaveplan.long_weekends import LongWeekend, detect_long_weekends
from leaveplan.optimizer import (
    DEFAULT_MAX_BLOCK_LENGTH,
    DEFAULT_MIN_GAP_WEEKS,
    CandidateBlock,
    YearPlan,
    format_calendar_view,
    format_plan,
    plan_year,
)
from leaveplan.stats import calculate_year_stats

app = typer.Typer(
    name="leaveplan",
    help="Long-weekend planner: find natural long weekends and spend paid "
    "leave where it buys the most consecutive days off.",
    add_completion=False,
)

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_DATE_FMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "WARNING") -> None:
    """Send ``leaveplan`` log records to stderr at *level*."""
    level_value = getattr(logging, level.upper(), logging.WARNING)
    root = logging.getLogger("leaveplan")
    root.setLevel(level_value)
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FMT))
    root.addHandler(handler)


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return parse_date_key(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _resolve_today(value: str | None) -> datetime.date:
    return today_utc() if value is None else _parse_date(value)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _preset_holidays(year: int, country: str | None) -> list[Holiday]:
    if not country or country == "none":
        return []
    try:
        return get_holidays(country, year)
    except KeyError as exc:
        raise _fail(str(exc.args[0])) from None


def _add_extra_holidays(
    year: int, holidays: list[Holiday], extra: list[str] | None
) -> list[Holiday]:
    """Apply ``--holiday DATE[=NAME]`` entries on top of *holidays*.

    A bare date that is already listed keeps its existing name.
    """
    book = HolidayBook(year, holidays)
    for raw in extra or []:
        date, _, name = raw.partition("=")
        _parse_date(date)
        if not name:
            existing = {h.date: h.name for h in book.holidays}
            name = existing.get(date, "Custom holiday")
        try:
            book.add(date, name)
        except LeavePlanError as exc:
            raise _fail(str(exc)) from None
    return list(book.holidays)


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

YEAR_OPTION = typer.Option(
    None, "--year", "-y", help="Target year. Defaults to the current year."
)
COUNTRY_OPTION = typer.Option(
    "in",
    "--country",
    "-c",
    help=f"Holiday preset ({', '.join(sorted(PRESETS))}). Use 'none' to skip.",
)
HOLIDAY_OPTION = typer.Option(
    None,
    "--holiday",
    "-H",
    help="Additional holiday as YYYY-MM-DD or YYYY-MM-DD=Name. Repeatable.",
)
TODAY_OPTION = typer.Option(
    None,
    "--today",
    help="Reference date (YYYY-MM-DD) planning starts from. Defaults to today (UTC).",
)
CONFIG_OPTION = typer.Option(
    None, "--config", help="Path to a JSON planner file with holidays and preferences."
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


class _Inputs(NamedTuple):
    year: int
    holidays: list[Holiday]
    leaves: int | None
    gap: int
    max_block: int


def _resolve_inputs(
    year: int | None,
    country: str | None,
    holiday: list[str] | None,
    config: str | None,
    leaves: int | None = None,
    gap: int | None = None,
    max_block: int | None = None,
) -> _Inputs:
    """Merge a planner file (if any) with command-line options.

    Command-line values win over the file.
    """
    if config is not None:
        try:
            cfg = load_config(config, year)
        except LeavePlanError as exc:
            raise _fail(str(exc)) from None
        return _Inputs(
            year=cfg.year,
            holidays=_add_extra_holidays(cfg.year, cfg.holidays, holiday),
            leaves=leaves if leaves is not None else cfg.leaves,
            gap=gap if gap is not None else cfg.min_gap_weeks,
            max_block=max_block if max_block is not None else cfg.max_block_length,
        )

    resolved_year = year if year is not None else today_utc().year
    return _Inputs(
        year=resolved_year,
        holidays=_add_extra_holidays(
            resolved_year, _preset_holidays(resolved_year, country), holiday
        ),
        leaves=leaves,
        gap=gap if gap is not None else DEFAULT_MIN_GAP_WEEKS,
        max_block=max_block if max_block is not None else DEFAULT_MAX_BLOCK_LENGTH,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def optimize(
    year: int = YEAR_OPTION,
    leaves: int = typer.Option(
        None,
        "--leaves",
        "-l",
        help="Number of paid leave days available.",
        min=0,
        max=MAX_PAID_LEAVES,
    ),
    gap: int = typer.Option(
        None,
        "--gap",
        "-g",
        help=f"Minimum weeks between breaks ({MIN_GAP_WEEKS}-{MAX_GAP_WEEKS}). "
        f"Defaults to {DEFAULT_MIN_GAP_WEEKS}.",
        min=MIN_GAP_WEEKS,
        max=MAX_GAP_WEEKS,
        clamp=True,
    ),
    max_block: int = typer.Option(
        None,
        "--max-block",
        help=f"Longest break to consider, in days. Defaults to {DEFAULT_MAX_BLOCK_LENGTH}.",
        min=3,
    ),
    country: str | None = COUNTRY_OPTION,
    holiday: list[str] | None = HOLIDAY_OPTION,
    config: str | None = CONFIG_OPTION,
    today: str | None = TODAY_OPTION,
    calendar: bool = typer.Option(
        False,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON."),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Plan where to spend paid leave for the longest breaks."""
    if verbose:
        setup_logging("DEBUG")

    inputs = _resolve_inputs(year, country, holiday, config, leaves, gap, max_block)
    if inputs.leaves is None:
        typer.echo("Error: --leaves is required (or set 'leaves' in --config).", err=True)
        raise typer.Exit(code=1)

    result = plan_year(
        inputs.year,
        inputs.holidays,
        inputs.leaves,
        inputs.gap,
        max_block_length=inputs.max_block,
        today=_resolve_today(today),
    )

    if output_json:
        _print_json(result)
        return

    _print_holidays(inputs.year, inputs.holidays)
    typer.echo(format_plan(result))
    if calendar:
        typer.echo(format_calendar_view(result))


@app.command()
def weekends(
    year: int = YEAR_OPTION,
    country: str | None = COUNTRY_OPTION,
    holiday: list[str] | None = HOLIDAY_OPTION,
    config: str | None = CONFIG_OPTION,
    today: str | None = TODAY_OPTION,
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON."),
) -> None:
    """List natural long weekends (no leave needed)."""
    inputs = _resolve_inputs(year, country, holiday, config)
    found = detect_long_weekends(inputs.year, inputs.holidays, today=_resolve_today(today))

    if output_json:
        data = [_serialize_long_weekend(lw) for lw in found]
        json.dump(data, sys.stdout, indent=2)
        typer.echo()
        return

    if not found:
        typer.echo(f"  No natural long weekends left in {inputs.year}.")
        return
    typer.echo(f"  Natural long weekends — {inputs.year}")
    typer.echo()
    for lw in found:
        start = parse_date_key(lw.start_date)
        typer.echo(f"    {start.strftime('%a, %b %d'):>12}  {lw.description}")


@app.command()
def stats(
    year: int = YEAR_OPTION,
    leaves: int = typer.Option(None, "--leaves", "-l", help="Paid leave days available.", min=0),
    country: str | None = COUNTRY_OPTION,
    holiday: list[str] | None = HOLIDAY_OPTION,
    config: str | None = CONFIG_OPTION,
    today: str | None = TODAY_OPTION,
) -> None:
    """Show how many weekend days and holidays are left in the year."""
    inputs = _resolve_inputs(year, country, holiday, config, leaves)
    s = calculate_year_stats(
        inputs.year, inputs.holidays, inputs.leaves or 0, today=_resolve_today(today)
    )
    typer.echo(f"  Year:            {inputs.year}")
    typer.echo(f"  Weekend days:    {s.total_weekends}")
    typer.echo(f"  Holidays:        {s.total_holidays}")
    typer.echo(f"  Total days off:  {s.total_off_days}")
    typer.echo(f"  Paid leaves:     {s.paid_leaves_available}")


@app.command()
def holidays(
    country: str = typer.Option(
        "in",
        "--country",
        "-c",
        help=f"Country preset ({', '.join(sorted(PRESETS))}).",
    ),
    year: int = YEAR_OPTION,
) -> None:
    """List holidays for a country preset."""
    resolved_year = year if year is not None else today_utc().year

    try:
        preset = get_holidays(country, resolved_year)
    except KeyError as exc:
        typer.echo(f"Error: {exc.args[0]}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"  {PRESETS[country]} — {resolved_year}")
    typer.echo()
    if not preset:
        typer.echo("    (no holidays listed for this year)")
    for h in preset:
        typer.echo(f"    {parse_date_key(h.date).strftime('%a, %b %d'):>12}  {h.name}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_holidays(year: int, holidays: list[Holiday]) -> None:
    w = 64
    enabled = [h for h in holidays if h.enabled]
    typer.echo("=" * w)
    typer.echo("  LONG-WEEKEND LEAVE PLANNER")
    typer.echo("=" * w)
    typer.echo(f"  Year:      {year}")
    typer.echo(f"  Holidays:  {len(enabled)}")
    typer.echo()
    for h in enabled:
        typer.echo(f"    {parse_date_key(h.date).strftime('%a, %b %d'):>12}  {h.name}")


def _serialize_long_weekend(lw: LongWeekend) -> dict[str, object]:
    return {
        "start_date": lw.start_date,
        "end_date": lw.end_date,
        "days_off": lw.days_off,
        "description": lw.description,
        "dates": sorted(lw.dates),
    }


def _serialize_block(block: CandidateBlock) -> dict[str, object]:
    return {
        "id": block.id,
        "start_date": block.start_date,
        "end_date": block.end_date,
        "total_days_off": block.total_days_off,
        "leaves_required": block.leaves_required,
        "efficiency": round(block.efficiency, 3),
        "paid_leave_dates": sorted(block.paid_leave_dates),
        "natural_long_weekend_dates": sorted(block.natural_long_weekend_dates),
        "description": block.description,
    }


def _print_json(result: YearPlan) -> None:
    output = {
        "year": result.year,
        "leave_budget": result.leave_budget,
        "min_gap_weeks": result.min_gap_weeks,
        "stats": result.stats._asdict(),
        "long_weekends": [_serialize_long_weekend(lw) for lw in result.long_weekends],
        "candidate_count": len(result.candidates),
        "plan": {
            "selected_blocks": [_serialize_block(b) for b in result.plan.selected_blocks],
            "total_days_off": result.plan.total_days_off,
            "total_leaves_used": result.plan.total_leaves_used,
            "remaining_leaves": result.plan.remaining_leaves,
        },
    }
    json.dump(output, sys.stdout, indent=2)
    typer.echo()


def main() -> None:
    """Entry point for the CLI."""
    app()
