"""Leave-block optimizer

Turns weekends into longer breaks by spending paid leave on the workdays
around them.

Two stages:
  1. Candidate generation - every weekend is stretched by a fixed menu of
     (days before, days after) extensions.  The pool is deliberately
     redundant; overlapping candidates are expected.
  2. Greedy selection - candidates are ranked by efficiency (days off per
     leave) and accepted one by one while the leave budget, the no-overlap
     rule and the minimum gap between breaks all hold.  There is no
     backtracking, so the result is a good plan rather than a provably
     optimal one.
"""

from __future__ import annotations

import calendar
import datetime
import functools
import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from leaveplan.dates import (
    add_days,
    days_between,
    is_weekend,
    is_year_elapsed,
    iter_dates,
    parse_date_key,
    resolve_effective_start,
    span_label,
    to_date_key,
    year_bounds,
)
from leaveplan.holidays import Holiday, enabled_holiday_dates
from leaveplan.long_weekends import LongWeekend, detect_long_weekends
from leaveplan.stats import YearStats, calculate_year_stats

logger = logging.getLogger(__name__)

DEFAULT_MAX_BLOCK_LENGTH = 10
DEFAULT_MIN_GAP_WEEKS = 3
EFFICIENCY_TOLERANCE = 0.01

# (workdays before the weekend, workdays after the weekend)
EXTENSIONS: tuple[tuple[int, int], ...] = (
    (1, 0),  # Fri
    (0, 1),  # Mon
    (1, 1),  # Fri + Mon
    (2, 0),  # Thu + Fri
    (0, 2),  # Mon + Tue
    (2, 1),  # Thu + Fri + Mon
    (1, 2),  # Fri + Mon + Tue
    (2, 2),  # Thu + Fri + Mon + Tue
    (3, 1),  # Wed + Thu + Fri + Mon
    (1, 3),  # Fri + Mon + Tue + Wed
    (3, 2),  # Wed + Thu + Fri + Mon + Tue
    (2, 3),  # Thu + Fri + Mon + Tue + Wed
)

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class CandidateBlock(NamedTuple):
    """A possible break: one weekend plus some paid leave around it."""

    id: str
    start_date: str
    end_date: str
    total_days_off: int
    leaves_required: int
    efficiency: float
    all_dates: frozenset[str]
    paid_leave_dates: frozenset[str]
    natural_long_weekend_dates: frozenset[str]
    description: str


class OptimizedPlan(NamedTuple):
    """The blocks picked by :func:`optimize_plan`, in date order."""

    selected_blocks: list[CandidateBlock]
    total_days_off: int
    total_leaves_used: int
    remaining_leaves: int


class YearPlan(NamedTuple):
    """Everything :func:`plan_year` computes for one set of inputs."""

    year: int
    leave_budget: int
    min_gap_weeks: int
    holiday_dates: frozenset[str]
    long_weekends: list[LongWeekend]
    candidates: list[CandidateBlock]
    plan: OptimizedPlan
    stats: YearStats


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------


def _first_saturday(start: datetime.date) -> datetime.date:
    return add_days(start, (5 - start.weekday()) % 7)


def _make_candidate(
    block_id: str,
    block_start: datetime.date,
    block_end: datetime.date,
    holiday_keys: set[str],
    natural_keys: set[str],
) -> CandidateBlock | None:
    """Build a candidate for the span, or None if it needs no leave."""
    all_dates: set[str] = set()
    paid: set[str] = set()
    for d in iter_dates(block_start, block_end):
        key = to_date_key(d)
        all_dates.add(key)
        if not is_weekend(d) and key not in holiday_keys:
            paid.add(key)

    # Zero-leave spans are natural long weekends, not candidates.
    if not paid:
        return None

    total = len(all_dates)
    leaves = len(paid)
    plural = "s" if leaves > 1 else ""
    return CandidateBlock(
        id=block_id,
        start_date=to_date_key(block_start),
        end_date=to_date_key(block_end),
        total_days_off=total,
        leaves_required=leaves,
        efficiency=total / leaves,
        all_dates=frozenset(all_dates),
        paid_leave_dates=frozenset(paid),
        natural_long_weekend_dates=frozenset(all_dates & natural_keys),
        description=(
            f"{total} days off ({span_label(block_start, block_end)}) • {leaves} leave{plural}"
        ),
    )


def generate_candidate_blocks(
    year: int,
    holidays: Iterable[Holiday],
    natural_long_weekends: Iterable[LongWeekend],
    max_block_length: int = DEFAULT_MAX_BLOCK_LENGTH,
    *,
    today: datetime.date | None = None,
) -> list[CandidateBlock]:
    """Stretch every remaining weekend of *year* into candidate breaks.

    Spans longer than *max_block_length* days, spans starting before the
    effective start date and spans that need no leave are dropped.  IDs are
    ``candidate-<n>`` in generation order, so identical inputs give identical
    output.
    """
    if is_year_elapsed(year, today):
        return []

    start = resolve_effective_start(year, today)
    _, year_end = year_bounds(year)
    holiday_keys = enabled_holiday_dates(holidays, year, start)
    natural_keys = {d for lw in natural_long_weekends for d in lw.dates}

    candidates: list[CandidateBlock] = []
    saturday = _first_saturday(start)
    while saturday <= year_end:
        sunday = add_days(saturday, 1)
        for before, after in EXTENSIONS:
            block_start = add_days(saturday, -before)
            block_end = add_days(sunday, after)
            if block_start < start:
                continue
            if days_between(block_start, block_end) + 1 > max_block_length:
                continue
            candidate = _make_candidate(
                f"candidate-{len(candidates)}",
                block_start,
                block_end,
                holiday_keys,
                natural_keys,
            )
            if candidate is not None:
                candidates.append(candidate)
        saturday = add_days(saturday, 7)

    logger.debug("Generated %d candidate blocks for %d", len(candidates), year)
    return candidates


# ---------------------------------------------------------------------------
# Greedy selection
# ---------------------------------------------------------------------------


def _rank(a: CandidateBlock, b: CandidateBlock) -> int:
    """Higher efficiency first; near-equal efficiency falls back to length."""
    if abs(a.efficiency - b.efficiency) > EFFICIENCY_TOLERANCE:
        return -1 if a.efficiency > b.efficiency else 1
    return b.total_days_off - a.total_days_off


def _overlaps(a: CandidateBlock, b: CandidateBlock) -> bool:
    return a.start_date <= b.end_date and a.end_date >= b.start_date


def _too_close(candidate: CandidateBlock, chosen: CandidateBlock, min_gap_days: int) -> bool:
    """True if either side's distance is positive but under *min_gap_days*.

    The distance on each side runs from one block's start to the other's end,
    inclusive.  On the side where the candidate does not reach the chosen
    block it is non-positive and ignored.
    """
    distances = (
        days_between(parse_date_key(candidate.start_date), parse_date_key(chosen.end_date)) + 1,
        days_between(parse_date_key(chosen.start_date), parse_date_key(candidate.end_date)) + 1,
    )
    return any(0 < d < min_gap_days for d in distances)


def optimize_plan(
    candidates: Sequence[CandidateBlock],
    leave_budget: int,
    min_gap_weeks: int = DEFAULT_MIN_GAP_WEEKS,
) -> OptimizedPlan:
    """Pick non-overlapping blocks within *leave_budget* leaves.

    For every pair of picked blocks, the stretch from the earlier block's
    start to the later block's end covers at least ``min_gap_weeks * 7``
    days.  Candidates are tried best-first exactly once.
    """
    if not candidates or leave_budget <= 0:
        return OptimizedPlan([], 0, 0, leave_budget)

    min_gap_days = min_gap_weeks * 7
    ranked = sorted(candidates, key=functools.cmp_to_key(_rank))

    selected: list[CandidateBlock] = []
    used = 0
    for candidate in ranked:
        if used + candidate.leaves_required > leave_budget:
            continue
        if any(
            _overlaps(candidate, chosen) or _too_close(candidate, chosen, min_gap_days)
            for chosen in selected
        ):
            continue
        selected.append(candidate)
        used += candidate.leaves_required

    selected.sort(key=lambda b: b.start_date)
    total_days = sum(b.total_days_off for b in selected)
    logger.debug(
        "Selected %d of %d candidates: %d days off for %d/%d leaves",
        len(selected),
        len(candidates),
        total_days,
        used,
        leave_budget,
    )
    return OptimizedPlan(
        selected_blocks=selected,
        total_days_off=total_days,
        total_leaves_used=used,
        remaining_leaves=leave_budget - used,
    )


def paid_leave_map(plan: OptimizedPlan) -> dict[str, CandidateBlock]:
    """Date key -> the selected block that spends a leave on it."""
    return {d: block for block in plan.selected_blocks for d in block.paid_leave_dates}


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def plan_year(
    year: int,
    holidays: Iterable[Holiday],
    leave_budget: int,
    min_gap_weeks: int = DEFAULT_MIN_GAP_WEEKS,
    *,
    max_block_length: int = DEFAULT_MAX_BLOCK_LENGTH,
    today: datetime.date | None = None,
) -> YearPlan:
    """Run detection, generation, selection and stats for one year."""
    holidays = list(holidays)
    long_weekends = detect_long_weekends(year, holidays, today=today)
    candidates = generate_candidate_blocks(
        year, holidays, long_weekends, max_block_length, today=today
    )
    plan = optimize_plan(candidates, leave_budget, min_gap_weeks)
    stats = calculate_year_stats(year, holidays, leave_budget, today=today)

    if is_year_elapsed(year, today):
        holiday_keys: set[str] = set()
    else:
        holiday_keys = enabled_holiday_dates(
            holidays, year, resolve_effective_start(year, today)
        )

    return YearPlan(
        year=year,
        leave_budget=leave_budget,
        min_gap_weeks=min_gap_weeks,
        holiday_dates=frozenset(holiday_keys),
        long_weekends=long_weekends,
        candidates=candidates,
        plan=plan,
        stats=stats,
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _fmt_span(start_key: str, end_key: str) -> str:
    start = parse_date_key(start_key)
    end = parse_date_key(end_key)
    return f"{start.strftime('%a, %b %d')} -> {end.strftime('%a, %b %d')}"


def format_plan(result: YearPlan) -> str:
    """Return a human-readable summary of a year plan."""
    lines: list[str] = []
    w = 64
    plan = result.plan
    stats = result.stats

    lines.append("")
    lines.append("=" * w)
    lines.append(f"  YEAR {result.year}")
    lines.append("=" * w)
    lines.append(f"  Weekend days left:   {stats.total_weekends}")
    lines.append(f"  Holidays left:       {stats.total_holidays}")
    lines.append(f"  Days off already:    {stats.total_off_days}")
    lines.append(f"  Paid leaves:         {stats.paid_leaves_available}")
    lines.append(f"  Gap between breaks:  {result.min_gap_weeks} week(s)")
    lines.append("")

    lines.append("  Natural long weekends:")
    lines.append("  " + "-" * (w - 4))
    if not result.long_weekends:
        lines.append("    (none)")
    for lw in result.long_weekends:
        lines.append(f"    {_fmt_span(lw.start_date, lw.end_date)}  {lw.description}")
    lines.append("")

    lines.append("  Suggested breaks:")
    lines.append("  " + "-" * (w - 4))
    if not plan.selected_blocks:
        lines.append("    (none)")
    for i, block in enumerate(plan.selected_blocks, 1):
        lines.append(f"  {i:>2}. {_fmt_span(block.start_date, block.end_date)}")
        lines.append(f"      {block.description}")
    lines.append("")

    lines.append(f"  Leaves used: {plan.total_leaves_used} / {result.leave_budget}")
    lines.append(f"  Leaves remaining: {plan.remaining_leaves}")
    lines.append(f"  Total days off from breaks: {plan.total_days_off}")
    if plan.total_leaves_used > 0:
        lines.append(
            f"  Efficiency: {plan.total_days_off / plan.total_leaves_used:.1f}x "
            "(days off per leave)"
        )

    leave_days = sorted(paid_leave_map(plan))
    if leave_days:
        lines.append("")
        lines.append("  Days to request off:")
        for key in leave_days:
            lines.append(f"    -> {parse_date_key(key).strftime('%A, %B %d, %Y')}")

    return "\n".join(lines)


def format_calendar_view(result: YearPlan) -> str:
    """Return a month-by-month calendar marking leaves, holidays and long weekends."""
    leave_set = set(paid_leave_map(result.plan))
    holiday_set = result.holiday_dates
    weekend_set = {d for lw in result.long_weekends for d in lw.dates}
    year = result.year

    active_months = {int(key[5:7]) for key in leave_set | holiday_set | weekend_set}
    if not active_months:
        return ""

    lines: list[str] = [
        "",
        f"  Calendar View {year}",
        "  Legend: L=Leave  H=Holiday  W=Long weekend",
        "",
    ]

    cal = calendar.Calendar(firstweekday=0)

    for month in range(1, 13):
        if month not in active_months:
            continue

        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")

        row = ""
        for day_num, weekday in cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                key = to_date_key(datetime.date(year, month, day_num))
                if key in leave_set:
                    cell = f" {day_num:>2}L"
                elif key in holiday_set:
                    cell = f" {day_num:>2}H"
                elif key in weekend_set:
                    cell = f" {day_num:>2}W"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == 6:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)
