"""Long-weekend leave planner.

Find the long weekends a year's holidays already give you, then spend a
limited number of paid leave days where they buy the longest breaks.
"""

from leaveplan.holidays import Holiday, HolidayBook, get_holidays
from leaveplan.long_weekends import LongWeekend, detect_long_weekends
from leaveplan.optimizer import (
    CandidateBlock,
    OptimizedPlan,
    YearPlan,
    generate_candidate_blocks,
    optimize_plan,
    plan_year,
)
from leaveplan.stats import YearStats, calculate_year_stats

__all__ = [
    "CandidateBlock",
    "Holiday",
    "HolidayBook",
    "LongWeekend",
    "OptimizedPlan",
    "YearPlan",
    "YearStats",
    "calculate_year_stats",
    "detect_long_weekends",
    "generate_candidate_blocks",
    "get_holidays",
    "optimize_plan",
    "plan_year",
]
