"""Exceptions raised outside the pure planning core."""


class LeavePlanError(Exception):
    """Base error for the leave planner."""


class HolidayValidationError(LeavePlanError, ValueError):
    """Raised when a holiday or leave-count input is rejected."""


class DuplicateHolidayError(HolidayValidationError):
    """Raised when an edit would move a holiday onto a date another one owns."""


class ConfigError(LeavePlanError):
    """Raised when a planner file cannot be read or parsed."""
