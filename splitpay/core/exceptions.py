from typing import Optional


class TimesheetError(Exception):
    """Base class for everything the payroll core raises"""


class ShiftDataError(TimesheetError):
    """A single shift record cannot be processed; the rest of a batch can"""

    error_type = "SHIFT_DATA_ERROR"

    def __init__(self, message: str, shift_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.shift_id = shift_id


class MalformedTimeError(ShiftDataError):
    """A time-of-day string could not be parsed"""

    error_type = "MALFORMED_TIME"

    def __init__(self, value, shift_id: Optional[str] = None):
        super().__init__(f"Malformed time value {value!r}", shift_id)
        self.value = value


class InvalidShiftSpanError(ShiftDataError):
    """Clock-out date/time cannot be reconciled with a shift of at most 24 hours"""

    error_type = "INVALID_SHIFT_SPAN"


class IncompleteShiftError(TimesheetError):
    """Shift has no clock-out yet. Informational: the shift is pending, not broken"""

    error_type = "INCOMPLETE_SHIFT"

    def __init__(self, shift_id: Optional[str] = None, elapsed_minutes: int = 0):
        super().__init__(f"Shift {shift_id} is still active ({elapsed_minutes} minutes so far)")
        self.shift_id = shift_id
        self.elapsed_minutes = elapsed_minutes


class ConfigurationError(TimesheetError):
    """Wage window configuration that would make every split wrong"""

    def __init__(self, message: str, organization_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.organization_id = organization_id
