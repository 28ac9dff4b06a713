from pydantic import BaseModel
from datetime import date
from typing import Optional, List, Dict

from splitpay.models.timesheet import Shift, WageRate

class PayrollLine(BaseModel):
    """One employee's totals over a reporting period, unrounded"""
    employee_key: str
    employee_id: Optional[str] = None
    employee_name: str
    is_resolved: bool = True  # False for the raw stored-name bucket
    total_hours: float = 0.0
    morning_hours: float = 0.0
    night_hours: float = 0.0
    shift_count: int = 0
    total_earnings: float = 0.0

    def rounded(self) -> "PayrollLine":
        """Display copy: hours and money rounded to two decimals"""
        return self.model_copy(update={
            "total_hours": round(self.total_hours, 2),
            "morning_hours": round(self.morning_hours, 2),
            "night_hours": round(self.night_hours, 2),
            "total_earnings": round(self.total_earnings, 2),
        })

class ShiftIssue(BaseModel):
    """A shift left out of the totals, with the reason"""
    shift_id: Optional[str] = None
    employee_name: Optional[str] = None
    error_type: str
    message: str
    is_fatal: bool = True  # False for pending (still active) shifts

class PayrollReport(BaseModel):
    """Result of one aggregation call"""
    lines: List[PayrollLine]
    issues: List[ShiftIssue] = []
    pending: List[ShiftIssue] = []
    excluded_shift_ids: List[Optional[str]] = []
    processed_count: int = 0
    total_hours: float = 0.0
    total_earnings: float = 0.0

    @property
    def skipped_count(self) -> int:
        return len(self.issues)

    def rounded(self) -> "PayrollReport":
        return self.model_copy(update={
            "lines": [line.rounded() for line in self.lines],
            "total_hours": round(self.total_hours, 2),
            "total_earnings": round(self.total_earnings, 2),
        })

class AggregateRequest(BaseModel):
    """Ad-hoc aggregation over caller-supplied shifts"""
    shifts: List[Shift]
    settings: Optional[Dict] = None
    rates: Dict[str, WageRate] = {}  # keyed by employee id, staff id or name
    default_rate: Optional[WageRate] = None

class SplitRequest(BaseModel):
    shift: Shift
    settings: Optional[Dict] = None

class ActiveShiftEstimate(BaseModel):
    """An open shift split as if clocked out now"""
    shift_id: Optional[str] = None
    employee_name: Optional[str] = None
    clock_in_date: date
    clock_in_time: str
    virtual_clock_out_date: date
    virtual_clock_out_time: str
    morning_hours: float
    night_hours: float
    total_hours: float

class RecalculationSummary(BaseModel):
    """Outcome of a missing-hours write-back run"""
    organization_id: Optional[str] = None
    candidates: int = 0
    updated: int = 0
    excluded: int = 0
    failed: int = 0
    issues: List[ShiftIssue] = []
