from pydantic import BaseModel, Field
from datetime import date
from typing import Optional

from splitpay.core.config import WageConfig

class Shift(BaseModel):
    """One clock-in/clock-out record, dates and times in the organization's local civil time"""
    id: Optional[str] = None
    organization_id: Optional[str] = None  # None marks a legacy row
    employee_id: Optional[str] = None
    staff_id: Optional[str] = None
    employee_name: Optional[str] = None
    clock_in_date: date
    clock_in_time: str  # HH:MM:SS[.fff]
    clock_out_date: Optional[date] = None
    clock_out_time: Optional[str] = None
    # Stored values, authoritative when present and non-zero
    total_hours: Optional[float] = None
    morning_hours: Optional[float] = None
    night_hours: Optional[float] = None
    total_card_amount_flat: Optional[float] = None
    total_card_amount_split: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return not self.clock_out_time

    @property
    def has_stored_split(self) -> bool:
        return bool(self.morning_hours) or bool(self.night_hours)

class WageWindowConfig(BaseModel):
    """Morning/night rate windows and the optional payable working-hours clamp"""
    morning_start: str = WageConfig.DEFAULT_MORNING_START
    morning_end: str = WageConfig.DEFAULT_MORNING_END
    night_start: str = WageConfig.DEFAULT_NIGHT_START
    night_end: str = WageConfig.DEFAULT_NIGHT_END
    working_hours_window_enabled: bool = WageConfig.DEFAULT_WORKING_HOURS_ENABLED
    working_hours_start: str = WageConfig.DEFAULT_WORKING_HOURS_START
    working_hours_end: str = WageConfig.DEFAULT_WORKING_HOURS_END

class WageRate(BaseModel):
    morning_rate: float = Field(ge=0)
    night_rate: float = Field(ge=0)

class SplitResult(BaseModel):
    """Minutes of one shift apportioned to the morning and night rate periods"""
    morning_minutes: int = 0
    night_minutes: int = 0
    unassigned_minutes: int = 0
    is_pending: bool = False    # no clock-out yet
    is_excluded: bool = False   # entirely outside the working-hours window
    from_stored: bool = False   # stored morning/night hours were returned as-is

    @property
    def total_minutes(self) -> int:
        return self.morning_minutes + self.night_minutes + self.unassigned_minutes

    @property
    def morning_hours(self) -> float:
        return self.morning_minutes / 60

    @property
    def night_hours(self) -> float:
        return self.night_minutes / 60

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60
