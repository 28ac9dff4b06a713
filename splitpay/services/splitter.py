import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from splitpay.core.config import ServerConfig
from splitpay.core.exceptions import ConfigurationError, InvalidShiftSpanError
from splitpay.models.payroll import ActiveShiftEstimate
from splitpay.models.timesheet import Shift, SplitResult, WageWindowConfig
from splitpay.services.time_utils import (
    MINUTES_PER_DAY, overlap_minutes, time_to_minutes, unwrap_window, window_overlap
)

logger = logging.getLogger(__name__)

def local_now(now: Optional[datetime] = None) -> datetime:
    """
    Wall-clock time in the organization's zone, as a naive datetime.
    A naive `now` is taken to be local already.
    """
    if now is not None and now.tzinfo is None:
        return now
    zone = ZoneInfo(ServerConfig.ORGANIZATION_TIMEZONE)
    if now is None:
        now = datetime.now(zone)
    else:
        now = now.astimezone(zone)
    return now.replace(tzinfo=None)

def clock_in_datetime(shift: Shift) -> datetime:
    minutes = time_to_minutes(shift.clock_in_time, shift.id)
    return datetime.combine(shift.clock_in_date, datetime.min.time()) + timedelta(minutes=minutes)

def elapsed_minutes(shift: Shift, now: Optional[datetime] = None) -> int:
    """Whole minutes an open shift has been running, never negative"""
    delta = local_now(now) - clock_in_datetime(shift)
    return max(0, int(delta.total_seconds() // 60))

def shift_bounds(shift: Shift):
    """
    Start and end of a completed shift in minutes on the clock-in day's
    timeline; the end runs past 1440 when the shift crosses midnight.

    Raises:
        MalformedTimeError: unparsable clock-in/out time
        InvalidShiftSpanError: clock-out date/time cannot belong to a shift of under 24 hours
    """
    start = time_to_minutes(shift.clock_in_time, shift.id)
    end = time_to_minutes(shift.clock_out_time, shift.id)

    if shift.clock_out_date is not None:
        days = (shift.clock_out_date - shift.clock_in_date).days
        if days == 0 and end < start:
            raise InvalidShiftSpanError(
                f"Clock-out {shift.clock_out_time} is before clock-in {shift.clock_in_time} on the same day",
                shift.id,
            )
        if days == 1 and end >= start:
            raise InvalidShiftSpanError(
                f"Shift from {shift.clock_in_date} {shift.clock_in_time} to "
                f"{shift.clock_out_date} {shift.clock_out_time} spans 24 hours or more",
                shift.id,
            )
        if days not in (0, 1):
            raise InvalidShiftSpanError(
                f"Clock-out date {shift.clock_out_date} is {days} days from clock-in date {shift.clock_in_date}",
                shift.id,
            )

    if end < start:
        end += MINUTES_PER_DAY
    return start, end

def split_shift(shift: Shift, config: WageWindowConfig, now: Optional[datetime] = None) -> SplitResult:
    """
    Apportion a shift's worked minutes to the morning and night rate periods.

    Open shifts are not split: the elapsed minutes are reported as unassigned
    and the result is marked pending. Stored morning/night hours win over
    recomputation. Otherwise the shift is clamped to the working-hours window
    (when enabled), overlapped with both rate windows, and any minutes left
    over go to whichever period already holds more (morning on a tie).
    """
    if shift.is_open:
        return SplitResult(unassigned_minutes=elapsed_minutes(shift, now), is_pending=True)

    if shift.has_stored_split:
        return SplitResult(
            morning_minutes=round((shift.morning_hours or 0) * 60),
            night_minutes=round((shift.night_hours or 0) * 60),
            from_stored=True,
        )

    shift_start, shift_end = shift_bounds(shift)

    if config.working_hours_window_enabled:
        working_start, working_end = unwrap_window(
            time_to_minutes(config.working_hours_start),
            time_to_minutes(config.working_hours_end),
        )
        payable_start = max(shift_start, working_start)
        payable_end = min(shift_end, working_end)
        if payable_start >= payable_end:
            logger.debug(f"Shift {shift.id} falls outside the working hours window")
            return SplitResult(is_excluded=True)
        shift_start, shift_end = payable_start, payable_end

    morning = overlap_minutes(shift_start, shift_end, *unwrap_window(
        time_to_minutes(config.morning_start),
        time_to_minutes(config.morning_end),
    ))
    # Only the night window is also checked against its next-day copy
    night = window_overlap(shift_start, shift_end,
                           time_to_minutes(config.night_start),
                           time_to_minutes(config.night_end))

    total_worked = shift_end - shift_start
    accounted = morning + night
    if accounted > total_worked:
        raise ConfigurationError(
            f"Morning and night windows overlap: {accounted} minutes classified "
            f"for a {total_worked} minute shift"
        )

    leftover = total_worked - accounted
    if leftover:
        if morning >= night:
            morning += leftover
        else:
            night += leftover

    return SplitResult(morning_minutes=morning, night_minutes=night, unassigned_minutes=0)

def estimate_active_shift(shift: Shift, config: WageWindowConfig,
                          now: Optional[datetime] = None) -> ActiveShiftEstimate:
    """Split an open shift as if the employee clocked out right now"""
    current = local_now(now)
    virtual = shift.model_copy(update={
        "clock_out_date": current.date(),
        "clock_out_time": current.strftime('%H:%M:%S'),
    })
    result = split_shift(virtual, config)

    return ActiveShiftEstimate(
        shift_id=shift.id,
        employee_name=shift.employee_name,
        clock_in_date=shift.clock_in_date,
        clock_in_time=shift.clock_in_time,
        virtual_clock_out_date=virtual.clock_out_date,
        virtual_clock_out_time=virtual.clock_out_time,
        morning_hours=result.morning_hours,
        night_hours=result.night_hours,
        total_hours=result.total_hours,
    )
