import logging
from typing import Any, Dict, Optional

from splitpay.core.exceptions import ConfigurationError, MalformedTimeError
from splitpay.models.timesheet import WageWindowConfig
from splitpay.services.time_utils import (
    MINUTES_PER_DAY, overlap_minutes, time_to_minutes, unwrap_window
)

logger = logging.getLogger(__name__)

# Column names used by the wage_settings table, mapped onto config fields
SETTINGS_COLUMNS = {
    "morning_start_time": "morning_start",
    "morning_end_time": "morning_end",
    "night_start_time": "night_start",
    "night_end_time": "night_end",
    "working_hours_window_enabled": "working_hours_window_enabled",
    "working_hours_start_time": "working_hours_start",
    "working_hours_end_time": "working_hours_end",
}

def resolve_wage_window(raw_settings: Optional[Dict[str, Any]] = None) -> WageWindowConfig:
    """
    Build a complete configuration from partially populated settings.

    Accepts either config field names or wage_settings column names. Missing,
    null or blank values fall back to the defaults. Never raises.
    """
    if isinstance(raw_settings, WageWindowConfig):
        return raw_settings

    values = {}
    for key, value in (raw_settings or {}).items():
        field = SETTINGS_COLUMNS.get(key, key)
        if field not in WageWindowConfig.model_fields:
            continue
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if field == "working_hours_window_enabled":
            if isinstance(value, str):
                value = value.strip().lower() in ("true", "1", "yes", "on")
            else:
                value = bool(value)
        else:
            value = str(value)
        values[field] = value

    return WageWindowConfig(**values)

def _window(config: WageWindowConfig, start_field: str, end_field: str):
    start = getattr(config, start_field)
    end = getattr(config, end_field)
    try:
        start_min, end_min = time_to_minutes(start), time_to_minutes(end)
    except MalformedTimeError as e:
        raise ConfigurationError(f"{start_field}/{end_field}: {e}")
    if start_min == end_min:
        raise ConfigurationError(
            f"Zero-width window {start_field}={start} {end_field}={end}"
        )
    return unwrap_window(start_min, end_min)

def validate_wage_window(config: WageWindowConfig, organization_id: Optional[str] = None) -> WageWindowConfig:
    """
    Reject configurations that would produce systematically wrong splits:
    unparsable boundaries, zero-width windows and morning/night windows that
    overlap (minutes would be counted twice).
    """
    try:
        morning = _window(config, "morning_start", "morning_end")
        night = _window(config, "night_start", "night_end")
        if config.working_hours_window_enabled:
            _window(config, "working_hours_start", "working_hours_end")

        shared = sum(
            overlap_minutes(morning[0] + m_shift, morning[1] + m_shift,
                            night[0] + n_shift, night[1] + n_shift)
            for m_shift, n_shift in ((0, 0), (MINUTES_PER_DAY, 0), (0, MINUTES_PER_DAY))
        )
        if shared > 0:
            raise ConfigurationError(
                f"Morning window {config.morning_start}-{config.morning_end} overlaps "
                f"night window {config.night_start}-{config.night_end} by {shared} minutes"
            )
    except ConfigurationError as e:
        e.organization_id = organization_id
        logger.error(f"Invalid wage window for organization {organization_id}: {e.message}")
        raise

    return config
