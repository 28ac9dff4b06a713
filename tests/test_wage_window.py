import pytest

from splitpay.core.exceptions import ConfigurationError
from splitpay.models.timesheet import WageWindowConfig
from splitpay.services.wage_window import resolve_wage_window, validate_wage_window


class TestResolveWageWindow:

    def test_none_gives_defaults(self):
        config = resolve_wage_window(None)
        assert config.morning_start == "08:00:00"
        assert config.morning_end == "17:00:00"
        assert config.night_start == "17:00:00"
        assert config.night_end == "01:00:00"
        assert config.working_hours_window_enabled is True
        assert config.working_hours_start == "08:00:00"
        assert config.working_hours_end == "01:00:00"

    def test_partial_settings_are_filled(self):
        config = resolve_wage_window({"night_start": "18:00", "morning_end": None})
        assert config.night_start == "18:00"
        assert config.morning_end == "17:00:00"

    def test_settings_table_columns_are_understood(self):
        row = {
            "organization_id": "org-1",
            "morning_start_time": "06:00:00",
            "morning_end_time": "16:00:00",
            "night_start_time": "",
            "working_hours_window_enabled": 0,
            "morning_wage_rate": 17.0,
        }
        config = resolve_wage_window(row)
        assert config.morning_start == "06:00:00"
        assert config.morning_end == "16:00:00"
        assert config.night_start == "17:00:00"
        assert config.working_hours_window_enabled is False

    def test_string_booleans(self):
        assert resolve_wage_window({"working_hours_window_enabled": "false"}).working_hours_window_enabled is False
        assert resolve_wage_window({"working_hours_window_enabled": "TRUE"}).working_hours_window_enabled is True

    def test_complete_config_returned_as_is(self):
        config = WageWindowConfig(morning_start="07:00")
        assert resolve_wage_window(config) is config

    def test_never_raises_on_garbage(self):
        config = resolve_wage_window({"morning_start": "not a time", "unknown": 5})
        assert config.morning_start == "not a time"


class TestValidateWageWindow:

    def test_defaults_are_valid(self):
        config = resolve_wage_window()
        assert validate_wage_window(config) is config

    def test_zero_width_night_window(self):
        with pytest.raises(ConfigurationError):
            validate_wage_window(WageWindowConfig(night_start="17:00", night_end="17:00"))

    def test_zero_width_working_window_only_checked_when_enabled(self):
        disabled = WageWindowConfig(working_hours_window_enabled=False,
                                    working_hours_start="08:00", working_hours_end="08:00")
        validate_wage_window(disabled)
        with pytest.raises(ConfigurationError):
            validate_wage_window(disabled.model_copy(update={"working_hours_window_enabled": True}))

    def test_overlapping_windows(self):
        with pytest.raises(ConfigurationError) as exc:
            validate_wage_window(WageWindowConfig(morning_end="18:00"), organization_id="org-1")
        assert exc.value.organization_id == "org-1"

    def test_night_tail_overlapping_next_morning(self):
        with pytest.raises(ConfigurationError):
            validate_wage_window(WageWindowConfig(night_end="09:00"))

    def test_unparsable_boundary(self):
        with pytest.raises(ConfigurationError):
            validate_wage_window(WageWindowConfig(morning_start="eight"))
