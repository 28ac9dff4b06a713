from datetime import date

import pytest

from splitpay.core.config import ServerConfig
from splitpay.core.database import get_db, init_database
from splitpay.models.timesheet import Shift, WageWindowConfig


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Fresh sqlite schema in a temporary file"""
    monkeypatch.setattr(ServerConfig, "DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setattr(ServerConfig, "SEED_TEST_DATA", False)
    init_database()
    return ServerConfig.DATABASE_PATH


@pytest.fixture
def default_config():
    return WageWindowConfig(
        morning_start="08:00:00",
        morning_end="17:00:00",
        night_start="17:00:00",
        night_end="01:00:00",
        working_hours_window_enabled=True,
        working_hours_start="08:00:00",
        working_hours_end="01:00:00",
    )


@pytest.fixture
def unclamped_config(default_config):
    return default_config.model_copy(update={"working_hours_window_enabled": False})


SAME_DAY = object()


def make_shift(clock_in, clock_out=None, in_date=date(2025, 3, 3), out_date=SAME_DAY, **fields):
    """Shift builder; the clock-out date defaults to the clock-in date, pass None to leave it out"""
    if out_date is SAME_DAY:
        out_date = in_date if clock_out is not None else None
    return Shift(
        clock_in_date=in_date,
        clock_in_time=clock_in,
        clock_out_date=out_date,
        clock_out_time=clock_out,
        **fields,
    )


@pytest.fixture
def seeded_org(temp_db):
    """Organization with wage settings, three employees and a legacy row"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("INSERT INTO organizations (organization_id, name) VALUES ('org-1', 'Org One')")
        cursor.execute("INSERT INTO organizations (organization_id, name) VALUES ('org-2', 'Org Two')")
        cursor.execute('''
            INSERT INTO wage_settings (organization_id, morning_wage_rate, night_wage_rate, default_flat_wage_rate)
            VALUES ('org-1', 17.0, 20.0, 15.0)
        ''')
        cursor.executemany('''
            INSERT INTO employees (employee_id, organization_id, staff_id, full_name, morning_wage_rate, night_wage_rate)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', [
            ("e1", "org-1", "S001", "Alice Adams", None, None),
            ("e2", "org-1", "S002", "Bilal Badr", 18.0, 24.0),
            ("e9", "org-2", "S900", "Other Org Person", None, None),
        ])
        cursor.executemany('''
            INSERT INTO timesheet_entries
            (entry_id, organization_id, employee_id, employee_name, clock_in_date, clock_in_time, clock_out_date, clock_out_time)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', [
            ("t1", "org-1", "e1", "Alice Adams", "2025-03-03", "09:00:00", "2025-03-03", "18:00:00"),
            ("t2", "org-1", "e2", "Bilal Badr", "2025-03-03", "18:00:00", "2025-03-04", "00:00:00"),
            ("t3", None, None, "S001", "2025-03-04", "09:00:00", "2025-03-04", "13:00:00"),
            ("t4", "org-1", "e1", "Alice Adams", "2025-03-05", "10:00:00", None, None),
            ("t5", "org-2", "e9", "Other Org Person", "2025-03-03", "09:00:00", "2025-03-03", "17:00:00"),
            ("t6", "org-1", "e2", "Bilal Badr", "2025-03-06", "9x:00", "2025-03-06", "17:00:00"),
        ])
        conn.commit()
    return "org-1"
