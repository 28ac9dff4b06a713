from conftest import make_shift

from splitpay.core.database import get_db
from splitpay.models.timesheet import WageRate
from splitpay.services.payroll_service import EmployeeIdentity
from splitpay.services.recalculation_service import recalculate_missing_hours
from splitpay.services.repositories import (
    EmployeeRepository, RateRepository, SettingsRepository, ShiftRepository
)


def stored_row(entry_id):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM timesheet_entries WHERE entry_id = ?", (entry_id,))
        return dict(cursor.fetchone())


def insert_blank_clock_out(entry_id="t7"):
    with get_db() as conn:
        conn.execute(
            "INSERT INTO timesheet_entries (entry_id, organization_id, employee_id, employee_name, "
            "clock_in_date, clock_in_time, clock_out_date, clock_out_time) "
            "VALUES (?, 'org-1', 'e1', 'Alice Adams', '2025-03-07', '09:00:00', NULL, '')",
            (entry_id,),
        )
        conn.commit()


class TestShiftRepository:

    def test_lists_organization_and_legacy_rows(self, seeded_org):
        ids = [shift.id for shift in ShiftRepository().list_shifts(seeded_org)]
        assert sorted(ids) == ["t1", "t2", "t3", "t4", "t6"]

    def test_date_range(self, seeded_org):
        shifts = ShiftRepository().list_shifts(seeded_org, "2025-03-04", "2025-03-05")
        assert [shift.id for shift in shifts] == ["t3", "t4"]

    def test_employee_filter(self, seeded_org):
        shifts = ShiftRepository().list_shifts(seeded_org, employee_id="e2")
        assert [shift.id for shift in shifts] == ["t2", "t6"]

    def test_row_mapping(self, seeded_org):
        shift = ShiftRepository().get_shift("t2")
        assert str(shift.clock_in_date) == "2025-03-03"
        assert str(shift.clock_out_date) == "2025-03-04"
        assert shift.clock_out_time == "00:00:00"
        assert shift.morning_hours is None

    def test_missing_shift(self, seeded_org):
        assert ShiftRepository().get_shift("nope") is None

    def test_open_shifts(self, seeded_org):
        assert [shift.id for shift in ShiftRepository().list_open_shifts(seeded_org)] == ["t4"]

    def test_other_organization_is_separate(self, seeded_org):
        assert [shift.id for shift in ShiftRepository().list_shifts("org-2")] == ["t5"]

    def test_blank_clock_out_is_open_not_missing_split(self, seeded_org):
        insert_blank_clock_out()
        repository = ShiftRepository()
        assert "t7" in [shift.id for shift in repository.list_open_shifts(seeded_org)]
        assert "t7" not in [shift.id for shift in repository.list_missing_splits(seeded_org)]

    def test_legacy_row_organization(self, seeded_org):
        repository = EmployeeRepository()
        shifts = ShiftRepository()
        assert repository.organization_for_shift(shifts.get_shift("t3")) == "org-1"
        assert repository.organization_for_shift(shifts.get_shift("t5")) == "org-2"


class TestSettingsAndRates:

    def test_raw_settings(self, seeded_org):
        raw = SettingsRepository().get_raw_settings(seeded_org)
        assert raw["morning_wage_rate"] == 17.0
        assert raw["night_start_time"] is None

    def test_no_settings(self, seeded_org):
        assert SettingsRepository().get_raw_settings("org-2") is None

    def test_organization_exists(self, seeded_org):
        assert SettingsRepository().organization_exists("org-1")
        assert not SettingsRepository().organization_exists("org-404")

    def test_employees(self, seeded_org):
        names = [employee.full_name for employee in EmployeeRepository().list_employees(seeded_org)]
        assert names == ["Alice Adams", "Bilal Badr"]

    def test_rate_resolver_chain(self, seeded_org):
        resolver = RateRepository().resolver_for(seeded_org)
        assert resolver(EmployeeIdentity(key="e2", name="Bilal Badr", employee_id="e2")) == WageRate(morning_rate=18, night_rate=24)
        assert resolver(EmployeeIdentity(key="e1", name="Alice Adams", employee_id="e1")) == WageRate(morning_rate=17, night_rate=20)
        assert resolver(EmployeeIdentity(key="raw:x", name="x", is_resolved=False)) == WageRate(morning_rate=17, night_rate=20)

    def test_flat_rate(self, seeded_org):
        assert RateRepository().flat_rate(seeded_org) == 15.0
        assert RateRepository().flat_rate("org-2") is None


class TestRecalculateMissingHours:

    def test_writes_splits_and_amounts(self, seeded_org):
        summary = recalculate_missing_hours(seeded_org)

        assert summary.candidates == 4
        assert summary.updated == 3
        assert summary.failed == 1
        assert summary.issues[0].shift_id == "t6"

        t1 = stored_row("t1")
        assert (t1["morning_hours"], t1["night_hours"]) == (8.0, 1.0)
        assert t1["total_card_amount_split"] == 156.0
        assert t1["total_card_amount_flat"] == 135.0
        assert t1["is_split_calculation"] == 1

        t2 = stored_row("t2")
        assert (t2["morning_hours"], t2["night_hours"]) == (0.0, 6.0)
        assert t2["total_card_amount_split"] == 144.0

        # Legacy row priced with the organization default for its resolved employee
        t3 = stored_row("t3")
        assert t3["morning_hours"] == 4.0
        assert t3["total_card_amount_split"] == 68.0

    def test_rerun_is_idempotent(self, seeded_org):
        recalculate_missing_hours(seeded_org)
        first = [stored_row(entry_id) for entry_id in ("t1", "t2", "t3")]

        summary = recalculate_missing_hours(seeded_org)
        assert summary.updated == 0
        assert summary.candidates == 1
        assert [stored_row(entry_id) for entry_id in ("t1", "t2", "t3")] == first

    def test_open_shifts_untouched(self, seeded_org):
        recalculate_missing_hours(seeded_org)
        assert stored_row("t4")["morning_hours"] is None

    def test_blank_clock_out_untouched(self, seeded_org):
        insert_blank_clock_out()
        summary = recalculate_missing_hours(seeded_org)
        assert summary.updated == 3

        row = stored_row("t7")
        assert row["morning_hours"] is None
        assert row["total_card_amount_flat"] is None
        assert not row["is_split_calculation"]

    def test_open_candidate_is_skipped(self, seeded_org):
        class OpenShiftRepository(ShiftRepository):
            saved = []

            def list_missing_splits(self, organization_id):
                return [make_shift("09:00:00", id="open", employee_id="e1")]

            def save_split(self, entry_id, **amounts):
                self.saved.append(entry_id)

        repository = OpenShiftRepository()
        summary = recalculate_missing_hours(seeded_org, shifts=repository)
        assert summary.updated == 0
        assert repository.saved == []
