from typing import Any, Dict, List, Optional

from splitpay.core.database import get_db
from splitpay.models.timesheet import Shift, WageRate
from splitpay.services.payroll_service import (
    EmployeeIdentity, EmployeeRecord, RateResolver, resolve_wage_rate
)

SHIFT_COLUMNS = '''
    te.entry_id, te.organization_id, te.employee_id, te.employee_name,
    te.clock_in_date, te.clock_in_time, te.clock_out_date, te.clock_out_time,
    te.total_hours, te.morning_hours, te.night_hours,
    te.total_card_amount_flat, te.total_card_amount_split
'''

# Legacy rows have no organization_id; they belong to whichever organization
# employs the person named in employee_id / employee_name
ORGANIZATION_FILTER = '''
    (te.organization_id = :org
     OR (te.organization_id IS NULL AND EXISTS (
         SELECT 1 FROM employees e
         WHERE e.organization_id = :org
         AND (e.employee_id = te.employee_id
              OR e.staff_id = te.employee_name
              OR e.employee_id = te.employee_name
              OR e.full_name = te.employee_name))))
'''

OPEN_SHIFT = "(te.clock_out_time IS NULL OR te.clock_out_time = '')"

def row_to_shift(row) -> Shift:
    return Shift(
        id=row['entry_id'],
        organization_id=row['organization_id'],
        employee_id=row['employee_id'],
        employee_name=row['employee_name'],
        clock_in_date=row['clock_in_date'],
        clock_in_time=row['clock_in_time'],
        clock_out_date=row['clock_out_date'],
        clock_out_time=row['clock_out_time'],
        total_hours=row['total_hours'],
        morning_hours=row['morning_hours'],
        night_hours=row['night_hours'],
        total_card_amount_flat=row['total_card_amount_flat'],
        total_card_amount_split=row['total_card_amount_split'],
    )

class ShiftRepository:
    """Timesheet rows as Shift records"""

    def list_shifts(self, organization_id: str, start_date: Optional[str] = None,
                    end_date: Optional[str] = None, employee_id: Optional[str] = None) -> List[Shift]:
        query = f"SELECT {SHIFT_COLUMNS} FROM timesheet_entries te WHERE {ORGANIZATION_FILTER}"
        params: Dict[str, Any] = {"org": organization_id}

        if start_date:
            query += " AND te.clock_in_date >= :start"
            params["start"] = start_date
        if end_date:
            query += " AND te.clock_in_date <= :end"
            params["end"] = end_date
        if employee_id:
            query += " AND (te.employee_id = :emp OR te.employee_name = :emp)"
            params["emp"] = employee_id

        query += " ORDER BY te.clock_in_date, te.clock_in_time"

        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [row_to_shift(row) for row in cursor.fetchall()]

    def get_shift(self, entry_id: str) -> Optional[Shift]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {SHIFT_COLUMNS} FROM timesheet_entries te WHERE te.entry_id = ?",
                (entry_id,)
            )
            row = cursor.fetchone()
            return row_to_shift(row) if row else None

    def list_missing_splits(self, organization_id: str) -> List[Shift]:
        """Completed shifts with no stored morning/night split"""
        query = f'''
            SELECT {SHIFT_COLUMNS} FROM timesheet_entries te
            WHERE {ORGANIZATION_FILTER}
            AND te.clock_out_time IS NOT NULL AND te.clock_out_time <> ''
            AND COALESCE(te.morning_hours, 0) = 0
            AND COALESCE(te.night_hours, 0) = 0
            ORDER BY te.clock_in_date, te.clock_in_time
        '''
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, {"org": organization_id})
            return [row_to_shift(row) for row in cursor.fetchall()]

    def list_open_shifts(self, organization_id: str) -> List[Shift]:
        query = f'''
            SELECT {SHIFT_COLUMNS} FROM timesheet_entries te
            WHERE {ORGANIZATION_FILTER}
            AND {OPEN_SHIFT}
            ORDER BY te.clock_in_date, te.clock_in_time
        '''
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, {"org": organization_id})
            return [row_to_shift(row) for row in cursor.fetchall()]

    def save_split(self, entry_id: str, morning_hours: float, night_hours: float,
                   split_amount: float, flat_amount: float):
        """Write a computed split back. Same inputs give the same row, so re-runs are harmless"""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                UPDATE timesheet_entries
                SET morning_hours = ?, night_hours = ?,
                    total_card_amount_split = ?, total_card_amount_flat = ?,
                    is_split_calculation = TRUE
                WHERE entry_id = ?
            ''', (morning_hours, night_hours, split_amount, flat_amount, entry_id))
            conn.commit()

class SettingsRepository:
    """Raw, nullable wage settings per organization"""

    def get_raw_settings(self, organization_id: str) -> Optional[Dict[str, Any]]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM wage_settings WHERE organization_id = ?", (organization_id,))
            row = cursor.fetchone()
            return dict(row) if row else None

    def organization_exists(self, organization_id: str) -> bool:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM organizations WHERE organization_id = ?", (organization_id,))
            return cursor.fetchone() is not None

class EmployeeRepository:

    def list_employees(self, organization_id: str) -> List[EmployeeRecord]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                SELECT employee_id, full_name, staff_id, organization_id
                FROM employees WHERE organization_id = ?
                ORDER BY full_name
            ''', (organization_id,))
            return [
                EmployeeRecord(
                    employee_id=row['employee_id'],
                    full_name=row['full_name'],
                    staff_id=row['staff_id'],
                    organization_id=row['organization_id'],
                )
                for row in cursor.fetchall()
            ]

    def organization_for_shift(self, shift: Shift) -> Optional[str]:
        """Organization of a shift; legacy rows go through the employee they name"""
        if shift.organization_id:
            return shift.organization_id
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                SELECT organization_id FROM employees e
                WHERE e.employee_id = :emp
                OR e.staff_id = :name OR e.employee_id = :name OR e.full_name = :name
                ORDER BY CASE WHEN e.employee_id = :emp THEN 0 ELSE 1 END
                LIMIT 1
            ''', {"emp": shift.employee_id, "name": shift.employee_name})
            row = cursor.fetchone()
            return row['organization_id'] if row else None

class RateRepository:
    """Per-employee rates with the organization's wage settings as default"""

    def __init__(self, settings: Optional[SettingsRepository] = None):
        self.settings = settings or SettingsRepository()

    def organization_rate(self, organization_id: str) -> Dict[str, Optional[float]]:
        raw = self.settings.get_raw_settings(organization_id) or {}
        return {
            "morning_rate": raw.get("morning_wage_rate"),
            "night_rate": raw.get("night_wage_rate"),
        }

    def flat_rate(self, organization_id: str) -> Optional[float]:
        raw = self.settings.get_raw_settings(organization_id) or {}
        return raw.get("default_flat_wage_rate")

    def employee_rates(self, organization_id: str) -> Dict[str, Dict[str, Optional[float]]]:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                SELECT employee_id, morning_wage_rate, night_wage_rate
                FROM employees WHERE organization_id = ?
            ''', (organization_id,))
            return {
                row['employee_id']: {
                    "morning_rate": row['morning_wage_rate'],
                    "night_rate": row['night_wage_rate'],
                }
                for row in cursor.fetchall()
            }

    def resolver_for(self, organization_id: str) -> RateResolver:
        """Snapshot the organization's rates into a resolver for one aggregation call"""
        organization_rate = self.organization_rate(organization_id)
        employee_rates = self.employee_rates(organization_id)

        def resolver(identity: EmployeeIdentity) -> WageRate:
            return resolve_wage_rate(employee_rates.get(identity.employee_id), organization_rate)

        return resolver
