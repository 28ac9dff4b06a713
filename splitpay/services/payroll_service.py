import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
import csv
import io

from splitpay.core.config import WageConfig
from splitpay.core.exceptions import IncompleteShiftError, ShiftDataError
from splitpay.models.payroll import PayrollLine, PayrollReport, ShiftIssue
from splitpay.models.timesheet import Shift, SplitResult, WageRate, WageWindowConfig
from splitpay.services.splitter import split_shift
from splitpay.services.wage_window import validate_wage_window

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class EmployeeRecord:
    employee_id: str
    full_name: str
    staff_id: Optional[str] = None
    organization_id: Optional[str] = None

@dataclass(frozen=True)
class EmployeeIdentity:
    """Who a shift is attributed to. Unresolved identities carry the raw stored name"""
    key: str
    name: str
    employee_id: Optional[str] = None
    is_resolved: bool = True

UNKNOWN_EMPLOYEE = "Unknown"

class EmployeeIdentityResolver:
    """
    Attribute shifts to employees through a fixed precedence chain:
    employee id, then staff id, then exact full name. Shifts matching none of
    them land in a bucket named after the raw stored value so they stay visible.
    """

    def __init__(self, employees: Iterable[EmployeeRecord] = ()):
        self.by_id: Dict[str, EmployeeRecord] = {}
        self.by_staff_id: Dict[str, EmployeeRecord] = {}
        self.by_name: Dict[str, EmployeeRecord] = {}
        for employee in employees:
            self.by_id[employee.employee_id] = employee
            if employee.staff_id:
                self.by_staff_id[employee.staff_id] = employee
            self.by_name.setdefault(employee.full_name, employee)

    def match(self, shift: Shift) -> Optional[EmployeeRecord]:
        # Legacy rows put ids and staff ids in employee_name, so every field is tried at every step
        candidates = [c for c in (shift.employee_id, shift.staff_id, shift.employee_name) if c]
        for index in (self.by_id, self.by_staff_id, self.by_name):
            for candidate in candidates:
                if candidate in index:
                    return index[candidate]
        return None

    def resolve(self, shift: Shift) -> EmployeeIdentity:
        employee = self.match(shift)
        if employee is not None:
            return EmployeeIdentity(
                key=employee.employee_id,
                name=employee.full_name,
                employee_id=employee.employee_id,
            )

        raw = shift.employee_name or shift.staff_id or shift.employee_id or UNKNOWN_EMPLOYEE
        return EmployeeIdentity(key=f"raw:{raw}", name=raw, is_resolved=False)

def resolve_wage_rate(employee_rate: Optional[Dict] = None, organization_rate: Optional[Dict] = None) -> WageRate:
    """
    Employee rate, then organization default, then the fallback constants.
    Missing and zero rates are both treated as not configured.
    """
    employee_rate = employee_rate or {}
    organization_rate = organization_rate or {}

    def pick(field: str, fallback: float) -> float:
        return employee_rate.get(field) or organization_rate.get(field) or fallback

    return WageRate(
        morning_rate=pick("morning_rate", WageConfig.FALLBACK_MORNING_RATE),
        night_rate=pick("night_rate", WageConfig.FALLBACK_NIGHT_RATE),
    )

RateResolver = Callable[[EmployeeIdentity], WageRate]

def make_rate_resolver(employee_rates: Optional[Dict[str, WageRate]] = None,
                       default_rate: Optional[WageRate] = None) -> RateResolver:
    """Rate lookup by employee id, falling back to the identity's key and display name"""
    employee_rates = employee_rates or {}
    organization_rate = default_rate.model_dump() if default_rate else None

    def resolver(identity: EmployeeIdentity) -> WageRate:
        for key in (identity.employee_id, identity.key, identity.name):
            if key and key in employee_rates:
                return resolve_wage_rate(employee_rates[key].model_dump(), organization_rate)
        return resolve_wage_rate(None, organization_rate)

    return resolver

def shift_earnings(shift: Shift, split: SplitResult, rate: WageRate) -> float:
    """Stored card amounts override the computed split amount, split before flat"""
    if shift.total_card_amount_split and shift.total_card_amount_split > 0:
        return shift.total_card_amount_split
    if shift.total_card_amount_flat and shift.total_card_amount_flat > 0:
        return shift.total_card_amount_flat
    return split.morning_hours * rate.morning_rate + split.night_hours * rate.night_rate

def shift_total_hours(shift: Shift, split: SplitResult) -> float:
    if shift.total_hours:
        return shift.total_hours
    return split.total_hours

@dataclass
class _Accumulator:
    identity: EmployeeIdentity
    total_hours: float = 0.0
    morning_minutes: int = 0
    night_minutes: int = 0
    shift_count: int = 0
    total_earnings: float = 0.0

    def to_line(self) -> PayrollLine:
        return PayrollLine(
            employee_key=self.identity.key,
            employee_id=self.identity.employee_id,
            employee_name=self.identity.name,
            is_resolved=self.identity.is_resolved,
            total_hours=self.total_hours,
            morning_hours=self.morning_minutes / 60,
            night_hours=self.night_minutes / 60,
            shift_count=self.shift_count,
            total_earnings=self.total_earnings,
        )

def aggregate_payroll(
    shifts: List[Shift],
    config: WageWindowConfig,
    rate_resolver: RateResolver,
    identity_resolver: Optional[EmployeeIdentityResolver] = None,
    now: Optional[datetime] = None,
    organization_id: Optional[str] = None,
) -> PayrollReport:
    """
    Split every shift and total hours, shifts and earnings per employee.

    A broken shift is recorded as an issue and skipped; open shifts are listed
    as pending; shifts wholly outside the working-hours window are excluded.
    None of these stop the batch. An invalid configuration raises
    ConfigurationError before any shift is processed.
    """
    validate_wage_window(config, organization_id)
    identity_resolver = identity_resolver or EmployeeIdentityResolver()

    accumulators: Dict[str, _Accumulator] = {}
    issues: List[ShiftIssue] = []
    pending: List[ShiftIssue] = []
    excluded: List[Optional[str]] = []
    processed = 0

    for shift in shifts:
        try:
            split = split_shift(shift, config, now)
        except ShiftDataError as e:
            logger.warning(f"Skipping shift {shift.id} ({shift.employee_name}): {e.message}")
            issues.append(ShiftIssue(
                shift_id=shift.id,
                employee_name=shift.employee_name,
                error_type=e.error_type,
                message=e.message,
            ))
            continue

        if split.is_pending:
            info = IncompleteShiftError(shift.id, split.unassigned_minutes)
            pending.append(ShiftIssue(
                shift_id=shift.id,
                employee_name=shift.employee_name,
                error_type=info.error_type,
                message=str(info),
                is_fatal=False,
            ))
            continue

        if split.is_excluded:
            excluded.append(shift.id)
            continue

        identity = identity_resolver.resolve(shift)
        rate = rate_resolver(identity)

        acc = accumulators.get(identity.key)
        if acc is None:
            acc = accumulators[identity.key] = _Accumulator(identity)
        acc.total_hours += shift_total_hours(shift, split)
        acc.morning_minutes += split.morning_minutes
        acc.night_minutes += split.night_minutes
        acc.shift_count += 1
        acc.total_earnings += shift_earnings(shift, split, rate)
        processed += 1

    lines = sorted((acc.to_line() for acc in accumulators.values()),
                   key=lambda line: (not line.is_resolved, line.employee_name))

    logger.info(
        f"Aggregated {processed} shifts into {len(lines)} payroll lines "
        f"({len(issues)} skipped, {len(pending)} pending, {len(excluded)} outside working hours)"
    )

    return PayrollReport(
        lines=lines,
        issues=issues,
        pending=pending,
        excluded_shift_ids=excluded,
        processed_count=processed,
        total_hours=sum(line.total_hours for line in lines),
        total_earnings=sum(line.total_earnings for line in lines),
    )

def generate_payroll_csv(report: PayrollReport) -> str:
    """Generate CSV format for payroll export"""

    output = io.StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow([
        'Employee ID', 'Employee Name', 'Total Hours', 'Morning Hours',
        'Night Hours', 'Shifts', 'Total Earnings', 'Status'
    ])

    # Data rows, rounded for display only
    for line in report.rounded().lines:
        writer.writerow([
            line.employee_id or '',
            line.employee_name,
            f"{line.total_hours:.2f}",
            f"{line.morning_hours:.2f}",
            f"{line.night_hours:.2f}",
            line.shift_count,
            f"{line.total_earnings:.2f}",
            'OK' if line.is_resolved else 'UNMATCHED EMPLOYEE'
        ])

    # Skipped shifts stay visible in the export
    for issue in report.issues:
        writer.writerow([
            '', issue.employee_name or '', '', '', '', '', '',
            f"SKIPPED {issue.shift_id}: {issue.error_type} {issue.message}"
        ])

    return output.getvalue()
