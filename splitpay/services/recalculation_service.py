import logging
from typing import Optional

from splitpay.core.config import WageConfig
from splitpay.core.exceptions import ShiftDataError
from splitpay.models.payroll import RecalculationSummary, ShiftIssue
from splitpay.services.payroll_service import EmployeeIdentityResolver
from splitpay.services.repositories import (
    EmployeeRepository, RateRepository, SettingsRepository, ShiftRepository
)
from splitpay.services.splitter import split_shift
from splitpay.services.wage_window import resolve_wage_window, validate_wage_window

logger = logging.getLogger(__name__)

def recalculate_missing_hours(
    organization_id: str,
    shifts: Optional[ShiftRepository] = None,
    settings: Optional[SettingsRepository] = None,
    employees: Optional[EmployeeRepository] = None,
    rates: Optional[RateRepository] = None,
) -> RecalculationSummary:
    """
    Compute and store the morning/night split and card amounts for every
    completed shift of an organization that has no split stored yet.

    Amounts use unrounded hours; the stored hours and amounts are rounded to
    two decimals since they are what reports display.
    """
    shifts = shifts or ShiftRepository()
    settings = settings or SettingsRepository()
    employees = employees or EmployeeRepository()
    rates = rates or RateRepository(settings)

    config = validate_wage_window(
        resolve_wage_window(settings.get_raw_settings(organization_id)), organization_id
    )
    identity_resolver = EmployeeIdentityResolver(employees.list_employees(organization_id))
    rate_resolver = rates.resolver_for(organization_id)
    flat_rate = rates.flat_rate(organization_id) or WageConfig.FALLBACK_FLAT_RATE

    candidates = shifts.list_missing_splits(organization_id)
    summary = RecalculationSummary(organization_id=organization_id, candidates=len(candidates))
    logger.info(f"🔄 Recalculating {len(candidates)} shifts for organization {organization_id}")

    for shift in candidates:
        try:
            split = split_shift(shift, config)
        except ShiftDataError as e:
            logger.warning(f"Could not split shift {shift.id}: {e.message}")
            summary.failed += 1
            summary.issues.append(ShiftIssue(
                shift_id=shift.id,
                employee_name=shift.employee_name,
                error_type=e.error_type,
                message=e.message,
            ))
            continue

        if split.is_pending:
            logger.debug(f"Skipping shift {shift.id}: still open")
            continue

        if split.is_excluded:
            summary.excluded += 1
            continue

        rate = rate_resolver(identity_resolver.resolve(shift))
        split_amount = split.morning_hours * rate.morning_rate + split.night_hours * rate.night_rate
        total_hours = shift.total_hours or split.total_hours
        flat_amount = total_hours * flat_rate

        shifts.save_split(
            shift.id,
            morning_hours=round(split.morning_hours, 2),
            night_hours=round(split.night_hours, 2),
            split_amount=round(split_amount, 2),
            flat_amount=round(flat_amount, 2),
        )
        summary.updated += 1
        logger.debug(
            f"Updated shift {shift.id}: M:{split.morning_hours:.2f}h N:{split.night_hours:.2f}h "
            f"Split:{split_amount:.2f} Flat:{flat_amount:.2f}"
        )

    logger.info(
        f"✅ Recalculation complete for {organization_id}: {summary.updated} updated, "
        f"{summary.excluded} outside working hours, {summary.failed} failed"
    )
    return summary
