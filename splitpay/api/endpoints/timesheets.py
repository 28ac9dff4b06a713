import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from splitpay.core.exceptions import ConfigurationError, ShiftDataError
from splitpay.core.security import admin_auth # Import security dependency
from splitpay.models.payroll import ActiveShiftEstimate, RecalculationSummary
from splitpay.services.recalculation_service import recalculate_missing_hours
from splitpay.services.repositories import EmployeeRepository, SettingsRepository, ShiftRepository
from splitpay.services.splitter import estimate_active_shift, split_shift
from splitpay.services.wage_window import resolve_wage_window, validate_wage_window

router = APIRouter()
logger = logging.getLogger(__name__)

def organization_wage_window(organization_id):
    """Validated wage window for an organization, defaults when it has no settings"""
    raw_settings = SettingsRepository().get_raw_settings(organization_id) if organization_id else None
    try:
        return validate_wage_window(resolve_wage_window(raw_settings), organization_id)
    except ConfigurationError as e:
        logger.error(f"Invalid wage window for {organization_id}: {e.message}")
        raise HTTPException(status_code=422, detail=e.message)

@router.get("/timesheets/active")
async def list_active_shifts(organization_id: str):
    """Open shifts with hours estimated as if clocked out now"""
    config = organization_wage_window(organization_id)
    estimates: List[ActiveShiftEstimate] = []
    issues = []

    for shift in ShiftRepository().list_open_shifts(organization_id):
        try:
            estimates.append(estimate_active_shift(shift, config))
        except ShiftDataError as e:
            logger.warning(f"Cannot estimate active shift {shift.id}: {e.message}")
            issues.append({"shift_id": shift.id, "error_type": e.error_type, "message": e.message})
        except ConfigurationError as e:
            raise HTTPException(status_code=422, detail=e.message)

    return {
        "organization_id": organization_id,
        "active_count": len(estimates),
        "active_shifts": estimates,
        "issues": issues,
    }

@router.get("/timesheets/{entry_id}/split")
async def get_entry_split(entry_id: str):
    """Split for a stored timesheet entry using its organization's wage window"""
    shift = ShiftRepository().get_shift(entry_id)
    if shift is None:
        raise HTTPException(status_code=404, detail="Timesheet entry not found")

    config = organization_wage_window(EmployeeRepository().organization_for_shift(shift))

    try:
        result = split_shift(shift, config)
    except ShiftDataError as e:
        raise HTTPException(status_code=400, detail={"error_type": e.error_type, "message": e.message})
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    return {
        "entry_id": entry_id,
        "employee_name": shift.employee_name,
        "split": result,
        "morning_hours": round(result.morning_hours, 2),
        "night_hours": round(result.night_hours, 2),
        "total_hours": round(result.total_hours, 2),
    }

@router.post("/timesheets/recalculate", response_model=RecalculationSummary, dependencies=[Depends(admin_auth)])
async def recalculate_hours(organization_id: str):
    """Compute and store splits for completed shifts that have none"""
    if not SettingsRepository().organization_exists(organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")
    try:
        return recalculate_missing_hours(organization_id)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=e.message)
