import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Response
from splitpay.core.exceptions import ConfigurationError, ShiftDataError
from splitpay.models.payroll import AggregateRequest, PayrollReport, SplitRequest
from splitpay.models.timesheet import SplitResult, WageWindowConfig
from splitpay.services.payroll_service import (
    EmployeeIdentityResolver, aggregate_payroll, generate_payroll_csv, make_rate_resolver
)
from splitpay.services.repositories import (
    EmployeeRepository, RateRepository, SettingsRepository, ShiftRepository
)
from splitpay.services.splitter import split_shift
from splitpay.services.wage_window import resolve_wage_window, validate_wage_window

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/payroll/split", response_model=SplitResult)
async def split_single_shift(request: SplitRequest):
    """Split one caller-supplied shift into morning and night minutes"""
    try:
        config = validate_wage_window(resolve_wage_window(request.settings))
        return split_shift(request.shift, config)
    except ShiftDataError as e:
        raise HTTPException(status_code=400, detail={"error_type": e.error_type, "message": e.message})
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=e.message)

@router.post("/payroll/aggregate", response_model=PayrollReport)
async def aggregate_shifts(request: AggregateRequest):
    """Aggregate caller-supplied shifts; rates keyed by employee id, staff id or name"""
    try:
        config = resolve_wage_window(request.settings)
        report = aggregate_payroll(
            request.shifts,
            config,
            make_rate_resolver(request.rates, request.default_rate),
        )
        return report.rounded()
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=e.message)

@router.get("/payroll/wage-window/{organization_id}", response_model=WageWindowConfig)
async def get_wage_window(organization_id: str):
    """Resolved wage window for an organization, defaults filled in"""
    return resolve_wage_window(SettingsRepository().get_raw_settings(organization_id))

@router.get("/payroll/report")
async def get_payroll_report(
    organization_id: str,
    start_date: str,  # YYYY-MM-DD
    end_date: str,    # YYYY-MM-DD
    employee_id: Optional[str] = None,
    format: str = "json"  # json or csv
):
    """Per-employee payroll lines for an organization over a date range"""
    try:
        datetime.strptime(start_date, '%Y-%m-%d')
        datetime.strptime(end_date, '%Y-%m-%d')
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")

    settings = SettingsRepository()
    if not settings.organization_exists(organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")

    try:
        config = resolve_wage_window(settings.get_raw_settings(organization_id))
        shifts = ShiftRepository().list_shifts(organization_id, start_date, end_date, employee_id)
        report = aggregate_payroll(
            shifts,
            config,
            RateRepository(settings).resolver_for(organization_id),
            EmployeeIdentityResolver(EmployeeRepository().list_employees(organization_id)),
            organization_id=organization_id,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except Exception as e:
        logger.error(f"Error generating payroll report: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate payroll report")

    if format == "csv":
        csv_content = generate_payroll_csv(report)
        return Response(
            content=csv_content,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=payroll_{organization_id}_{start_date}_to_{end_date}.csv"}
        )

    rounded = report.rounded()
    return {
        "organization_id": organization_id,
        "start_date": start_date,
        "end_date": end_date,
        "wage_window": config,
        "summary": {
            "processed_shifts": report.processed_count,
            "skipped_shifts": report.skipped_count,
            "pending_shifts": len(report.pending),
            "excluded_shifts": len(report.excluded_shift_ids),
            "total_hours": rounded.total_hours,
            "total_earnings": rounded.total_earnings,
        },
        "employee_reports": rounded.lines,
        "issues": report.issues,
        "pending": report.pending,
    }
