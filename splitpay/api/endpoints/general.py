import logging

from fastapi import APIRouter, HTTPException
from splitpay.core.config import ServerConfig, WageConfig # Import configs
from splitpay.core.database import get_db # Import get_db
from splitpay.services.repositories import OPEN_SHIFT

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/")
async def root():
    return {
        "message": ServerConfig.APP_NAME,
        "version": ServerConfig.APP_VERSION,
        "description": ServerConfig.APP_DESCRIPTION,
        "status": "running",
        "organization_timezone": ServerConfig.ORGANIZATION_TIMEZONE,
    }

@router.get("/config")
async def get_public_config():
    """Get public configuration information, including the default wage windows"""
    return {
        "app_name": ServerConfig.APP_NAME,
        "app_version": ServerConfig.APP_VERSION,
        "organization_timezone": ServerConfig.ORGANIZATION_TIMEZONE,
        "default_wage_window": {
            "morning_start": WageConfig.DEFAULT_MORNING_START,
            "morning_end": WageConfig.DEFAULT_MORNING_END,
            "night_start": WageConfig.DEFAULT_NIGHT_START,
            "night_end": WageConfig.DEFAULT_NIGHT_END,
            "working_hours_window_enabled": WageConfig.DEFAULT_WORKING_HOURS_ENABLED,
            "working_hours_start": WageConfig.DEFAULT_WORKING_HOURS_START,
            "working_hours_end": WageConfig.DEFAULT_WORKING_HOURS_END,
        },
        "fallback_rates": {
            "morning_rate": WageConfig.FALLBACK_MORNING_RATE,
            "night_rate": WageConfig.FALLBACK_NIGHT_RATE,
            "flat_rate": WageConfig.FALLBACK_FLAT_RATE,
        },
    }

@router.get("/health")
async def health_check():
    """Health check with timesheet counts"""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM employees")
            employee_count = cursor.fetchone()[0]
            cursor.execute(f"SELECT COUNT(*) FROM timesheet_entries te WHERE {OPEN_SHIFT}")
            open_shifts = cursor.fetchone()[0]

            return {
                "status": "healthy",
                "database": "connected",
                "employees": employee_count,
                "open_shifts": open_shifts,
            }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")
