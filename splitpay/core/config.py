import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

def parse_list_env(env_var: str, default: List[str] = None) -> List[str]:
    """Parse comma-separated environment variable into list"""
    if default is None:
        default = []

    value = os.getenv(env_var, "")
    if not value.strip():
        return default

    # Split by comma and strip whitespace
    return [item.strip() for item in value.split(",") if item.strip()]

def parse_bool_env(env_var: str, default: bool = False) -> bool:
    """Parse boolean environment variable"""
    return os.getenv(env_var, str(default)).lower() in ("true", "1", "yes", "on")

def parse_float_env(env_var: str, default: float) -> float:
    """Parse float environment variable, keeping the default on garbage"""
    value = os.getenv(env_var, "")
    if not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default

class WageConfig:
    """Fallback wage windows and rates used when an organization has none configured"""

    # Morning / night rate windows (local civil time)
    DEFAULT_MORNING_START = os.getenv("DEFAULT_MORNING_START", "08:00:00")
    DEFAULT_MORNING_END = os.getenv("DEFAULT_MORNING_END", "17:00:00")
    DEFAULT_NIGHT_START = os.getenv("DEFAULT_NIGHT_START", "17:00:00")
    DEFAULT_NIGHT_END = os.getenv("DEFAULT_NIGHT_END", "01:00:00")

    # Working hours window (payable clamp)
    DEFAULT_WORKING_HOURS_ENABLED = parse_bool_env("DEFAULT_WORKING_HOURS_ENABLED", True)
    DEFAULT_WORKING_HOURS_START = os.getenv("DEFAULT_WORKING_HOURS_START", "08:00:00")
    DEFAULT_WORKING_HOURS_END = os.getenv("DEFAULT_WORKING_HOURS_END", "01:00:00")

    # Last-resort rates (currency per hour)
    FALLBACK_MORNING_RATE = parse_float_env("FALLBACK_MORNING_RATE", 17.0)
    FALLBACK_NIGHT_RATE = parse_float_env("FALLBACK_NIGHT_RATE", 20.0)
    FALLBACK_FLAT_RATE = parse_float_env("FALLBACK_FLAT_RATE", 20.0)

class ServerConfig:
    """Server Configuration from Environment"""

    # Server settings
    HOST = os.getenv("SPLITPAY_HOST", "0.0.0.0")
    PORT = int(os.getenv("SPLITPAY_PORT", "8000"))
    WORKERS = int(os.getenv("SPLITPAY_WORKERS", "1"))
    LOG_LEVEL = os.getenv("SPLITPAY_LOG_LEVEL", "info")

    # Optional TLS, only used when both files are configured
    SSL_CERT_FILE = os.getenv("SSL_CERT_FILE", "")
    SSL_KEY_FILE = os.getenv("SSL_KEY_FILE", "")

    # Security settings
    ADMIN_SECRET = os.getenv("SPLITPAY_ADMIN_SECRET", "your-secret-key-here")
    LOCALHOST_ONLY_ADMIN = parse_bool_env("LOCALHOST_ONLY_ADMIN", True)

    # Database settings
    DATABASE_PATH = os.getenv("DATABASE_PATH", "splitpay.db")

    # Local civil time of the organization (shift dates/times are stored in it)
    ORGANIZATION_TIMEZONE = os.getenv("ORGANIZATION_TIMEZONE", "Africa/Cairo")

    # Development settings
    SEED_TEST_DATA = parse_bool_env("SEED_TEST_DATA", True)
    ENABLE_API_DOCS = parse_bool_env("ENABLE_API_DOCS", True)

    # CORS settings
    CORS_ORIGINS = parse_list_env("CORS_ORIGINS", ["*"])
    CORS_ALLOW_CREDENTIALS = parse_bool_env("CORS_ALLOW_CREDENTIALS", True)

    # App metadata
    APP_NAME = os.getenv("APP_NAME", "SplitPay Timesheets")
    APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
    APP_DESCRIPTION = os.getenv("APP_DESCRIPTION", "Morning/night split-rate payroll for timesheet records")
