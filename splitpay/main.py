import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from splitpay.core.config import ServerConfig, WageConfig # Import configs
from splitpay.core.database import init_database, seed_test_data # Import database functions
from splitpay.api.endpoints import general, payroll, timesheets # Import all endpoint routers

# Configure logging
log_level = getattr(logging, ServerConfig.LOG_LEVEL.upper())
logging.basicConfig(level=log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 60)
    logger.info(f"🚀 {ServerConfig.APP_NAME.upper()}")
    logger.info(f"Version: {ServerConfig.APP_VERSION}")
    logger.info("=" * 60)

    # Initialize database
    init_database()

    # Add test data for development
    if ServerConfig.SEED_TEST_DATA:
        seed_test_data()

    # Log configuration
    logger.info(f"Default morning window: {WageConfig.DEFAULT_MORNING_START}-{WageConfig.DEFAULT_MORNING_END}")
    logger.info(f"Default night window: {WageConfig.DEFAULT_NIGHT_START}-{WageConfig.DEFAULT_NIGHT_END}")
    if WageConfig.DEFAULT_WORKING_HOURS_ENABLED:
        logger.info(f"Default working hours window: {WageConfig.DEFAULT_WORKING_HOURS_START}-{WageConfig.DEFAULT_WORKING_HOURS_END}")
    else:
        logger.warning("⚠️  Working hours window is DISABLED by default - every worked minute is payable")

    logger.info(f"Database: {ServerConfig.DATABASE_PATH}")
    logger.info(f"Organization timezone: {ServerConfig.ORGANIZATION_TIMEZONE}")
    logger.info("=" * 60)
    logger.info("SplitPay server started successfully!")

    yield  # Server is running

    # Shutdown logic
    logger.info("Shutting down SplitPay server...")


app = FastAPI(
    title=ServerConfig.APP_NAME,
    version=ServerConfig.APP_VERSION,
    description=ServerConfig.APP_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs" if ServerConfig.ENABLE_API_DOCS else None,
    redoc_url="/redoc" if ServerConfig.ENABLE_API_DOCS else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ServerConfig.CORS_ORIGINS,
    allow_credentials=ServerConfig.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(general.router, tags=["General"])
app.include_router(payroll.router, tags=["Payroll"])
app.include_router(timesheets.router, tags=["Timesheets"])
