import uvicorn
import logging
from splitpay.main import app # Import the FastAPI app instance from splitpay.main
from splitpay.core.config import ServerConfig # Import ServerConfig

# Configure logging for the main entry point
log_level = getattr(logging, ServerConfig.LOG_LEVEL.upper())
logging.basicConfig(level=log_level)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    use_https = bool(ServerConfig.SSL_CERT_FILE and ServerConfig.SSL_KEY_FILE)
    scheme = "https" if use_https else "http"

    logger.info(f"Starting {scheme.upper()} server on port {ServerConfig.PORT}...")
    logger.info(f"API Documentation: {scheme}://localhost:{ServerConfig.PORT}/docs")
    logger.info(f"Payroll report: {scheme}://localhost:{ServerConfig.PORT}/payroll/report")

    ssl_options = {}
    if use_https:
        ssl_options = {
            "ssl_keyfile": ServerConfig.SSL_KEY_FILE,
            "ssl_certfile": ServerConfig.SSL_CERT_FILE,
        }

    uvicorn.run(
        app,
        host=ServerConfig.HOST,
        port=ServerConfig.PORT,
        log_level=ServerConfig.LOG_LEVEL.lower(),
        workers=ServerConfig.WORKERS if ServerConfig.WORKERS > 1 else None,
        **ssl_options
    )
