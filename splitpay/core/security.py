import hmac
import logging

from fastapi import HTTPException, Request
from splitpay.core.config import ServerConfig

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = ("127.0.0.1", "::1", "localhost")

def is_loopback(request: Request) -> bool:
    return request.client is not None and request.client.host in LOOPBACK_HOSTS

async def admin_auth(request: Request):
    """Guard for endpoints that write computed hours back to timesheet rows.

    Requires the X-Admin-Secret header and, unless LOCALHOST_ONLY_ADMIN is off,
    a loopback client.
    """
    client_host = request.client.host if request.client else "unknown"

    if ServerConfig.LOCALHOST_ONLY_ADMIN and not is_loopback(request):
        logger.warning(f"Write-back access denied from {client_host}")
        raise HTTPException(status_code=403, detail="Admin endpoints only accessible from localhost")

    supplied = request.headers.get("X-Admin-Secret", "")
    if not hmac.compare_digest(supplied.encode(), ServerConfig.ADMIN_SECRET.encode()):
        logger.warning(f"Invalid admin secret from {client_host}")
        raise HTTPException(status_code=403, detail="Invalid admin credentials")
    return True
