"""
Health Check Endpoints.

/api/health reports process uptime and database connectivity. It always
answers 200; a database outage shows up as "disconnected".
"""

import time
from typing import Any

from fastapi import APIRouter

from notes_api.core.config import get_app_config
from notes_api.core.database import ping_database
from notes_api.core.logging import get_logger
from notes_api.core.utils import iso_timestamp

router = APIRouter()
logger = get_logger(__name__)

_STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 3)


async def check_database() -> str:
    """Return "connected" when SELECT 1 succeeds, otherwise "disconnected"."""
    try:
        await ping_database()
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return "disconnected"
    return "connected"


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness and database connectivity."""
    app_settings = get_app_config().application
    return {
        "status": "OK",
        "message": f"{app_settings.name} is running successfully",
        "timestamp": iso_timestamp(),
        "environment": app_settings.environment,
        "version": app_settings.version,
        "uptime": uptime_seconds(),
        "database": await check_database(),
    }
