"""
Health check endpoints for the auth service
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..db import check_db_connection

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check(config: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """
    Liveness check. Does not touch the database.

    Returns:
        dict: Health status, uptime and timestamp
    """
    return {
        "status": "OK",
        "service": config.SERVICE_NAME,
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check():
    """
    Readiness check with database status.

    Returns:
        dict: Readiness status with component health, 503 if the database is unreachable
    """
    db_connected = check_db_connection()

    response = {
        "status": "ready" if db_connected else "not_ready",
        "database": "connected" if db_connected else "disconnected",
        "timestamp": datetime.utcnow().isoformat(),
    }

    if not db_connected:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response)

    return response
