"""Health Probes — liveness and readiness for the vending API.

Invariants:
    - GET /health/ answers 200 while the process is up, with name and version
    - GET /health/ready answers 503 unless the database answers a SELECT 1
    - Readiness also reports the purchase settings the process was started with
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import vending.infrastructure.database as database
from vending.config import get_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/ready")
async def readiness():
    """Database reachability plus active purchase settings."""
    settings = get_settings()
    manager = database.db_manager
    database_ok = manager is not None and await manager.health_check()
    body = {
        "status": "ready" if database_ok else "not_ready",
        "checks": {"database": "healthy" if database_ok else "unavailable"},
        "purchase_mode": settings.purchase_mode.value,
        "stock_guard_enabled": settings.stock_guard_enabled,
    }
    if not database_ok:
        logger.warning("Readiness check failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body,
        )
    return body
