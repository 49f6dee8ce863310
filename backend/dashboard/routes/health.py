"""
Teacher Dashboard Backend — Health Check Route
===============================================

What:  GET /health, unauthenticated liveness check.
How:   Runs `SELECT 1` through the persistence gateway and reports uptime.

Status levels:
    OK:        database reachable
    degraded:  database unreachable (still HTTP 200 so the check itself
               doesn't look like a crash)
"""

import logging
import time

from fastapi import APIRouter, Depends

from dashboard import __version__
from dashboard.database import Database, get_database
from dashboard.schemas.common import ApiResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=ApiResponse[HealthStatus],
    response_model_exclude_none=True,
    summary="Service health check",
)
async def health_check(db: Database = Depends(get_database)) -> ApiResponse[HealthStatus]:
    database_ok = await db.ping()
    if not database_ok:
        logger.warning("Health check: database unreachable")

    return ApiResponse[HealthStatus](
        data=HealthStatus(
            status="OK" if database_ok else "degraded",
            database="connected" if database_ok else "disconnected",
            version=__version__,
            uptime_seconds=round(time.time() - _start_time, 2),
        ),
        message="Service is running",
    )
