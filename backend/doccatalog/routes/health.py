"""
Document Catalog — Health Check Route
======================================

What:  GET /health for container probes and load balancers.
How:   Runs `SELECT 1` through the application's engine. The service is
       "healthy" only if the database answers; otherwise it reports
       "unhealthy" with HTTP 503.
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from doccatalog import __version__
from doccatalog.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
