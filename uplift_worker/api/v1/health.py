"""
Health check endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from uplift_worker.api.dependencies import verify_cron_secret
from uplift_worker.core.config import settings
from uplift_worker.core.database import check_engine_health
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.services import JobHealthService
from uplift_worker.shared.helpers import now_utc

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model"""

    status: str
    service: str
    version: str
    timestamp: str
    checks: dict


@router.get("/", response_model=HealthResponse)
async def health_check():
    """Basic health check with database connectivity"""
    database_healthy = await check_engine_health()
    return HealthResponse(
        status="healthy" if database_healthy else "unhealthy",
        service=settings.PROJECT_NAME,
        version=settings.VERSION,
        timestamp=now_utc().isoformat(),
        checks={"database": "healthy" if database_healthy else "unhealthy"},
    )


@router.get("/system", dependencies=[Depends(verify_cron_secret)])
async def system_health(
    shop: Optional[str] = Query(default=None, description="Restrict to one shop"),
    days: int = Query(default=7, ge=1, le=90),
    limit: int = Query(default=50, ge=1, le=100),
):
    """Learning job health: score, status, per-job-type stats and recent runs"""
    try:
        summary = await JobHealthService().get_health_summary(
            shop, days=days, recent_limit=limit
        )
    except Exception as e:
        logger.error(f"Failed to fetch system health: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch system health", "message": str(e)},
        )

    return JSONResponse(
        content=summary,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
