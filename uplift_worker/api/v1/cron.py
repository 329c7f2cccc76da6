"""
Cron trigger API

Scheduled triggers for the learning jobs. Every endpoint runs the job for all
active shops, or for a single shop when `?shop=` is given.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from uplift_worker.api.dependencies import verify_cron_secret
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.jobs import (
    run_daily_learning,
    run_daily_learning_for_all_shops,
    run_profile_update,
    run_profile_update_for_all_shops,
    run_similarity_computation,
    run_similarity_computation_for_all_shops,
)

logger = get_logger(__name__)
router = APIRouter(
    prefix="/api/v1/cron",
    tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)

SHOP_QUERY = Query(default=None, description="Run for this shop domain only")


class CronJobResponse(BaseModel):
    success: bool
    message: str
    job_type: str
    results: Dict[str, Any]


def _single_shop_response(result) -> CronJobResponse:
    return CronJobResponse(
        success=result.success,
        message=result.message or f"{result.job_type} {result.status} for {result.shop_id}",
        job_type=result.job_type,
        results=result.to_dict(),
    )


def _all_shops_response(summary) -> CronJobResponse:
    return CronJobResponse(
        success=summary.failed_shops == 0,
        message=(
            f"{summary.job_type} completed: {summary.successful_shops}/"
            f"{summary.total_shops} shops succeeded"
        ),
        job_type=summary.job_type,
        results=summary.to_dict(),
    )


def _error_response(job_type: str, error: Exception) -> JSONResponse:
    logger.error(f"Cron job {job_type} failed: {error}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "job_type": job_type, "error": str(error)},
    )


@router.post("/daily-learning", response_model=CronJobResponse)
async def trigger_daily_learning(shop: Optional[str] = SHOP_QUERY):
    """Recompute product performance"""
    logger.info("Cron job triggered: daily-learning", shop=shop)
    try:
        if shop:
            return _single_shop_response(await run_daily_learning(shop, triggered_by="cron"))
        return _all_shops_response(await run_daily_learning_for_all_shops(triggered_by="cron"))
    except Exception as e:
        return _error_response("daily_learning", e)


@router.post("/compute-similarities", response_model=CronJobResponse)
async def trigger_similarity_computation(shop: Optional[str] = SHOP_QUERY):
    """Rebuild product similarity snapshots"""
    logger.info("Cron job triggered: compute-similarities", shop=shop)
    try:
        if shop:
            return _single_shop_response(
                await run_similarity_computation(shop, triggered_by="cron")
            )
        return _all_shops_response(
            await run_similarity_computation_for_all_shops(triggered_by="cron")
        )
    except Exception as e:
        return _error_response("similarity_computation", e)


@router.post("/update-profiles", response_model=CronJobResponse)
async def trigger_profile_update(shop: Optional[str] = SHOP_QUERY):
    """Rebuild session behavioral profiles"""
    logger.info("Cron job triggered: update-profiles", shop=shop)
    try:
        if shop:
            return _single_shop_response(await run_profile_update(shop, triggered_by="cron"))
        return _all_shops_response(await run_profile_update_for_all_shops(triggered_by="cron"))
    except Exception as e:
        return _error_response("profile_update", e)
