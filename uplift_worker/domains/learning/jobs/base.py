"""
Shared plumbing for the learning jobs

A job run for one shop never raises: batch-fatal errors are logged, written
to the health log and returned as a failed ShopJobResult, so a run over every
shop always reaches the last shop.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from uplift_worker.core.database.models import JobStatus
from uplift_worker.core.database.session import SessionFactory, get_session_context
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import BatchReport, JobBatchSummary, ShopJobResult
from uplift_worker.domains.learning.services import start_health_log
from uplift_worker.repository import ShopSettingsRepository

logger = get_logger(__name__)

# (stats, report, health counters)
JobOutput = Dict[str, Any]
ShopRunner = Callable[[], Awaitable[JobOutput]]


def job_status(report: BatchReport) -> str:
    """Per-item skips make a run partial; they never fail it"""
    return JobStatus.PARTIAL.value if report.skips else JobStatus.SUCCESS.value


async def run_shop_job(
    shop_id: str,
    job_type: str,
    runner: ShopRunner,
    triggered_by: str = "cron",
    session_factory: Optional[SessionFactory] = None,
) -> ShopJobResult:
    """
    Run one job for one shop, recording the run in the health log.

    `runner` returns a dict with "stats", "report" and "counters" (the
    record counters written to the health log).
    """
    health_log = await start_health_log(shop_id, job_type, triggered_by, session_factory)
    logger.info(f"Starting {job_type} for shop {shop_id}")

    try:
        output = await runner()
    except Exception as e:
        logger.error(
            f"{job_type} failed for shop {shop_id}: {e}",
            shop_id=shop_id,
            job_type=job_type,
            error_type=type(e).__name__,
        )
        await health_log.failure(e)
        return ShopJobResult(
            shop_id=shop_id,
            job_type=job_type,
            success=False,
            status=JobStatus.FAILED.value,
            message=str(e),
        )

    report: BatchReport = output["report"]
    status = job_status(report)
    await health_log.finish(
        status,
        error_count=len(report.skips),
        metadata={"stats": output["stats"], "skip_reasons": report.skip_reasons()},
        **output["counters"],
    )
    logger.info(f"Finished {job_type} for shop {shop_id}", status=status, **output["stats"])
    return ShopJobResult(
        shop_id=shop_id,
        job_type=job_type,
        success=True,
        status=status,
        stats=output["stats"],
    )


async def list_active_shops(session_factory: Optional[SessionFactory] = None) -> List[str]:
    async with get_session_context(session_factory) as session:
        return await ShopSettingsRepository(session).list_active_shop_ids()


async def run_for_all_shops(
    job_type: str,
    run_for_shop: Callable[[str], Awaitable[ShopJobResult]],
    session_factory: Optional[SessionFactory] = None,
) -> JobBatchSummary:
    """Run a single-shop job for every active shop, one shop at a time"""
    shop_ids = await list_active_shops(session_factory)
    logger.info(f"Running {job_type} for {len(shop_ids)} shops")

    summary = JobBatchSummary(job_type=job_type)
    for shop_id in shop_ids:
        summary.results.append(await run_for_shop(shop_id))

    logger.info(
        f"{job_type} complete: {summary.successful_shops} succeeded, "
        f"{summary.failed_shops} failed"
    )
    return summary
