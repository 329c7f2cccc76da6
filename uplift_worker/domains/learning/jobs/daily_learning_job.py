"""
Daily learning job

Recomputes ProductPerformance for one shop or for every active shop.
"""

from datetime import datetime
from typing import Optional

from uplift_worker.core.database.models import JobType
from uplift_worker.core.database.session import SessionFactory
from uplift_worker.domains.learning.models import JobBatchSummary, ShopJobResult
from uplift_worker.domains.learning.services import ProductPerformanceScorer
from .base import run_for_all_shops, run_shop_job


async def run_daily_learning(
    shop_id: str,
    triggered_by: str = "cron",
    as_of: Optional[datetime] = None,
    session_factory: Optional[SessionFactory] = None,
) -> ShopJobResult:
    """Score product performance for one shop"""

    async def runner():
        result = await ProductPerformanceScorer(session_factory).score_products(
            shop_id, as_of=as_of
        )
        return {
            "stats": result.to_dict(),
            "report": result.report,
            "counters": {
                "records_processed": result.analyzed,
                "records_created": result.report.created_count,
                "records_updated": result.report.updated_count,
            },
        }

    return await run_shop_job(
        shop_id, JobType.DAILY_LEARNING.value, runner, triggered_by, session_factory
    )


async def run_daily_learning_for_all_shops(
    triggered_by: str = "cron",
    session_factory: Optional[SessionFactory] = None,
) -> JobBatchSummary:
    """Score product performance for every active shop"""
    return await run_for_all_shops(
        JobType.DAILY_LEARNING.value,
        lambda shop_id: run_daily_learning(
            shop_id, triggered_by=triggered_by, session_factory=session_factory
        ),
        session_factory,
    )
