"""
Similarity computation job

Weekly rebuild of the co-purchase similarity snapshot.
"""

from datetime import datetime
from typing import Optional

from uplift_worker.core.database.models import JobType
from uplift_worker.core.database.session import SessionFactory
from uplift_worker.domains.learning.models import JobBatchSummary, ShopJobResult
from uplift_worker.domains.learning.services import ProductSimilarityEngine
from .base import run_for_all_shops, run_shop_job


async def run_similarity_computation(
    shop_id: str,
    triggered_by: str = "cron",
    as_of: Optional[datetime] = None,
    session_factory: Optional[SessionFactory] = None,
) -> ShopJobResult:
    """Rebuild the similarity snapshot of one shop"""

    async def runner():
        result = await ProductSimilarityEngine(session_factory).compute_similarities(
            shop_id, as_of=as_of
        )
        return {
            "stats": result.to_dict(),
            "report": result.report,
            "counters": {
                "records_processed": result.pairs_evaluated,
                "records_created": result.records_written,
            },
        }

    return await run_shop_job(
        shop_id,
        JobType.SIMILARITY_COMPUTATION.value,
        runner,
        triggered_by,
        session_factory,
    )


async def run_similarity_computation_for_all_shops(
    triggered_by: str = "cron",
    session_factory: Optional[SessionFactory] = None,
) -> JobBatchSummary:
    return await run_for_all_shops(
        JobType.SIMILARITY_COMPUTATION.value,
        lambda shop_id: run_similarity_computation(
            shop_id, triggered_by=triggered_by, session_factory=session_factory
        ),
        session_factory,
    )
