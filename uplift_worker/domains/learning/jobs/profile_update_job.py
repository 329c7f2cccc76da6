"""
Profile update job

Daily per-session behavioral profile aggregation.
"""

from datetime import datetime
from typing import Optional

from uplift_worker.core.database.models import JobType
from uplift_worker.core.database.session import SessionFactory
from uplift_worker.domains.learning.models import JobBatchSummary, ShopJobResult
from uplift_worker.domains.learning.services import BehavioralProfileBuilder
from .base import run_for_all_shops, run_shop_job


async def run_profile_update(
    shop_id: str,
    privacy_level: Optional[str] = None,
    triggered_by: str = "cron",
    as_of: Optional[datetime] = None,
    session_factory: Optional[SessionFactory] = None,
) -> ShopJobResult:
    """
    Update session profiles for one shop.

    Args:
        shop_id: Shop domain
        privacy_level: Overrides the shop's saved privacy level when given
        triggered_by: Recorded on the health log row
        as_of: End of the window, defaults to now
        session_factory: Session factory, defaults to the global one
    """

    async def runner():
        result = await BehavioralProfileBuilder(session_factory).update_profiles(
            shop_id, as_of=as_of, privacy_level=privacy_level
        )
        return {
            "stats": result.to_dict(),
            "report": result.report,
            "counters": {
                "records_processed": result.sessions,
                "records_created": result.created,
                "records_updated": result.updated,
            },
        }

    return await run_shop_job(
        shop_id, JobType.PROFILE_UPDATE.value, runner, triggered_by, session_factory
    )


async def run_profile_update_for_all_shops(
    triggered_by: str = "cron",
    session_factory: Optional[SessionFactory] = None,
) -> JobBatchSummary:
    """Each shop uses its own saved privacy level"""
    return await run_for_all_shops(
        JobType.PROFILE_UPDATE.value,
        lambda shop_id: run_profile_update(
            shop_id, triggered_by=triggered_by, session_factory=session_factory
        ),
        session_factory,
    )
