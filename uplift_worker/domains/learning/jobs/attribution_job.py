"""
Order attribution job

Wraps the attribution matcher for the orders/create webhook so every order
shows up in the job health log like the batch jobs do.
"""

from typing import Optional

from uplift_worker.core.database.models import JobType
from uplift_worker.core.database.session import SessionFactory
from uplift_worker.domains.learning.models import OrderPayload, ShopJobResult
from uplift_worker.domains.learning.services import AttributionMatcher
from .base import run_shop_job


async def run_order_attribution(
    shop_id: str,
    order: OrderPayload,
    triggered_by: str = "webhook",
    session_factory: Optional[SessionFactory] = None,
) -> ShopJobResult:
    """Attribute one order; failures are reported, never raised"""

    async def runner():
        outcome = await AttributionMatcher(session_factory).attribute_order(shop_id, order)
        stats = outcome.to_dict()
        stats["order_id"] = order.id
        return {
            "stats": stats,
            "report": outcome.report,
            "counters": {
                "records_processed": len(order.purchased_product_ids()),
                "records_created": len(outcome.attributed),
            },
        }

    return await run_shop_job(
        shop_id, JobType.ATTRIBUTION.value, runner, triggered_by, session_factory
    )
