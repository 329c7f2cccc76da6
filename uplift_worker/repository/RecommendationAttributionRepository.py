"""
Recommendation Attribution Repository

Repository for recommendation_attributions table operations.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import RecommendationAttribution

logger = logging.getLogger(__name__)


class RecommendationAttributionRepository:
    """Repository for RecommendationAttribution operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self, shop_id: str, order_id: str, product_id: str
    ) -> Optional[RecommendationAttribution]:
        """Get the attribution of one order line."""
        query = select(RecommendationAttribution).where(
            RecommendationAttribution.shop_id == shop_id,
            RecommendationAttribution.order_id == order_id,
            RecommendationAttribution.product_id == product_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_order(self, shop_id: str, order_id: str) -> List[RecommendationAttribution]:
        query = select(RecommendationAttribution).where(
            RecommendationAttribution.shop_id == shop_id,
            RecommendationAttribution.order_id == order_id,
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_in_window(
        self, shop_id: str, since: datetime, until: Optional[datetime] = None
    ) -> List[RecommendationAttribution]:
        """Attributions created inside [since, until]."""
        query = select(RecommendationAttribution).where(
            RecommendationAttribution.shop_id == shop_id,
            RecommendationAttribution.created_at >= since,
        )
        if until is not None:
            query = query.where(RecommendationAttribution.created_at <= until)
        query = query.order_by(RecommendationAttribution.created_at)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, attribution: RecommendationAttribution) -> RecommendationAttribution:
        """Create a new attribution. Raises IntegrityError on a duplicate order line."""
        self.session.add(attribution)
        await self.session.flush()
        return attribution
