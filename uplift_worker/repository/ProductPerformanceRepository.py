"""
Product Performance Repository

Snapshot upserts for per-product recommendation performance.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import ProductPerformance

logger = logging.getLogger(__name__)


class ProductPerformanceRepository:
    """Repository for ProductPerformance operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, shop_id: str, product_id: str) -> Optional[ProductPerformance]:
        """Get the performance row for a product."""
        query = select(ProductPerformance).where(
            ProductPerformance.shop_id == shop_id,
            ProductPerformance.product_id == product_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_shop(self, shop_id: str) -> List[ProductPerformance]:
        """All performance rows for a shop, best confidence first."""
        query = (
            select(ProductPerformance)
            .where(ProductPerformance.shop_id == shop_id)
            .order_by(ProductPerformance.confidence.desc(), ProductPerformance.product_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def upsert(
        self, shop_id: str, product_id: str, values: Dict[str, Any]
    ) -> Tuple[ProductPerformance, bool]:
        """
        Overwrite the metrics for a product, creating the row if needed.

        Returns:
            The row and whether it was created.
        """
        row = await self.get(shop_id, product_id)
        created = row is None
        if created:
            row = ProductPerformance(shop_id=shop_id, product_id=product_id)
            self.session.add(row)

        for key, value in values.items():
            setattr(row, key, value)

        await self.session.flush()
        return row, created
