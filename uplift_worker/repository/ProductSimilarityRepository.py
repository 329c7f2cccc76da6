"""
Product Similarity Repository

Snapshot replacement and missed-opportunity nudges for product pair scores.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import case, delete, insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import ProductSimilarity, SimilaritySource
from uplift_worker.core.database.models.base import new_id
from uplift_worker.core.exceptions import SimilaritySnapshotError
from uplift_worker.shared.constants import (
    MISSED_OPPORTUNITY_SEED_CO_PURCHASE_SCORE,
    MISSED_OPPORTUNITY_SEED_OVERALL_SCORE,
    SIMILARITY_INSERT_BATCH_SIZE,
)
from uplift_worker.shared.helpers import now_utc

logger = logging.getLogger(__name__)

UPSERT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


class ProductSimilarityRepository:
    """Repository for ProductSimilarity operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_pair(
        self, shop_id: str, product_id1: str, product_id2: str
    ) -> Optional[ProductSimilarity]:
        """Get the directional similarity row product_id1 -> product_id2."""
        query = select(ProductSimilarity).where(
            ProductSimilarity.shop_id == shop_id,
            ProductSimilarity.product_id1 == product_id1,
            ProductSimilarity.product_id2 == product_id2,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_shop(
        self, shop_id: str, source: Optional[str] = None
    ) -> List[ProductSimilarity]:
        """All similarity rows for a shop, optionally restricted to one source."""
        query = select(ProductSimilarity).where(ProductSimilarity.shop_id == shop_id)
        if source is not None:
            query = query.where(ProductSimilarity.source == source)
        query = query.order_by(
            ProductSimilarity.product_id1, ProductSimilarity.overall_score.desc()
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def replace_shop_snapshot(
        self,
        shop_id: str,
        rows: Sequence[Dict[str, Any]],
        batch_size: int = SIMILARITY_INSERT_BATCH_SIZE,
    ) -> int:
        """
        Delete every similarity row of the shop and insert the new snapshot.

        Runs inside the caller's transaction, so the delete and all insert
        batches commit or roll back together.

        Raises:
            SimilaritySnapshotError: when the delete or any batch fails
        """
        try:
            await self.session.execute(
                delete(ProductSimilarity).where(ProductSimilarity.shop_id == shop_id)
            )

            written = 0
            for start in range(0, len(rows), batch_size):
                batch = [dict(row, shop_id=shop_id) for row in rows[start : start + batch_size]]
                await self._insert_batch(batch)
                written += len(batch)
                logger.debug(
                    f"Inserted similarity batch for {shop_id}: {written}/{len(rows)}"
                )

            await self.session.flush()
            return written
        except SQLAlchemyError as e:
            raise SimilaritySnapshotError(
                f"Failed to replace similarity snapshot: {e}",
                shop_id=shop_id,
                records=len(rows),
                cause=e,
            ) from e

    async def _insert_batch(self, batch: List[Dict[str, Any]]) -> None:
        await self.session.execute(insert(ProductSimilarity), batch)

    def _dialect_insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect not in UPSERT_INSERTS:
            raise NotImplementedError(f"No ON CONFLICT upsert for dialect {dialect}")
        return UPSERT_INSERTS[dialect]

    async def record_missed_opportunity(
        self,
        shop_id: str,
        anchor_product_id: str,
        product_id: str,
        overall_increment: float,
        co_purchase_increment: float,
        computed_at: Optional[datetime] = None,
    ) -> Tuple[ProductSimilarity, bool]:
        """
        Seed or nudge the anchor -> product similarity row.

        A single INSERT .. ON CONFLICT DO UPDATE with the increments computed
        in SQL, so concurrent orders for the same pair all count.

        Returns:
            The row and whether it was created.
        """
        now = now_utc()
        computed_at = computed_at or now
        table = ProductSimilarity.__table__
        nudged_overall = table.c.overall_score + overall_increment

        stmt = self._dialect_insert()(ProductSimilarity).values(
            id=new_id(),
            shop_id=shop_id,
            product_id1=anchor_product_id,
            product_id2=product_id,
            overall_score=MISSED_OPPORTUNITY_SEED_OVERALL_SCORE,
            co_purchase_score=MISSED_OPPORTUNITY_SEED_CO_PURCHASE_SCORE,
            sample_size=1,
            category_score=0.0,
            price_score=0.0,
            co_view_score=0.0,
            source=SimilaritySource.MISSED_OPPORTUNITY.value,
            computed_at=computed_at,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.shop_id, table.c.product_id1, table.c.product_id2],
            set_={
                "overall_score": case((nudged_overall > 1.0, 1.0), else_=nudged_overall),
                "co_purchase_score": table.c.co_purchase_score + co_purchase_increment,
                "sample_size": table.c.sample_size + 1,
                "computed_at": computed_at,
                "updated_at": now,
            },
        )
        result = await self.session.scalars(
            stmt.returning(ProductSimilarity),
            execution_options={"populate_existing": True},
        )
        row = result.one()
        return row, row.sample_size == 1
