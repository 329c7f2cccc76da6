"""
Shop Settings Repository
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import ShopSettings

logger = logging.getLogger(__name__)


class ShopSettingsRepository:
    """Repository for ShopSettings operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_shop(self, shop_id: str) -> Optional[ShopSettings]:
        """
        Fetch the settings row of a shop.

        Args:
            shop_id: Shop domain

        Returns:
            The ShopSettings row, or None when the shop has never saved settings.
        """
        query = select(ShopSettings).where(ShopSettings.shop_id == shop_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_active_shop_ids(self) -> List[str]:
        """Shop domains with learning enabled, in a stable order."""
        query = (
            select(ShopSettings.shop_id)
            .where(ShopSettings.is_active == True)  # noqa: E712
            .order_by(ShopSettings.shop_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, shop_settings: ShopSettings) -> ShopSettings:
        self.session.add(shop_settings)
        await self.session.flush()
        return shop_settings
