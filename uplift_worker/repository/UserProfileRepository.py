"""
User Profile Repository

Repository for ml_user_profiles operations.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import UserProfile

logger = logging.getLogger(__name__)


class UserProfileRepository:
    """Repository for UserProfile operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_session(self, shop_id: str, session_id: str) -> Optional[UserProfile]:
        """Get the profile of a storefront session."""
        query = select(UserProfile).where(
            UserProfile.shop_id == shop_id, UserProfile.session_id == session_id
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_customer(self, shop_id: str, customer_id: str) -> List[UserProfile]:
        """Every session profile linked to a customer."""
        query = (
            select(UserProfile)
            .where(UserProfile.shop_id == shop_id, UserProfile.customer_id == customer_id)
            .order_by(UserProfile.last_activity.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_shop(self, shop_id: str) -> List[UserProfile]:
        query = select(UserProfile).where(UserProfile.shop_id == shop_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, profile: UserProfile) -> UserProfile:
        """Create a new profile."""
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def update(self, profile: UserProfile, values: Dict[str, Any]) -> UserProfile:
        """
        Apply field updates to an existing profile.

        Raises:
            StaleDataError: when another transaction updated the profile after
                it was loaded into this session
        """
        for key, value in values.items():
            setattr(profile, key, value)
        await self.session.flush()
        return profile
