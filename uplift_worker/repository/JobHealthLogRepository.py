"""
Job Health Log Repository

Repository for ml_job_health_logs operations.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import JobHealthLog

logger = logging.getLogger(__name__)


class JobHealthLogRepository:
    """Repository for JobHealthLog operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, log_id: str) -> Optional[JobHealthLog]:
        query = select(JobHealthLog).where(JobHealthLog.id == log_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, log: JobHealthLog) -> JobHealthLog:
        """Create a new health log row."""
        self.session.add(log)
        await self.session.flush()
        return log

    async def list_since(
        self, since: datetime, shop_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[JobHealthLog]:
        """
        Health log rows started at or after `since`, newest first.

        Args:
            since: Lower bound on started_at
            shop_id: Restrict to one shop, or None for every shop
            limit: Optional cap on rows returned
        """
        query = select(JobHealthLog).where(JobHealthLog.started_at >= since)
        if shop_id is not None:
            query = query.where(JobHealthLog.shop_id == shop_id)
        query = query.order_by(JobHealthLog.started_at.desc())
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
