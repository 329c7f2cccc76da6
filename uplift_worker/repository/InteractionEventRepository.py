"""
Interaction Event Repository

Read-only access to the storefront interaction event store.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uplift_worker.core.database.models import InteractionEvent
from uplift_worker.shared.constants import stored_kind_names

logger = logging.getLogger(__name__)


class InteractionEventRepository:
    """Repository for InteractionEvent queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_events(
        self,
        shop_id: str,
        kinds: Optional[Iterable[str]],
        since: datetime,
        until: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = False,
        require_order_id: bool = False,
        require_session_id: bool = False,
    ) -> List[InteractionEvent]:
        """
        Fetch events for a shop inside [since, until].

        Args:
            shop_id: Shop domain
            kinds: Kind names to include, or None for every kind
            since: Inclusive lower bound on created_at
            until: Inclusive upper bound on created_at
            limit: Optional cap on rows returned
            newest_first: Order by created_at descending instead of ascending
            require_order_id: Only rows carrying an order id
            require_session_id: Only rows carrying a session id
        """
        query = select(InteractionEvent).where(
            InteractionEvent.shop_id == shop_id,
            InteractionEvent.created_at >= since,
        )

        if kinds is not None:
            names = []
            for kind in kinds:
                names.extend(stored_kind_names(kind))
            query = query.where(InteractionEvent.kind.in_(names))
        if until is not None:
            query = query.where(InteractionEvent.created_at <= until)
        if require_order_id:
            query = query.where(InteractionEvent.order_id.is_not(None))
        if require_session_id:
            query = query.where(InteractionEvent.session_id.is_not(None))

        if newest_first:
            query = query.order_by(
                InteractionEvent.created_at.desc(), InteractionEvent.id.desc()
            )
        else:
            query = query.order_by(InteractionEvent.created_at.asc(), InteractionEvent.id)

        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, event: InteractionEvent) -> InteractionEvent:
        """Store a new interaction event."""
        self.session.add(event)
        await self.session.flush()
        return event
