"""
Event store reader

Time-windowed reads of interaction events, converted to typed events.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from uplift_worker.core.database.session import SessionFactory, get_session_context
from uplift_worker.core.exceptions import EventParseError, EventSourceError
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import EventStream, ItemSkipped, parse_event
from uplift_worker.repository import InteractionEventRepository

logger = get_logger(__name__)

MALFORMED_METADATA = "malformed_metadata"


class EventStoreReader:
    """Reads interaction events for the learning services"""

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory

    async def query_events(
        self,
        shop_id: str,
        kinds: Optional[Iterable[str]],
        since: datetime,
        until: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = False,
        require_order_id: bool = False,
        require_session_id: bool = False,
    ) -> EventStream:
        """
        Return the typed events of a shop inside [since, until].

        Rows with metadata that does not fit their kind are skipped and
        reported on the stream, they never fail the query.

        Raises:
            EventSourceError: when the event store cannot be read
        """
        kinds = list(kinds) if kinds is not None else None
        try:
            async with get_session_context(self.session_factory) as session:
                rows = await InteractionEventRepository(session).find_events(
                    shop_id,
                    kinds,
                    since,
                    until=until,
                    limit=limit,
                    newest_first=newest_first,
                    require_order_id=require_order_id,
                    require_session_id=require_session_id,
                )
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Failed to read interaction events",
                shop_id=shop_id,
                kinds=kinds,
                error=str(e),
            )
            raise EventSourceError(
                f"Failed to read interaction events: {e}",
                shop_id=shop_id,
                kinds=kinds,
                cause=e,
            ) from e

        stream = EventStream()
        for row in rows:
            try:
                stream.events.append(parse_event(row))
            except EventParseError as e:
                logger.warning(
                    "Skipping malformed event",
                    shop_id=shop_id,
                    event_id=e.event_id,
                    kind=e.kind,
                    error=str(e.cause or e),
                )
                stream.skipped.append(
                    ItemSkipped(key=row.id, reason=MALFORMED_METADATA, error=str(e))
                )

        logger.debug(
            "Read interaction events",
            shop_id=shop_id,
            kinds=kinds,
            events=len(stream.events),
            skipped=len(stream.skipped),
        )
        return stream
