"""
Behavioral profile builder

Groups the trailing window of events by storefront session and upserts one
UserProfile per session. What gets linked to a profile depends on the shop's
privacy level:

    basic     anonymous id derived from the session id, no customer id
    standard  session aggregates only
    advanced  customer id adopted from the session's events
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from uplift_worker.core.config import LearningSettings, settings
from uplift_worker.core.database.models import InteractionKind, PrivacyLevel, UserProfile
from uplift_worker.core.database.session import (
    SessionFactory,
    get_session_context,
    run_in_transaction,
)
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import ProfileUpdateResult
from uplift_worker.repository import ShopSettingsRepository, UserProfileRepository
from uplift_worker.shared.constants import (
    ANONYMOUS_ID_LENGTH,
    ANONYMOUS_ID_PREFIX,
    PROFILE_WRITE_ATTEMPTS,
)
from uplift_worker.shared.helpers import ensure_utc, now_utc, window_start
from .event_source import EventStoreReader

logger = get_logger(__name__)

VIEW_KINDS = {InteractionKind.IMPRESSION.value, InteractionKind.CLICK.value}


@dataclass
class SessionBehavior:
    session_id: str
    last_activity: datetime
    customer_id: Optional[str] = None
    viewed_products: Set[str] = field(default_factory=set)
    carted_products: Set[str] = field(default_factory=set)
    purchased_products: Set[str] = field(default_factory=set)
    price_points: List[float] = field(default_factory=list)


def anonymous_id_for(session_id: str) -> str:
    return f"{ANONYMOUS_ID_PREFIX}{session_id[:ANONYMOUS_ID_LENGTH]}"


def price_range_preference(price_points: List[float]) -> Optional[Dict[str, float]]:
    """min/max/avg/median of purchase prices; median is the lower middle element"""
    if not price_points:
        return None
    prices = sorted(price_points)
    return {
        "min": prices[0],
        "max": prices[-1],
        "avg": sum(prices) / len(prices),
        "median": prices[(len(prices) - 1) // 2],
    }


def _union(existing: Optional[List[str]], new: Set[str]) -> List[str]:
    merged = list(existing or [])
    for product_id in sorted(new):
        if product_id not in merged:
            merged.append(product_id)
    return merged


class BehavioralProfileBuilder:
    """Daily per-session profile aggregation"""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        event_reader: Optional[EventStoreReader] = None,
        config: Optional[LearningSettings] = None,
    ):
        self.session_factory = session_factory
        self.event_reader = event_reader or EventStoreReader(session_factory)
        self.config = config or settings.learning

    async def resolve_privacy_level(self, shop_id: str) -> str:
        """Privacy level saved for the shop, or the configured default"""
        async with get_session_context(self.session_factory) as session:
            shop_settings = await ShopSettingsRepository(session).get_by_shop(shop_id)
        if shop_settings and shop_settings.ml_privacy_level:
            return PrivacyLevel(shop_settings.ml_privacy_level).value
        return PrivacyLevel(self.config.DEFAULT_PRIVACY_LEVEL).value

    async def update_profiles(
        self,
        shop_id: str,
        as_of: Optional[datetime] = None,
        privacy_level: Optional[str] = None,
    ) -> ProfileUpdateResult:
        """
        Upsert one profile per session seen in the window.

        Args:
            shop_id: Shop domain
            as_of: End of the window, defaults to now
            privacy_level: basic, standard or advanced; read from the shop's
                settings when omitted

        Raises:
            EventSourceError: when events cannot be read
            ValueError: when privacy_level is not a known level
        """
        as_of = as_of or now_utc()
        if privacy_level is None:
            privacy_level = await self.resolve_privacy_level(shop_id)
        privacy_level = PrivacyLevel(privacy_level).value

        since = window_start(as_of, self.config.PROFILE_WINDOW_DAYS)
        stream = await self.event_reader.query_events(
            shop_id, None, since, until=as_of, require_session_id=True
        )
        result = ProfileUpdateResult()
        result.report.extend(stream.skipped)

        if not stream:
            logger.info(f"No session events for {shop_id}, profiles left as is")
            return result

        sessions = self._group_sessions(stream.events, privacy_level)
        result.sessions = len(sessions)
        logger.info(f"Found {len(sessions)} sessions for {shop_id}")

        for session_id, behavior in sessions.items():
            try:
                created = await run_in_transaction(
                    lambda session: self._upsert_profile(
                        UserProfileRepository(session), shop_id, behavior, privacy_level
                    ),
                    self.session_factory,
                    attempts=PROFILE_WRITE_ATTEMPTS,
                    # a concurrent run created the session first or bumped its version
                    retry_on=(StaleDataError, IntegrityError),
                )
                result.report.succeeded(session_id, created=created)
                if created:
                    result.created += 1
                else:
                    result.updated += 1
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to upsert user profile",
                    shop_id=shop_id,
                    session_id=session_id,
                    error=str(e),
                )
                result.report.skipped(session_id, "persistence_error", e)

        logger.info(
            "Profile update finished",
            shop_id=shop_id,
            privacy_level=privacy_level,
            created=result.created,
            updated=result.updated,
            skipped=len(result.report.skips),
        )
        return result

    def _group_sessions(self, events, privacy_level: str) -> Dict[str, SessionBehavior]:
        sessions: Dict[str, SessionBehavior] = {}
        for event in events:
            if not event.session_id:
                continue

            behavior = sessions.get(event.session_id)
            if behavior is None:
                behavior = SessionBehavior(
                    session_id=event.session_id, last_activity=event.created_at
                )
                sessions[event.session_id] = behavior

            if event.created_at > behavior.last_activity:
                behavior.last_activity = event.created_at
            if privacy_level == PrivacyLevel.ADVANCED.value and event.customer_id:
                behavior.customer_id = event.customer_id

            if event.product_id is None:
                continue
            if event.kind in VIEW_KINDS:
                behavior.viewed_products.add(event.product_id)
            elif event.kind == InteractionKind.ADD_TO_CART.value:
                behavior.carted_products.add(event.product_id)
            elif event.kind == InteractionKind.PURCHASE.value:
                behavior.purchased_products.add(event.product_id)
                if event.price:
                    behavior.price_points.append(event.price)

        return sessions

    async def _upsert_profile(
        self,
        repository: UserProfileRepository,
        shop_id: str,
        behavior: SessionBehavior,
        privacy_level: str,
    ) -> bool:
        customer_id = (
            behavior.customer_id if privacy_level == PrivacyLevel.ADVANCED.value else None
        )
        preference = price_range_preference(behavior.price_points)
        existing = await repository.get_by_session(shop_id, behavior.session_id)

        if existing is None:
            await repository.create(
                UserProfile(
                    shop_id=shop_id,
                    session_id=behavior.session_id,
                    customer_id=customer_id,
                    anonymous_id=(
                        anonymous_id_for(behavior.session_id)
                        if privacy_level == PrivacyLevel.BASIC.value
                        else None
                    ),
                    privacy_level=privacy_level,
                    viewed_products=sorted(behavior.viewed_products),
                    carted_products=sorted(behavior.carted_products),
                    purchased_products=sorted(behavior.purchased_products),
                    price_range_preference=preference,
                    last_activity=behavior.last_activity,
                    data_retention_days=self.config.DATA_RETENTION_DAYS,
                )
            )
            return True

        # anonymous_id and data_retention_days are fixed at creation
        values: Dict[str, Any] = {
            "customer_id": customer_id,
            "viewed_products": _union(existing.viewed_products, behavior.viewed_products),
            "carted_products": _union(existing.carted_products, behavior.carted_products),
            "purchased_products": _union(
                existing.purchased_products, behavior.purchased_products
            ),
            "privacy_level": privacy_level,
            "last_activity": max(
                behavior.last_activity,
                ensure_utc(existing.last_activity) or behavior.last_activity,
            ),
        }
        if preference is not None:
            values["price_range_preference"] = preference
        await repository.update(existing, values)
        return False
