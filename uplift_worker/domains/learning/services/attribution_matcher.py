"""
Attribution matcher

Runs once per created order. Purchased products that appeared in a recently
served recommendation get an attribution record; when nothing matches, the
purchase is fed back as a missed-opportunity similarity signal instead.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from uplift_worker.core.config import LearningSettings, settings
from uplift_worker.core.database.models import InteractionKind, RecommendationAttribution
from uplift_worker.core.database.session import (
    SessionFactory,
    get_transaction_context,
    run_in_transaction,
)
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import (
    AttributionOutcome,
    OrderPayload,
    RecommendationServedEvent,
)
from uplift_worker.repository import (
    ProductSimilarityRepository,
    RecommendationAttributionRepository,
    UserProfileRepository,
)
from uplift_worker.shared.constants import PROFILE_WRITE_ATTEMPTS
from uplift_worker.shared.helpers import (
    contains_product_id,
    minutes_between,
    now_utc,
    product_ids_match,
)
from .event_source import EventStoreReader

logger = get_logger(__name__)

ALREADY_ATTRIBUTED = "already_attributed"
NO_ANCHOR = "no_anchor"
SELF_PAIR = "self_pair"
PERSISTENCE_ERROR = "persistence_error"
PROFILE_MERGE_FAILED = "profile_merge_failed"


class AttributionMatcher:
    """Links order lines to the recommendation events that surfaced them"""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        event_reader: Optional[EventStoreReader] = None,
        config: Optional[LearningSettings] = None,
    ):
        self.session_factory = session_factory
        self.event_reader = event_reader or EventStoreReader(session_factory)
        self.config = config or settings.learning

    async def attribute_order(self, shop_id: str, order: OrderPayload) -> AttributionOutcome:
        """
        Attribute an order to recently served recommendations.

        Args:
            shop_id: Shop domain
            order: Parsed orders/create payload

        Returns:
            AttributionOutcome listing attributed products, whether a missed
            opportunity was recorded and every per-record skip

        Raises:
            EventSourceError: when recommendation events cannot be read
        """
        outcome = AttributionOutcome()
        purchased = order.purchased_product_ids()
        if not purchased:
            logger.info(f"Order {order.id} has no products, skipping attribution")
            return outcome

        order_time = order.created_at or now_utc()
        candidates = await self._candidate_events(shop_id, order_time, outcome)
        logger.info(
            "Matching order against served recommendations",
            shop_id=shop_id,
            order_id=order.id,
            purchased=len(purchased),
            candidates=len(candidates),
        )

        matched: List[str] = []
        newest_match: Optional[RecommendationServedEvent] = None
        # candidates are newest first
        for event in candidates:
            hits = [
                product_id
                for product_id in purchased
                if contains_product_id(event.payload.recommendation_ids, product_id)
            ]
            if not hits:
                continue
            outcome.recommendation_event_ids.append(event.id)
            if newest_match is None:
                newest_match = event
            for product_id in hits:
                if product_id not in matched:
                    matched.append(product_id)

        if matched:
            await self._create_attributions(
                shop_id, order, matched, newest_match.created_at, order_time, outcome
            )
        elif candidates:
            outcome.missed = True
            await self._record_missed_opportunity(
                shop_id, purchased, candidates[0], order_time, outcome
            )

        if order.customer_id:
            await self._merge_profile_purchases(shop_id, order.customer_id, purchased, outcome)

        logger.info(
            "Order attribution finished",
            shop_id=shop_id,
            order_id=order.id,
            attributed=len(outcome.attributed),
            missed=outcome.missed,
            skipped=len(outcome.report.skips),
        )
        return outcome

    async def _candidate_events(
        self, shop_id: str, order_time: datetime, outcome: AttributionOutcome
    ) -> List[RecommendationServedEvent]:
        stream = await self.event_reader.query_events(
            shop_id,
            [InteractionKind.RECOMMENDATION_SERVED.value],
            order_time - timedelta(days=self.config.ATTRIBUTION_WINDOW_DAYS),
            limit=self.config.ATTRIBUTION_CANDIDATE_LIMIT,
            newest_first=True,
        )
        outcome.report.extend(stream.skipped)
        return [e for e in stream if isinstance(e, RecommendationServedEvent)]

    async def _create_attributions(
        self,
        shop_id: str,
        order: OrderPayload,
        matched: List[str],
        recommended_at: datetime,
        order_time: datetime,
        outcome: AttributionOutcome,
    ) -> None:
        conversion_minutes = minutes_between(recommended_at, order_time)

        for product_id in matched:
            try:
                async with get_transaction_context(self.session_factory) as session:
                    repository = RecommendationAttributionRepository(session)
                    if await repository.get(shop_id, order.id, product_id) is not None:
                        outcome.report.skipped(product_id, ALREADY_ATTRIBUTED)
                        continue
                    await repository.create(
                        RecommendationAttribution(
                            shop_id=shop_id,
                            order_id=order.id,
                            order_number=order.display_number,
                            product_id=product_id,
                            order_value=order.total_price,
                            customer_id=order.customer_id,
                            recommendation_event_ids=list(outcome.recommendation_event_ids),
                            attributed_revenue=order.revenue_for(product_id),
                            conversion_time_minutes=conversion_minutes,
                        )
                    )
                outcome.attributed.append(product_id)
                outcome.report.succeeded(product_id, created=True)
            except IntegrityError:
                # a concurrent delivery of the same order got there first
                outcome.report.skipped(product_id, ALREADY_ATTRIBUTED)
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to create attribution",
                    shop_id=shop_id,
                    order_id=order.id,
                    product_id=product_id,
                    error=str(e),
                )
                outcome.report.skipped(product_id, PERSISTENCE_ERROR, e)

    async def _record_missed_opportunity(
        self,
        shop_id: str,
        purchased: List[str],
        last_event: RecommendationServedEvent,
        computed_at: datetime,
        outcome: AttributionOutcome,
    ) -> None:
        # only the first anchor of the newest event is paired with the purchase
        anchor = last_event.anchor
        for product_id in purchased:
            if anchor is None:
                outcome.report.skipped(product_id, NO_ANCHOR)
                continue
            if product_ids_match(anchor, product_id):
                outcome.report.skipped(product_id, SELF_PAIR)
                continue

            key = f"{anchor}->{product_id}"
            try:
                async with get_transaction_context(self.session_factory) as session:
                    _, created = await ProductSimilarityRepository(
                        session
                    ).record_missed_opportunity(
                        shop_id,
                        anchor,
                        product_id,
                        overall_increment=self.config.MISSED_OPPORTUNITY_OVERALL_INCREMENT,
                        co_purchase_increment=self.config.MISSED_OPPORTUNITY_CO_PURCHASE_INCREMENT,
                        computed_at=computed_at,
                    )
                outcome.report.succeeded(key, created=created)
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to record missed opportunity",
                    shop_id=shop_id,
                    pair=key,
                    error=str(e),
                )
                outcome.report.skipped(key, PERSISTENCE_ERROR, e)

    async def _merge_profile_purchases(
        self,
        shop_id: str,
        customer_id: str,
        purchased: List[str],
        outcome: AttributionOutcome,
    ) -> None:
        key = f"customer:{customer_id}"

        async def merge(session) -> int:
            repository = UserProfileRepository(session)
            profiles = await repository.list_by_customer(shop_id, customer_id)
            for profile in profiles:
                merged = list(profile.purchased_products or [])
                merged.extend(p for p in purchased if p not in merged)
                await repository.update(
                    profile,
                    {"purchased_products": merged, "last_activity": now_utc()},
                )
            return len(profiles)

        try:
            # a concurrent profile write bumps the version and the merge re-reads
            merged_profiles = await run_in_transaction(
                merge, self.session_factory, attempts=PROFILE_WRITE_ATTEMPTS
            )
            if merged_profiles:
                outcome.report.succeeded(key)
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to merge purchases into profiles",
                shop_id=shop_id,
                customer_id=customer_id,
                error=str(e),
            )
            outcome.report.skipped(key, PROFILE_MERGE_FAILED, e)
