"""
Product performance scorer

Daily recompute of per-product recommendation funnel metrics over a trailing
window. Every run overwrites the stored metrics, so repeated runs over the
same events produce the same rows.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from uplift_worker.core.config import LearningSettings, settings
from uplift_worker.core.database.models import BlacklistReason, InteractionKind
from uplift_worker.core.database.session import (
    SessionFactory,
    get_session_context,
    get_transaction_context,
)
from uplift_worker.core.exceptions import EventSourceError
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import (
    PerformanceScoringResult,
    RecommendationServedEvent,
)
from uplift_worker.repository import (
    ProductPerformanceRepository,
    RecommendationAttributionRepository,
)
from uplift_worker.shared.constants import (
    CONFIDENCE_CTR_WEIGHT,
    CONFIDENCE_CVR_WEIGHT,
    CONFIDENCE_SAMPLE_WEIGHT,
    PERFORMANCE_SAMPLE_SIZE_SATURATION,
)
from uplift_worker.shared.helpers import normalize_product_id, now_utc, window_start
from .event_source import EventStoreReader

logger = get_logger(__name__)

CENTS = Decimal("0.01")


@dataclass
class ProductCounters:
    impressions: int = 0
    clicks: int = 0
    purchases: int = 0
    revenue: Decimal = Decimal("0")


class ProductPerformanceScorer:
    """Aggregates impressions, clicks and attributed purchases per product"""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        event_reader: Optional[EventStoreReader] = None,
        config: Optional[LearningSettings] = None,
    ):
        self.session_factory = session_factory
        self.event_reader = event_reader or EventStoreReader(session_factory)
        self.config = config or settings.learning

    async def score_products(
        self, shop_id: str, as_of: Optional[datetime] = None
    ) -> PerformanceScoringResult:
        """
        Recompute ProductPerformance rows for every product with enough
        impressions in the window.

        Raises:
            EventSourceError: when events or attributions cannot be read
        """
        as_of = as_of or now_utc()
        since = window_start(as_of, self.config.PERFORMANCE_WINDOW_DAYS)
        result = PerformanceScoringResult()

        counters = await self._collect_counters(shop_id, since, as_of, result)
        logger.info(f"Aggregated {len(counters)} products for {shop_id}")

        for product_id in sorted(counters):
            stats = counters[product_id]
            if stats.impressions < self.config.PERFORMANCE_MIN_IMPRESSIONS:
                logger.debug(
                    f"Skipping {product_id}: only {stats.impressions} impressions"
                )
                continue

            values = self.compute_metrics(stats)
            values["last_updated"] = as_of
            result.analyzed += 1
            if values["is_blacklisted"]:
                result.blacklisted += 1
            if values["cvr"] > self.config.PERFORMANCE_BOOST_CVR_THRESHOLD:
                result.boosted += 1

            # one transaction per product so a failure only loses that product
            try:
                async with get_transaction_context(self.session_factory) as session:
                    _, created = await ProductPerformanceRepository(session).upsert(
                        shop_id, product_id, values
                    )
                result.report.succeeded(product_id, created=created)
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to upsert product performance",
                    shop_id=shop_id,
                    product_id=product_id,
                    error=str(e),
                )
                result.report.skipped(product_id, "persistence_error", e)

        logger.info(
            "Daily learning scored products",
            shop_id=shop_id,
            analyzed=result.analyzed,
            blacklisted=result.blacklisted,
            boosted=result.boosted,
            skipped=len(result.report.skips),
        )
        return result

    async def _collect_counters(
        self,
        shop_id: str,
        since: datetime,
        until: datetime,
        result: PerformanceScoringResult,
    ) -> Dict[str, ProductCounters]:
        counters: Dict[str, ProductCounters] = defaultdict(ProductCounters)

        stream = await self.event_reader.query_events(
            shop_id,
            [
                InteractionKind.RECOMMENDATION_SERVED.value,
                InteractionKind.IMPRESSION.value,
                InteractionKind.CLICK.value,
            ],
            since,
            until=until,
        )
        result.report.extend(stream.skipped)

        for event in stream:
            if isinstance(event, RecommendationServedEvent):
                # one served widget counts as an impression for every product in it
                for product_id in event.payload.recommendation_ids:
                    counters[product_id].impressions += 1
            elif event.product_id is None:
                continue
            elif event.kind == InteractionKind.IMPRESSION.value:
                counters[event.product_id].impressions += 1
            elif event.kind == InteractionKind.CLICK.value:
                counters[event.product_id].clicks += 1

        try:
            async with get_session_context(self.session_factory) as session:
                attributions = await RecommendationAttributionRepository(
                    session
                ).list_in_window(shop_id, since, until)
        except SQLAlchemyError as e:
            raise EventSourceError(
                f"Failed to read attributions: {e}", shop_id=shop_id, cause=e
            ) from e

        for attribution in attributions:
            product_id = normalize_product_id(attribution.product_id)
            if product_id is None:
                continue
            stats = counters[product_id]
            stats.purchases += 1
            stats.revenue += Decimal(str(attribution.attributed_revenue or 0))

        return counters

    def compute_metrics(self, stats: ProductCounters) -> Dict[str, Any]:
        """CTR, CVR, confidence and blacklist decision for one product"""
        impressions = stats.impressions
        ctr = stats.clicks / impressions if impressions > 0 else 0.0
        cvr = stats.purchases / impressions if impressions > 0 else 0.0
        sample_score = min(impressions / PERFORMANCE_SAMPLE_SIZE_SATURATION, 1.0)
        confidence = (
            CONFIDENCE_CVR_WEIGHT * cvr
            + CONFIDENCE_CTR_WEIGHT * ctr
            + CONFIDENCE_SAMPLE_WEIGHT * sample_score
        )

        blacklist_reason = None
        if impressions >= self.config.PERFORMANCE_BLACKLIST_MIN_IMPRESSIONS:
            # low CVR wins over low CTR
            if cvr < self.config.PERFORMANCE_LOW_CVR_THRESHOLD:
                blacklist_reason = BlacklistReason.LOW_CVR.value
            elif ctr < self.config.PERFORMANCE_LOW_CTR_THRESHOLD:
                blacklist_reason = BlacklistReason.LOW_CTR.value

        return {
            "impressions": impressions,
            "clicks": stats.clicks,
            "purchases": stats.purchases,
            "revenue": stats.revenue.quantize(CENTS),
            "ctr": ctr,
            "cvr": cvr,
            "confidence": confidence,
            "is_blacklisted": blacklist_reason is not None,
            "blacklist_reason": blacklist_reason,
        }
