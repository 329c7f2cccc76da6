"""
Product similarity engine

Builds the co-purchase graph of a shop from completed-order purchase events
and replaces the shop's similarity snapshot with the pairs that clear the
score and sample thresholds.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Any, Dict, List, Optional, Set

from uplift_worker.core.config import LearningSettings, settings
from uplift_worker.core.database.models import InteractionKind, SimilaritySource
from uplift_worker.core.database.session import SessionFactory, get_transaction_context
from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.models import (
    PurchaseEvent,
    SimilarityComputationResult,
)
from uplift_worker.repository import ProductSimilarityRepository
from uplift_worker.shared.helpers import now_utc, window_start
from .event_source import EventStoreReader

logger = get_logger(__name__)


@dataclass
class _ProductStats:
    orders: Set[str] = field(default_factory=set)
    occurrences: int = 0


@dataclass
class _PairStats:
    co_purchase_count: int = 0
    shared_orders: Set[str] = field(default_factory=set)


class ProductSimilarityEngine:
    """Weekly co-purchase similarity computation"""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        event_reader: Optional[EventStoreReader] = None,
        config: Optional[LearningSettings] = None,
    ):
        self.session_factory = session_factory
        self.event_reader = event_reader or EventStoreReader(session_factory)
        self.config = config or settings.learning

    async def compute_similarities(
        self, shop_id: str, as_of: Optional[datetime] = None
    ) -> SimilarityComputationResult:
        """
        Recompute and replace the similarity snapshot of a shop.

        Args:
            shop_id: Shop domain
            as_of: End of the window, defaults to now

        Returns:
            SimilarityComputationResult with pair and record counts

        Raises:
            EventSourceError: when purchase events cannot be read
            SimilaritySnapshotError: when the snapshot swap is rolled back
        """
        as_of = as_of or now_utc()
        since = window_start(as_of, self.config.SIMILARITY_WINDOW_DAYS)

        stream = await self.event_reader.query_events(
            shop_id,
            [InteractionKind.PURCHASE.value],
            since,
            until=as_of,
            require_order_id=True,
        )
        result = SimilarityComputationResult(purchase_events=len(stream))
        result.report.extend(stream.skipped)

        if not stream:
            logger.info(f"No purchase events for {shop_id}, similarity snapshot left as is")
            return result

        orders, products = self._group_by_order(stream.events)
        pairs = self._count_pairs(orders)
        result.order_count = len(orders)
        result.product_count = len(products)
        result.pairs_evaluated = len(pairs)

        records = self._build_records(pairs, products, computed_at=as_of)

        async with get_transaction_context(self.session_factory) as session:
            result.records_written = await ProductSimilarityRepository(
                session
            ).replace_shop_snapshot(
                shop_id, records, batch_size=self.config.SIMILARITY_INSERT_BATCH_SIZE
            )

        logger.info(
            "Similarity snapshot replaced",
            shop_id=shop_id,
            pairs_evaluated=result.pairs_evaluated,
            records_written=result.records_written,
            orders=result.order_count,
            products=result.product_count,
        )
        return result

    def _group_by_order(self, events: List[PurchaseEvent]):
        orders: Dict[str, Set[str]] = defaultdict(set)
        products: Dict[str, _ProductStats] = defaultdict(_ProductStats)

        for event in events:
            if not event.order_id or not event.product_id:
                continue
            orders[event.order_id].add(event.product_id)
            stats = products[event.product_id]
            stats.occurrences += 1
            stats.orders.add(event.order_id)

        return orders, products

    def _count_pairs(self, orders: Dict[str, Set[str]]) -> Dict[tuple, _PairStats]:
        pairs: Dict[tuple, _PairStats] = defaultdict(_PairStats)
        for order_id, product_ids in orders.items():
            # sorted so each unordered pair has one key
            for pair in combinations(sorted(product_ids), 2):
                stats = pairs[pair]
                stats.co_purchase_count += 1
                stats.shared_orders.add(order_id)
        return pairs

    def score_pair(
        self, pair: _PairStats, first: _ProductStats, second: _ProductStats
    ) -> Dict[str, float]:
        """Jaccard overlap, co-purchase frequency and their weighted blend"""
        shared = len(pair.shared_orders)
        union = len(first.orders) + len(second.orders) - shared
        jaccard = shared / union if union > 0 else 0.0

        max_occurrences = max(first.occurrences, second.occurrences)
        frequency = pair.co_purchase_count / max_occurrences if max_occurrences > 0 else 0.0

        overall = (
            self.config.SIMILARITY_JACCARD_WEIGHT * jaccard
            + self.config.SIMILARITY_FREQUENCY_WEIGHT * frequency
        )
        return {"jaccard": jaccard, "frequency": frequency, "overall": overall}

    def _build_records(
        self,
        pairs: Dict[tuple, _PairStats],
        products: Dict[str, _ProductStats],
        computed_at: datetime,
    ) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        for (first_id, second_id), pair in pairs.items():
            scores = self.score_pair(pair, products[first_id], products[second_id])
            if scores["overall"] <= self.config.SIMILARITY_MIN_SCORE:
                continue
            if pair.co_purchase_count < self.config.SIMILARITY_MIN_CO_PURCHASES:
                continue

            for product_id1, product_id2 in ((first_id, second_id), (second_id, first_id)):
                records.append(
                    {
                        "product_id1": product_id1,
                        "product_id2": product_id2,
                        "co_purchase_score": scores["frequency"],
                        "overall_score": scores["overall"],
                        "sample_size": pair.co_purchase_count,
                        "category_score": 0.0,
                        "price_score": 0.0,
                        "co_view_score": 0.0,
                        "source": SimilaritySource.CO_PURCHASE.value,
                        "computed_at": computed_at,
                    }
                )
        return records
