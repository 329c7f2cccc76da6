"""
Tests for the co-purchase similarity engine
"""

import pytest
from sqlalchemy.exc import OperationalError

from uplift_worker.core.config import LearningSettings
from uplift_worker.core.database.models import ProductSimilarity
from uplift_worker.core.exceptions import SimilaritySnapshotError
from uplift_worker.domains.learning.services import ProductSimilarityEngine
from uplift_worker.repository import ProductSimilarityRepository

from tests.conftest import AS_OF, SHOP, purchase_event


def orders_to_events(orders, minutes_ago=60):
    events = []
    for order_id, product_ids in orders.items():
        for product_id in product_ids:
            events.append(purchase_event(order_id, product_id, minutes_ago=minutes_ago))
    return events


BASKETS = {
    "o1": ["A", "B"],
    "o2": ["A", "B"],
    "o3": ["A", "C"],
    "o4": ["B", "C"],
}


async def stored_rows(session_factory, shop_id=SHOP):
    async with session_factory() as session:
        return await ProductSimilarityRepository(session).list_by_shop(shop_id)


def stale_row(product_id1="X", product_id2="Y"):
    return ProductSimilarity(
        shop_id=SHOP,
        product_id1=product_id1,
        product_id2=product_id2,
        co_purchase_score=0.9,
        overall_score=0.9,
        sample_size=9,
    )


class TestProductSimilarityEngine:
    @pytest.mark.asyncio
    async def test_scores_and_symmetry(self, session_factory, add):
        await add(*orders_to_events(BASKETS))

        result = await ProductSimilarityEngine(session_factory).compute_similarities(
            SHOP, as_of=AS_OF
        )

        assert result.pairs_evaluated == 3
        assert result.records_written == 2
        assert result.purchase_events == 8
        assert result.order_count == 4
        assert result.product_count == 3

        rows = {(r.product_id1, r.product_id2): r for r in await stored_rows(session_factory)}
        assert set(rows) == {("A", "B"), ("B", "A")}

        forward, backward = rows[("A", "B")], rows[("B", "A")]
        # jaccard 2 / (3 + 3 - 2), frequency 2 / 3
        assert forward.overall_score == pytest.approx(0.6 * 0.5 + 0.4 * (2 / 3))
        assert forward.co_purchase_score == pytest.approx(2 / 3)
        assert forward.sample_size == 2
        assert forward.source == "co_purchase"
        for field in ("overall_score", "co_purchase_score", "sample_size"):
            assert getattr(forward, field) == getattr(backward, field)

    @pytest.mark.asyncio
    async def test_weak_pairs_are_not_stored(self, session_factory, add):
        # X and Y are bought together twice but each appears in 40 orders
        baskets = {f"x{i}": ["X"] for i in range(38)}
        baskets.update({f"y{i}": ["Y"] for i in range(38)})
        baskets.update({"xy1": ["X", "Y"], "xy2": ["X", "Y"]})
        await add(*orders_to_events(baskets))

        result = await ProductSimilarityEngine(session_factory).compute_similarities(
            SHOP, as_of=AS_OF
        )

        assert result.pairs_evaluated == 1
        assert result.records_written == 0
        assert await stored_rows(session_factory) == []

    @pytest.mark.asyncio
    async def test_stored_rows_respect_thresholds(self, session_factory, add):
        baskets = dict(BASKETS)
        baskets.update({"o5": ["C", "D"], "o6": ["C", "D"], "o7": ["D"]})
        await add(*orders_to_events(baskets))

        await ProductSimilarityEngine(session_factory).compute_similarities(SHOP, as_of=AS_OF)

        rows = await stored_rows(session_factory)
        assert rows
        for row in rows:
            assert row.overall_score > 0.1
            assert row.sample_size >= 2

    @pytest.mark.asyncio
    async def test_events_outside_window_are_ignored(self, session_factory, add):
        await add(*orders_to_events(BASKETS, minutes_ago=60 * 24 * 91))

        result = await ProductSimilarityEngine(session_factory).compute_similarities(
            SHOP, as_of=AS_OF
        )

        assert result.purchase_events == 0

    @pytest.mark.asyncio
    async def test_no_purchases_leaves_snapshot_untouched(self, session_factory, add):
        await add(stale_row())

        result = await ProductSimilarityEngine(session_factory).compute_similarities(
            SHOP, as_of=AS_OF
        )

        assert result.records_written == 0
        assert [(r.product_id1, r.product_id2) for r in await stored_rows(session_factory)] == [
            ("X", "Y")
        ]

    @pytest.mark.asyncio
    async def test_snapshot_replaces_previous_rows(self, session_factory, add):
        await add(stale_row(), *orders_to_events(BASKETS))

        await ProductSimilarityEngine(session_factory).compute_similarities(SHOP, as_of=AS_OF)

        pairs = {(r.product_id1, r.product_id2) for r in await stored_rows(session_factory)}
        assert pairs == {("A", "B"), ("B", "A")}

    @pytest.mark.asyncio
    async def test_failed_batch_keeps_previous_snapshot(self, session_factory, add, monkeypatch):
        await add(stale_row(), stale_row("Y", "X"), *orders_to_events(BASKETS))

        original_insert = ProductSimilarityRepository._insert_batch
        calls = []

        async def failing_insert(self, batch):
            calls.append(batch)
            if len(calls) > 1:
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))
            await original_insert(self, batch)

        monkeypatch.setattr(ProductSimilarityRepository, "_insert_batch", failing_insert)
        engine = ProductSimilarityEngine(
            session_factory, config=LearningSettings(SIMILARITY_INSERT_BATCH_SIZE=1)
        )

        with pytest.raises(SimilaritySnapshotError):
            await engine.compute_similarities(SHOP, as_of=AS_OF)

        assert len(calls) == 2
        rows = await stored_rows(session_factory)
        assert {(r.product_id1, r.product_id2) for r in rows} == {("X", "Y"), ("Y", "X")}
        assert all(r.overall_score == 0.9 for r in rows)

    @pytest.mark.asyncio
    async def test_other_shops_are_not_touched(self, session_factory, add):
        other = stale_row()
        other.shop_id = "other.myshopify.com"
        await add(other, *orders_to_events(BASKETS))

        await ProductSimilarityEngine(session_factory).compute_similarities(SHOP, as_of=AS_OF)

        assert len(await stored_rows(session_factory, "other.myshopify.com")) == 1
