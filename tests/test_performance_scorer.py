"""
Tests for the daily product performance scorer
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from uplift_worker.core.database.models import RecommendationAttribution
from uplift_worker.domains.learning.services import ProductPerformanceScorer
from uplift_worker.domains.learning.services.performance_scorer import ProductCounters
from uplift_worker.repository import ProductPerformanceRepository

from tests.conftest import AS_OF, SHOP, make_event, served_event


def attribution(product_id, revenue, days_ago=1, order_id="o1"):
    return RecommendationAttribution(
        shop_id=SHOP,
        order_id=order_id,
        product_id=product_id,
        order_value=Decimal("100.00"),
        recommendation_event_ids=["e1"],
        attributed_revenue=Decimal(revenue),
        conversion_time_minutes=5,
        created_at=AS_OF - timedelta(days=days_ago),
    )


def funnel_rows():
    rows = [served_event(["p1", "p2"], minutes_ago=10 + i) for i in range(12)]
    rows += [make_event("click", product_id="p1", minutes_ago=5) for _ in range(3)]
    rows.append(make_event("impression", product_id="p3"))
    rows.append(attribution("p1", "25.50"))
    # outside the 30 day window
    rows.append(attribution("p1", "99.00", days_ago=45, order_id="old"))
    return rows


async def stored_performance(session_factory):
    async with session_factory() as session:
        rows = await ProductPerformanceRepository(session).list_by_shop(SHOP)
    return {row.product_id: row for row in rows}


class TestScoreProducts:
    @pytest.mark.asyncio
    async def test_served_events_fan_out_to_impressions(self, session_factory, add):
        await add(*funnel_rows())

        result = await ProductPerformanceScorer(session_factory).score_products(
            SHOP, as_of=AS_OF
        )

        assert result.analyzed == 2
        assert result.blacklisted == 0
        assert result.boosted == 1

        rows = await stored_performance(session_factory)
        # p3 has a single impression and is not scored
        assert set(rows) == {"p1", "p2"}

        p1 = rows["p1"]
        assert p1.impressions == 12
        assert p1.clicks == 3
        assert p1.purchases == 1
        assert p1.revenue == Decimal("25.50")
        assert p1.ctr == pytest.approx(0.25)
        assert p1.cvr == pytest.approx(1 / 12)
        assert p1.is_blacklisted is False

        p2 = rows["p2"]
        assert (p2.impressions, p2.clicks, p2.purchases) == (12, 0, 0)
        assert p2.cvr == 0

    @pytest.mark.asyncio
    async def test_repeated_runs_are_idempotent(self, session_factory, add):
        await add(*funnel_rows())
        scorer = ProductPerformanceScorer(session_factory)

        first = await scorer.score_products(SHOP, as_of=AS_OF)
        before = {
            pid: (r.impressions, r.clicks, r.purchases, r.revenue, r.ctr, r.cvr, r.confidence)
            for pid, r in (await stored_performance(session_factory)).items()
        }
        second = await scorer.score_products(SHOP, as_of=AS_OF)
        after = {
            pid: (r.impressions, r.clicks, r.purchases, r.revenue, r.ctr, r.cvr, r.confidence)
            for pid, r in (await stored_performance(session_factory)).items()
        }

        assert before == after
        assert first.report.created_count == 2
        assert second.report.created_count == 0
        assert second.report.updated_count == 2

    @pytest.mark.asyncio
    async def test_no_events_writes_nothing(self, session_factory):
        result = await ProductPerformanceScorer(session_factory).score_products(
            SHOP, as_of=AS_OF
        )

        assert result.analyzed == 0
        assert await stored_performance(session_factory) == {}

    @pytest.mark.asyncio
    async def test_poor_performer_is_blacklisted(self, session_factory, add):
        await add(*[served_event(["p9"], minutes_ago=i + 1) for i in range(120)])

        result = await ProductPerformanceScorer(session_factory).score_products(
            SHOP, as_of=AS_OF
        )

        assert result.blacklisted == 1
        row = (await stored_performance(session_factory))["p9"]
        assert row.is_blacklisted is True
        assert row.blacklist_reason == "low_cvr"


class TestComputeMetrics:
    def setup_method(self):
        self.scorer = ProductPerformanceScorer()

    def test_low_cvr_takes_precedence(self):
        metrics = self.scorer.compute_metrics(
            ProductCounters(impressions=1000, clicks=10, purchases=3)
        )

        assert metrics["ctr"] == pytest.approx(0.01)
        assert metrics["cvr"] == pytest.approx(0.003)
        assert metrics["confidence"] == pytest.approx(0.4 * 0.003 + 0.4 * 0.01 + 0.2)
        assert metrics["is_blacklisted"] is True
        assert metrics["blacklist_reason"] == "low_cvr"

    def test_low_ctr_with_healthy_cvr(self):
        metrics = self.scorer.compute_metrics(
            ProductCounters(impressions=1000, clicks=10, purchases=10)
        )

        assert metrics["blacklist_reason"] == "low_ctr"

    def test_small_samples_are_never_blacklisted(self):
        metrics = self.scorer.compute_metrics(ProductCounters(impressions=99))

        assert metrics["is_blacklisted"] is False
        assert metrics["blacklist_reason"] is None
        assert metrics["confidence"] == pytest.approx(0.2 * 0.99)

    def test_revenue_rounded_to_cents(self):
        metrics = self.scorer.compute_metrics(
            ProductCounters(impressions=10, purchases=1, revenue=Decimal("10.004"))
        )

        assert metrics["revenue"] == Decimal("10.00")
        assert metrics["revenue"].as_tuple().exponent == -2
