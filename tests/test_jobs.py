"""
Tests for job orchestration and the job health log
"""

from datetime import timedelta

import pytest

from uplift_worker.domains.learning.jobs import (
    run_daily_learning_for_all_shops,
    run_order_attribution,
    run_profile_update,
    run_similarity_computation,
)
from uplift_worker.domains.learning.models import OrderPayload
from uplift_worker.domains.learning.services import (
    JobHealthService,
    ProductPerformanceScorer,
)
from uplift_worker.domains.learning.services.health_logger import (
    health_score,
    system_status,
)
from uplift_worker.repository import JobHealthLogRepository
from uplift_worker.shared.helpers import now_utc

from tests.conftest import AS_OF, SHOP, make_event, purchase_event, served_event

BROKEN_SHOP = "alpha.myshopify.com"


async def health_logs(session_factory):
    async with session_factory() as session:
        return await JobHealthLogRepository(session).list_since(
            now_utc() - timedelta(days=1)
        )


@pytest.fixture
def broken_scorer(monkeypatch):
    original = ProductPerformanceScorer.score_products

    async def score_products(self, shop_id, as_of=None):
        if shop_id == BROKEN_SHOP:
            raise RuntimeError("events table unavailable")
        return await original(self, shop_id, as_of=as_of)

    monkeypatch.setattr(ProductPerformanceScorer, "score_products", score_products)


class TestAllShopRuns:
    @pytest.mark.asyncio
    async def test_one_failing_shop_does_not_stop_the_others(
        self, session_factory, add, shop_settings, broken_scorer
    ):
        await add(
            shop_settings(BROKEN_SHOP),
            shop_settings(SHOP),
            shop_settings("paused.myshopify.com", is_active=False),
        )

        summary = await run_daily_learning_for_all_shops(session_factory=session_factory)

        assert summary.total_shops == 2
        assert summary.successful_shops == 1
        assert summary.failed_shops == 1
        results = {r.shop_id: r for r in summary.results}
        assert results[BROKEN_SHOP].status == "failed"
        assert "events table unavailable" in results[BROKEN_SHOP].message
        assert results[SHOP].success is True
        assert results[SHOP].status == "success"

        logs = {log.shop_id: log for log in await health_logs(session_factory)}
        assert set(logs) == {BROKEN_SHOP, SHOP}
        assert logs[BROKEN_SHOP].status == "failed"
        assert logs[BROKEN_SHOP].error_count == 1
        assert logs[BROKEN_SHOP].error_message == "events table unavailable"
        assert logs[SHOP].status == "success"
        assert logs[SHOP].job_type == "daily_learning"
        assert logs[SHOP].triggered_by == "cron"
        assert logs[SHOP].completed_at is not None

    @pytest.mark.asyncio
    async def test_no_active_shops(self, session_factory):
        summary = await run_daily_learning_for_all_shops(session_factory=session_factory)

        assert summary.total_shops == 0
        assert summary.to_dict()["results"] == []


class TestSingleShopRuns:
    @pytest.mark.asyncio
    async def test_malformed_event_makes_run_partial(self, session_factory, add):
        await add(
            make_event("impression", product_id="p1", session_id="s1"),
            make_event("impression", product_id="p2", session_id="s1", metadata="{broken"),
        )

        result = await run_profile_update(
            SHOP,
            privacy_level="basic",
            triggered_by="manual",
            as_of=AS_OF,
            session_factory=session_factory,
        )

        assert result.success is True
        assert result.status == "partial"
        log = (await health_logs(session_factory))[0]
        assert log.status == "partial"
        assert log.error_count == 1
        assert log.triggered_by == "manual"
        assert log.records_created == 1

    @pytest.mark.asyncio
    async def test_similarity_job_records_counters(self, session_factory, add):
        await add(
            purchase_event("o1", "A"),
            purchase_event("o1", "B"),
            purchase_event("o2", "A"),
            purchase_event("o2", "B"),
        )

        result = await run_similarity_computation(
            SHOP, as_of=AS_OF, session_factory=session_factory
        )

        assert result.status == "success"
        assert result.stats["records_written"] == 2
        log = (await health_logs(session_factory))[0]
        assert log.job_type == "similarity_computation"
        assert log.records_created == 2

    @pytest.mark.asyncio
    async def test_order_attribution_job(self, session_factory, add):
        await add(served_event(["p1"], minutes_ago=5))
        order = OrderPayload.model_validate(
            {
                "id": 555,
                "created_at": AS_OF.isoformat(),
                "line_items": [{"product_id": "p1", "price": "12.00"}],
            }
        )

        result = await run_order_attribution(SHOP, order, session_factory=session_factory)

        assert result.success is True
        assert result.stats["order_id"] == "555"
        assert result.stats["attributed"] == ["p1"]
        log = (await health_logs(session_factory))[0]
        assert log.job_type == "attribution"
        assert log.triggered_by == "webhook"


class TestHealthSummary:
    def test_health_score(self):
        assert health_score(0, 0, 0) == 100
        assert health_score(10, 0, 0) == 100
        assert health_score(2, 1, 1) == 70
        assert health_score(1, 1, 20) == 0

    def test_system_status(self):
        assert system_status(0, 0) == "healthy"
        assert system_status(10, 2) == "healthy"
        assert system_status(10, 3) == "degraded"
        assert system_status(10, 6) == "critical"

    @pytest.mark.asyncio
    async def test_summary_after_mixed_runs(
        self, session_factory, add, shop_settings, broken_scorer
    ):
        await add(shop_settings(BROKEN_SHOP), shop_settings(SHOP))
        await run_daily_learning_for_all_shops(session_factory=session_factory)

        summary = await JobHealthService(session_factory).get_health_summary(days=7)

        assert summary["health"] == {
            "score": 70,
            "status": "degraded",
            "last_checked": summary["health"]["last_checked"],
        }
        assert summary["summary"]["total_runs"] == 2
        assert summary["summary"]["successful"] == 1
        assert summary["summary"]["failed"] == 1
        assert summary["summary"]["success_rate"] == 50
        assert summary["by_job_type"][0]["job_type"] == "daily_learning"
        assert summary["by_job_type"][0]["runs"] == 2
        assert len(summary["recent_logs"]) == 2

        shop_summary = await JobHealthService(session_factory).get_health_summary(SHOP)
        assert shop_summary["summary"]["total_runs"] == 1
        assert shop_summary["health"]["status"] == "healthy"
