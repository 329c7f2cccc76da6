"""
Tests for the cron, webhook and health routes
"""

import base64
import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from uplift_worker.api.v1 import cron as cron_module
from uplift_worker.api.v1 import health as health_module
from uplift_worker.api.v1 import webhooks as webhooks_module
from uplift_worker.core.config import settings
from uplift_worker.domains.learning.models import JobBatchSummary, ShopJobResult
from uplift_worker.main import app

from tests.conftest import SHOP

ORDER = {
    "id": 820982911946154508,
    "order_number": 1234,
    "total_price": "59.00",
    "customer": {"id": 115310627314723954},
    "line_items": [{"product_id": 632910392, "price": "59.00", "quantity": 1}],
    "created_at": "2024-06-01T12:00:00-04:00",
}


@pytest.fixture
def client():
    # no context manager: the lifespan would connect to the real database
    return TestClient(app)


@pytest.fixture
def secrets(monkeypatch):
    monkeypatch.setattr(settings.security, "CRON_SECRET", "")
    monkeypatch.setattr(settings.security, "SHOPIFY_API_SECRET", "")
    return settings.security


def shop_result(job_type="daily_learning", success=True, status="success"):
    return ShopJobResult(
        shop_id=SHOP,
        job_type=job_type,
        success=success,
        status=status,
        stats={"analyzed": 3},
    )


def sign(body: bytes, secret: str) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


def post_order(client, body=None, topic="orders/create", shop=SHOP, signature=None):
    body = json.dumps(ORDER).encode() if body is None else body
    headers = {"Content-Type": "application/json", "X-Shopify-Topic": topic}
    if shop:
        headers["X-Shopify-Shop-Domain"] = shop
    if signature:
        headers["X-Shopify-Hmac-Sha256"] = signature
    return client.post("/api/v1/webhooks/orders-create", content=body, headers=headers)


class TestCronRoutes:
    def test_requires_secret_when_configured(self, client, secrets, monkeypatch):
        monkeypatch.setattr(secrets, "CRON_SECRET", "s3cret")
        job = AsyncMock()
        monkeypatch.setattr(cron_module, "run_daily_learning_for_all_shops", job)

        assert client.post("/api/v1/cron/daily-learning").status_code == 401
        response = client.post(
            "/api/v1/cron/daily-learning", headers={"Authorization": "Bearer wrong"}
        )
        assert response.status_code == 401
        job.assert_not_awaited()

    def test_single_shop(self, client, secrets, monkeypatch):
        monkeypatch.setattr(secrets, "CRON_SECRET", "s3cret")
        job = AsyncMock(return_value=shop_result())
        monkeypatch.setattr(cron_module, "run_daily_learning", job)

        response = client.post(
            "/api/v1/cron/daily-learning",
            params={"shop": SHOP},
            headers={"Authorization": "Bearer s3cret"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["job_type"] == "daily_learning"
        assert body["results"]["shop_id"] == SHOP
        job.assert_awaited_once_with(SHOP, triggered_by="cron")

    def test_all_shops_with_a_failure(self, client, secrets, monkeypatch):
        summary = JobBatchSummary(
            job_type="similarity_computation",
            results=[
                shop_result("similarity_computation"),
                ShopJobResult(
                    shop_id="other.myshopify.com",
                    job_type="similarity_computation",
                    success=False,
                    status="failed",
                    message="boom",
                ),
            ],
        )
        monkeypatch.setattr(
            cron_module,
            "run_similarity_computation_for_all_shops",
            AsyncMock(return_value=summary),
        )

        response = client.post("/api/v1/cron/compute-similarities")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "similarity_computation completed: 1/2 shops succeeded"
        assert body["results"]["failed_shops"] == 1

    def test_unexpected_error_returns_500(self, client, secrets, monkeypatch):
        monkeypatch.setattr(
            cron_module,
            "run_profile_update_for_all_shops",
            AsyncMock(side_effect=RuntimeError("database is gone")),
        )

        response = client.post("/api/v1/cron/update-profiles")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "job_type": "profile_update",
            "error": "database is gone",
        }


class TestOrdersCreateWebhook:
    def test_attributes_order(self, client, secrets, monkeypatch):
        job = AsyncMock(return_value=shop_result("attribution"))
        monkeypatch.setattr(webhooks_module, "run_order_attribution", job)

        response = post_order(client)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["order_id"] == "820982911946154508"
        assert body["attribution"]["job_type"] == "attribution"
        shop_id, order = job.await_args.args
        assert shop_id == SHOP
        assert order.purchased_product_ids() == ["632910392"]
        assert order.customer_id == "115310627314723954"

    def test_legacy_topic_name_accepted(self, client, secrets, monkeypatch):
        monkeypatch.setattr(
            webhooks_module,
            "run_order_attribution",
            AsyncMock(return_value=shop_result("attribution")),
        )

        assert post_order(client, topic="ORDERS_CREATE").status_code == 200

    def test_wrong_topic(self, client, secrets, monkeypatch):
        job = AsyncMock()
        monkeypatch.setattr(webhooks_module, "run_order_attribution", job)

        response = post_order(client, topic="orders/updated")

        assert response.status_code == 400
        job.assert_not_awaited()

    def test_missing_shop_domain(self, client, secrets):
        assert post_order(client, shop=None).status_code == 400

    def test_invalid_payload(self, client, secrets):
        assert post_order(client, body=b"not json").status_code == 400
        assert post_order(client, body=b'{"line_items": []}').status_code == 400

    def test_attribution_failure_still_acknowledged(self, client, secrets, monkeypatch):
        monkeypatch.setattr(
            webhooks_module,
            "run_order_attribution",
            AsyncMock(side_effect=RuntimeError("attribution exploded")),
        )

        response = post_order(client)

        assert response.status_code == 200
        assert response.json()["attribution"] == {
            "success": False,
            "message": "attribution exploded",
        }

    def test_signature_checked_when_secret_configured(self, client, secrets, monkeypatch):
        monkeypatch.setattr(secrets, "SHOPIFY_API_SECRET", "hush")
        monkeypatch.setattr(
            webhooks_module,
            "run_order_attribution",
            AsyncMock(return_value=shop_result("attribution")),
        )
        body = json.dumps(ORDER).encode()

        assert post_order(client, body=body).status_code == 401
        assert post_order(client, body=body, signature=sign(body, "nope")).status_code == 401
        assert post_order(client, body=body, signature=sign(body, "hush")).status_code == 200


class TestHealthRoutes:
    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_system_health(self, client, secrets, monkeypatch):
        monkeypatch.setattr(secrets, "CRON_SECRET", "s3cret")
        summary = {"health": {"score": 100, "status": "healthy"}, "summary": {}}
        get_summary = AsyncMock(return_value=summary)
        monkeypatch.setattr(health_module.JobHealthService, "get_health_summary", get_summary)

        response = client.get(
            "/api/v1/health/system",
            params={"shop": SHOP, "days": 3, "limit": 5},
            headers={"Authorization": "Bearer s3cret"},
        )

        assert response.status_code == 200
        assert response.json() == summary
        assert "no-cache" in response.headers["cache-control"]
        get_summary.assert_awaited_once_with(SHOP, days=3, recent_limit=5)

    def test_system_health_rejects_bad_range(self, client, secrets):
        assert client.get("/api/v1/health/system", params={"days": 0}).status_code == 422

    def test_system_health_requires_secret(self, client, secrets, monkeypatch):
        monkeypatch.setattr(secrets, "CRON_SECRET", "s3cret")

        assert client.get("/api/v1/health/system").status_code == 401
