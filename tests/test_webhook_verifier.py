"""
Tests for Shopify webhook signature verification
"""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from uplift_worker.webhooks import ShopifyWebhookVerifier

PAYLOAD = b'{"id": 1}'


def signature_for(payload, secret):
    return base64.b64encode(hmac.new(secret.encode(), payload, hashlib.sha256).digest()).decode()


class TestShopifyWebhookVerifier:
    @pytest.mark.asyncio
    async def test_valid_signature(self):
        verifier = ShopifyWebhookVerifier(secret="topsecret")

        result = await verifier.verify_webhook_signature(
            PAYLOAD, signature_for(PAYLOAD, "topsecret"), shop_domain="a.myshopify.com"
        )

        assert result["verified"] is True
        assert result["shop_domain"] == "a.myshopify.com"

    @pytest.mark.asyncio
    async def test_tampered_payload(self):
        verifier = ShopifyWebhookVerifier(secret="topsecret")

        result = await verifier.verify_webhook_signature(
            b'{"id": 2}', signature_for(PAYLOAD, "topsecret")
        )

        assert result["verified"] is False
        assert result["error"] == "Signature verification failed"

    @pytest.mark.asyncio
    async def test_missing_signature(self):
        result = await ShopifyWebhookVerifier(secret="topsecret").verify_webhook_signature(
            PAYLOAD, None
        )

        assert result == {"verified": False, "error": "Missing signature", "shop_domain": None}

    @pytest.mark.asyncio
    async def test_disabled_without_secret(self):
        verifier = ShopifyWebhookVerifier(secret="")

        assert verifier.enabled is False
        assert (await verifier.verify_webhook_signature(PAYLOAD, None))["verified"] is True

    @pytest.mark.asyncio
    async def test_stale_timestamp_rejected(self):
        verifier = ShopifyWebhookVerifier(secret="topsecret", max_timestamp_age_seconds=300)
        stale = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()

        result = await verifier.verify_webhook_signature(
            PAYLOAD, signature_for(PAYLOAD, "topsecret"), timestamp=stale
        )

        assert result["verified"] is False
        assert result["error"] == "Invalid timestamp"

    @pytest.mark.asyncio
    async def test_fresh_timestamp_accepted(self):
        verifier = ShopifyWebhookVerifier(secret="topsecret", max_timestamp_age_seconds=300)
        fresh = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

        result = await verifier.verify_webhook_signature(
            PAYLOAD, signature_for(PAYLOAD, "topsecret"), timestamp=fresh
        )

        assert result["verified"] is True

    def test_malformed_timestamp(self):
        result = ShopifyWebhookVerifier(secret="x")._verify_timestamp("yesterday")

        assert result["valid"] is False
        assert "yesterday" in result["error"]

    def test_offset_timestamp_compared_in_utc(self):
        local = datetime.now(timezone(timedelta(hours=2))).isoformat()

        result = ShopifyWebhookVerifier(secret="x")._verify_timestamp(local)

        assert result["valid"] is True
        assert result["time_diff_seconds"] < 60

    def test_naive_timestamp_is_utc(self):
        naive = datetime.now(timezone.utc).replace(tzinfo=None).isoformat()

        result = ShopifyWebhookVerifier(secret="x")._verify_timestamp(naive)

        assert result["valid"] is True
