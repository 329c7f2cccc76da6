"""
Shopify webhook helpers
"""

from .shopify_webhook_verifier import ShopifyWebhookVerifier

__all__ = ["ShopifyWebhookVerifier"]
