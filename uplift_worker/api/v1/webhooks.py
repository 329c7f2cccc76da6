"""
Shopify webhook API

orders/create drives purchase attribution. Once a payload is accepted the
endpoint answers 200 even if attribution fails, so Shopify does not keep
redelivering an order that was already handled.
"""

import json
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError

from uplift_worker.core.logging import get_logger
from uplift_worker.domains.learning.jobs import run_order_attribution
from uplift_worker.domains.learning.models import OrderPayload
from uplift_worker.shared.helpers import now_utc
from uplift_worker.webhooks import ShopifyWebhookVerifier

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])

ORDERS_CREATE_TOPIC = "orders/create"


def normalize_topic(topic: Optional[str]) -> str:
    """Map ORDERS_CREATE and orders/create onto the same topic name"""
    return (topic or "").strip().lower().replace("_", "/")


@router.post("/orders-create")
async def orders_create_webhook(
    request: Request,
    x_shopify_topic: Optional[str] = Header(default=None),
    x_shopify_shop_domain: Optional[str] = Header(default=None),
    x_shopify_hmac_sha256: Optional[str] = Header(default=None),
):
    """Attribute a newly created order to served recommendations"""
    started_at = now_utc()
    body = await request.body()

    verification = await ShopifyWebhookVerifier().verify_webhook_signature(
        body, x_shopify_hmac_sha256, shop_domain=x_shopify_shop_domain
    )
    if not verification["verified"]:
        raise HTTPException(status_code=401, detail=verification["error"])

    if normalize_topic(x_shopify_topic) != ORDERS_CREATE_TOPIC:
        logger.error(f"Invalid webhook topic: {x_shopify_topic}")
        raise HTTPException(status_code=400, detail="Invalid topic")
    if not x_shopify_shop_domain:
        raise HTTPException(status_code=400, detail="Missing shop domain")

    try:
        order = OrderPayload.model_validate(json.loads(body))
    except (ValueError, PydanticValidationError) as e:
        logger.error(f"Invalid orders/create payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid order payload")

    logger.info(
        "Order webhook received",
        shop=x_shopify_shop_domain,
        order_id=order.id,
        order_number=order.display_number,
        line_items=len(order.line_items),
    )

    try:
        result = await run_order_attribution(x_shopify_shop_domain, order)
        attribution = result.to_dict()
    except Exception as e:
        logger.error(
            f"Attribution failed for order {order.id}: {e}",
            exc_info=True,
            shop=x_shopify_shop_domain,
        )
        attribution = {"success": False, "message": str(e)}

    duration_ms = int((now_utc() - started_at).total_seconds() * 1000)
    logger.info(f"Order webhook complete in {duration_ms}ms", order_id=order.id)
    return {"success": True, "order_id": order.id, "attribution": attribution}
