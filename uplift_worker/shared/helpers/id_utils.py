"""
Product id helpers

Shopify ids arrive as ints from webhooks, as strings from the storefront
widget and occasionally as GraphQL gids, so comparisons go through here.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

GID_PREFIX = "gid://shopify/Product/"


def normalize_product_id(value: Any) -> Optional[str]:
    """Return the canonical string form of a product id, or None when empty"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if text.startswith(GID_PREFIX):
        text = text[len(GID_PREFIX) :]
    return text or None


def _as_number(value: str) -> Optional[Decimal]:
    try:
        number = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def product_ids_match(left: Any, right: Any) -> bool:
    """Compare two ids as strings first, then numerically ("123" == 123 == 123.0)"""
    left_id = normalize_product_id(left)
    right_id = normalize_product_id(right)
    if left_id is None or right_id is None:
        return False
    if left_id == right_id:
        return True

    left_number = _as_number(left_id)
    right_number = _as_number(right_id)
    return (
        left_number is not None
        and right_number is not None
        and left_number == right_number
    )


def contains_product_id(candidates: Iterable[Any], product_id: Any) -> bool:
    """True when any candidate id matches product_id"""
    return any(product_ids_match(candidate, product_id) for candidate in candidates)
