"""
Helpers module for the Cart Uplift learning worker
"""

from .datetime_utils import (
    now_utc,
    parse_iso_timestamp,
    ensure_utc,
    window_start,
    minutes_between,
)
from .id_utils import (
    normalize_product_id,
    product_ids_match,
    contains_product_id,
)


__all__ = [
    "now_utc",
    "parse_iso_timestamp",
    "ensure_utc",
    "window_start",
    "minutes_between",
    "normalize_product_id",
    "product_ids_match",
    "contains_product_id",
]
