"""
Learning domain models
"""

from .events import (
    Event,
    ImpressionEvent,
    ClickEvent,
    AddToCartEvent,
    PurchaseEvent,
    RecommendationServedEvent,
    RecommendationServedPayload,
    parse_event,
)
from .order import OrderPayload, OrderCustomer, LineItem
from .results import (
    ItemSucceeded,
    ItemSkipped,
    ItemResult,
    SkippedItem,
    BatchReport,
    EventStream,
    SimilarityComputationResult,
    PerformanceScoringResult,
    ProfileUpdateResult,
    AttributionOutcome,
    ShopJobResult,
    JobBatchSummary,
)

__all__ = [
    "Event",
    "ImpressionEvent",
    "ClickEvent",
    "AddToCartEvent",
    "PurchaseEvent",
    "RecommendationServedEvent",
    "RecommendationServedPayload",
    "parse_event",
    "OrderPayload",
    "OrderCustomer",
    "LineItem",
    "ItemSucceeded",
    "ItemSkipped",
    "ItemResult",
    "SkippedItem",
    "BatchReport",
    "EventStream",
    "SimilarityComputationResult",
    "PerformanceScoringResult",
    "ProfileUpdateResult",
    "AttributionOutcome",
    "ShopJobResult",
    "JobBatchSummary",
]
