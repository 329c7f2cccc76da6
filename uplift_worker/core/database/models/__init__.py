"""
SQLAlchemy models for the behavioral learning pipeline
"""

from .base import Base, BaseModel
from .enums import (
    InteractionKind,
    PrivacyLevel,
    SimilaritySource,
    BlacklistReason,
    JobType,
    JobStatus,
)
from .interaction_event import InteractionEvent
from .product_performance import ProductPerformance
from .product_similarity import ProductSimilarity
from .user_profile import UserProfile
from .recommendation_attribution import RecommendationAttribution
from .shop_settings import ShopSettings
from .job_health_log import JobHealthLog

__all__ = [
    "Base",
    "BaseModel",
    "InteractionKind",
    "PrivacyLevel",
    "SimilaritySource",
    "BlacklistReason",
    "JobType",
    "JobStatus",
    "InteractionEvent",
    "ProductPerformance",
    "ProductSimilarity",
    "UserProfile",
    "RecommendationAttribution",
    "ShopSettings",
    "JobHealthLog",
]
