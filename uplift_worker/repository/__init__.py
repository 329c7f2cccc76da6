"""
Repositories over the learning pipeline tables
"""

from .InteractionEventRepository import InteractionEventRepository
from .ProductPerformanceRepository import ProductPerformanceRepository
from .ProductSimilarityRepository import ProductSimilarityRepository
from .UserProfileRepository import UserProfileRepository
from .RecommendationAttributionRepository import RecommendationAttributionRepository
from .ShopSettingsRepository import ShopSettingsRepository
from .JobHealthLogRepository import JobHealthLogRepository

__all__ = [
    "InteractionEventRepository",
    "ProductPerformanceRepository",
    "ProductSimilarityRepository",
    "UserProfileRepository",
    "RecommendationAttributionRepository",
    "ShopSettingsRepository",
    "JobHealthLogRepository",
]
