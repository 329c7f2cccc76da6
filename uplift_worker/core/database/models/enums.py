"""
Enum models for SQLAlchemy

Defines all enums stored by the learning pipeline.
"""

from enum import Enum


class InteractionKind(str, Enum):
    """Kinds of storefront interaction events"""

    IMPRESSION = "impression"
    CLICK = "click"
    ADD_TO_CART = "add_to_cart"
    PURCHASE = "purchase"
    RECOMMENDATION_SERVED = "recommendation_served"


class PrivacyLevel(str, Enum):
    """Shop-level privacy setting for behavioral profiles"""

    BASIC = "basic"  # anonymous id only
    STANDARD = "standard"  # session aggregates, no customer linkage
    ADVANCED = "advanced"  # customer id linked when present


class SimilaritySource(str, Enum):
    """Where a similarity row came from"""

    CO_PURCHASE = "co_purchase"
    MISSED_OPPORTUNITY = "missed_opportunity"


class BlacklistReason(str, Enum):
    """Why a product stopped being recommended"""

    LOW_CVR = "low_cvr"
    LOW_CTR = "low_ctr"


class JobType(str, Enum):
    """Learning job types recorded in the health log"""

    DAILY_LEARNING = "daily_learning"
    SIMILARITY_COMPUTATION = "similarity_computation"
    PROFILE_UPDATE = "profile_update"
    ATTRIBUTION = "attribution"


class JobStatus(str, Enum):
    """Status of a learning job run"""

    RUNNING = "running"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
