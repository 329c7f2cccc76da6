"""
Defaults for the behavioral learning pipeline

These are the values the settings fall back to when no environment
override is present.
"""

# =============================================================================
# ROLLING WINDOWS (days)
# =============================================================================

SIMILARITY_WINDOW_DAYS = 90
PERFORMANCE_WINDOW_DAYS = 30
PROFILE_WINDOW_DAYS = 30
ATTRIBUTION_WINDOW_DAYS = 7

# =============================================================================
# PRODUCT SIMILARITY
# =============================================================================

SIMILARITY_JACCARD_WEIGHT = 0.6
SIMILARITY_FREQUENCY_WEIGHT = 0.4
SIMILARITY_MIN_SCORE = 0.1  # strictly greater than
SIMILARITY_MIN_CO_PURCHASES = 2
SIMILARITY_INSERT_BATCH_SIZE = 1000

# =============================================================================
# PRODUCT PERFORMANCE
# =============================================================================

PERFORMANCE_MIN_IMPRESSIONS = 10
PERFORMANCE_BLACKLIST_MIN_IMPRESSIONS = 100
PERFORMANCE_SAMPLE_SIZE_SATURATION = 100
PERFORMANCE_LOW_CVR_THRESHOLD = 0.005
PERFORMANCE_LOW_CTR_THRESHOLD = 0.03
PERFORMANCE_BOOST_CVR_THRESHOLD = 0.02
CONFIDENCE_CVR_WEIGHT = 0.4
CONFIDENCE_CTR_WEIGHT = 0.4
CONFIDENCE_SAMPLE_WEIGHT = 0.2

# =============================================================================
# ATTRIBUTION
# =============================================================================

ATTRIBUTION_CANDIDATE_LIMIT = 100
MISSED_OPPORTUNITY_SEED_OVERALL_SCORE = 0.5
MISSED_OPPORTUNITY_SEED_CO_PURCHASE_SCORE = 1.0
MISSED_OPPORTUNITY_OVERALL_INCREMENT = 0.05
MISSED_OPPORTUNITY_CO_PURCHASE_INCREMENT = 0.1

# =============================================================================
# PROFILES
# =============================================================================

DEFAULT_PRIVACY_LEVEL = "basic"
DEFAULT_DATA_RETENTION_DAYS = 30
ANONYMOUS_ID_PREFIX = "anon_"
ANONYMOUS_ID_LENGTH = 8
PROFILE_WRITE_ATTEMPTS = 3

__all__ = [
    "SIMILARITY_WINDOW_DAYS",
    "PERFORMANCE_WINDOW_DAYS",
    "PROFILE_WINDOW_DAYS",
    "ATTRIBUTION_WINDOW_DAYS",
    "SIMILARITY_JACCARD_WEIGHT",
    "SIMILARITY_FREQUENCY_WEIGHT",
    "SIMILARITY_MIN_SCORE",
    "SIMILARITY_MIN_CO_PURCHASES",
    "SIMILARITY_INSERT_BATCH_SIZE",
    "PERFORMANCE_MIN_IMPRESSIONS",
    "PERFORMANCE_BLACKLIST_MIN_IMPRESSIONS",
    "PERFORMANCE_SAMPLE_SIZE_SATURATION",
    "PERFORMANCE_LOW_CVR_THRESHOLD",
    "PERFORMANCE_LOW_CTR_THRESHOLD",
    "PERFORMANCE_BOOST_CVR_THRESHOLD",
    "CONFIDENCE_CVR_WEIGHT",
    "CONFIDENCE_CTR_WEIGHT",
    "CONFIDENCE_SAMPLE_WEIGHT",
    "ATTRIBUTION_CANDIDATE_LIMIT",
    "MISSED_OPPORTUNITY_SEED_OVERALL_SCORE",
    "MISSED_OPPORTUNITY_SEED_CO_PURCHASE_SCORE",
    "MISSED_OPPORTUNITY_OVERALL_INCREMENT",
    "MISSED_OPPORTUNITY_CO_PURCHASE_INCREMENT",
    "DEFAULT_PRIVACY_LEVEL",
    "DEFAULT_DATA_RETENTION_DAYS",
    "ANONYMOUS_ID_PREFIX",
    "ANONYMOUS_ID_LENGTH",
    "PROFILE_WRITE_ATTEMPTS",
]
