"""
Interaction event kind names written by the storefront serving layer
"""

# Older widget builds emitted this name for batch impressions
LEGACY_RECOMMENDATION_SERVED = "ml_recommendation_served"
RECOMMENDATION_SERVED = "recommendation_served"


def normalize_kind(kind: str) -> str:
    """Map legacy or differently-cased kind names onto the current names"""
    value = (kind or "").strip().lower()
    if value == LEGACY_RECOMMENDATION_SERVED:
        return RECOMMENDATION_SERVED
    return value


def stored_kind_names(kind: str) -> list:
    """All names a kind may be stored under"""
    if kind == RECOMMENDATION_SERVED:
        return [RECOMMENDATION_SERVED, LEGACY_RECOMMENDATION_SERVED]
    return [kind]


__all__ = [
    "LEGACY_RECOMMENDATION_SERVED",
    "RECOMMENDATION_SERVED",
    "normalize_kind",
    "stored_kind_names",
]
