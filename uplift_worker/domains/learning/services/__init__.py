"""
Learning services
"""

from .event_source import EventStoreReader
from .similarity_engine import ProductSimilarityEngine
from .performance_scorer import ProductPerformanceScorer
from .profile_builder import BehavioralProfileBuilder
from .attribution_matcher import AttributionMatcher
from .health_logger import JobHealthLogger, JobHealthService, start_health_log

__all__ = [
    "EventStoreReader",
    "ProductSimilarityEngine",
    "ProductPerformanceScorer",
    "BehavioralProfileBuilder",
    "AttributionMatcher",
    "JobHealthLogger",
    "JobHealthService",
    "start_health_log",
]
