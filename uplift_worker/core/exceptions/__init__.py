"""
Custom exceptions for the Cart Uplift learning worker
"""

from .base import UpliftWorkerException
from .config import ConfigurationError
from .database import (
    DatabaseError,
    DatabaseConnectionError,
    DatabaseQueryError,
    DatabaseTransactionError,
)
from .pipeline import (
    PipelineError,
    EventSourceError,
    EventParseError,
    SimilaritySnapshotError,
)

__all__ = [
    "UpliftWorkerException",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "DatabaseQueryError",
    "DatabaseTransactionError",
    "PipelineError",
    "EventSourceError",
    "EventParseError",
    "SimilaritySnapshotError",
]
