"""
Learning pipeline exceptions
"""

from typing import Any, Dict, Optional

from .base import UpliftWorkerException
from .database import DatabaseQueryError, DatabaseTransactionError


class PipelineError(UpliftWorkerException):
    """Base exception for learning pipeline failures"""

    def __init__(
        self,
        message: str,
        shop_id: Optional[str] = None,
        error_code: str = "PIPELINE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        pipeline_details = {"shop_id": shop_id}
        if details:
            pipeline_details.update(details)
        super().__init__(message, error_code, pipeline_details, cause)
        self.shop_id = shop_id


class EventSourceError(DatabaseQueryError):
    """Raised when interaction events cannot be read; fatal for the shop's run"""

    def __init__(
        self,
        message: str,
        shop_id: Optional[str] = None,
        kinds: Optional[list] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            details={"shop_id": shop_id, "kinds": kinds},
            cause=cause,
            error_code="EVENT_SOURCE_ERROR",
        )
        self.shop_id = shop_id


class EventParseError(PipelineError):
    """Raised when an event's metadata does not fit its kind"""

    def __init__(
        self,
        message: str,
        event_id: Optional[str] = None,
        kind: Optional[str] = None,
        shop_id: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            shop_id=shop_id,
            error_code="EVENT_PARSE_ERROR",
            details={"event_id": event_id, "kind": kind},
            cause=cause,
        )
        self.event_id = event_id
        self.kind = kind


class SimilaritySnapshotError(DatabaseTransactionError):
    """Raised when the similarity snapshot swap is rolled back"""

    def __init__(
        self,
        message: str,
        shop_id: Optional[str] = None,
        records: int = 0,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            details={"shop_id": shop_id, "records": records},
            cause=cause,
            error_code="SIMILARITY_SNAPSHOT_ERROR",
        )
        self.shop_id = shop_id
