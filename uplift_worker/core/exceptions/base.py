"""
Base exception class for the Cart Uplift learning worker
"""

from typing import Any, Dict, Optional


class UpliftWorkerException(Exception):
    """
    Base exception for all learning worker errors.

    `error_code` is a stable machine-readable tag, `details` carries the
    context (shop, event, job) that the health log and API responses expose.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = {k: v for k, v in (details or {}).items() if v is not None}
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}" if self.error_code else self.message
        if self.cause is not None and str(self.cause) not in self.message:
            text = f"{text} (caused by {type(self.cause).__name__}: {self.cause})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for logs and API responses"""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "cause": repr(self.cause) if self.cause is not None else None,
        }
