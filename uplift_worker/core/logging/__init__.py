"""
Logging module for the Cart Uplift learning worker
"""

from .logger import get_logger, setup_logging, StructuredLogger
from .formatters import ConsoleFormatter, JSONFormatter, build_formatter

__all__ = [
    "get_logger",
    "setup_logging",
    "StructuredLogger",
    "ConsoleFormatter",
    "JSONFormatter",
    "build_formatter",
]
