"""
Log handlers: console plus optional rotating files
"""

import logging
import logging.handlers
import os
from typing import Optional

from .formatters import build_formatter

JOBS_LOGGER_PREFIX = "uplift_worker.domains.learning"


def console_handler(level: int, formatter_type: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(build_formatter(formatter_type))
    return handler


def rotating_file_handler(
    filename: str,
    log_dir: str,
    max_bytes: int,
    backup_count: int,
    level: int,
    formatter_type: str,
    only_logger: Optional[str] = None,
) -> logging.Handler:
    """
    Size-rotated log file under `log_dir`.

    Args:
        only_logger: Keep only records from this logger and its children
    """
    os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    # files never get ANSI colors
    handler.setFormatter(build_formatter(formatter_type, use_colors=False))
    if only_logger:
        handler.addFilter(logging.Filter(only_logger))
    return handler
