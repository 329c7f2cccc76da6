"""
Structured logging for the Cart Uplift learning worker

Usage:
    logger = get_logger(__name__)
    logger.info("Scored products", shop_id=shop_id, analyzed=12)
"""

import logging
from typing import Any, Dict, Optional

from uplift_worker.core.config.settings import LoggingSettings, settings
from .handlers import JOBS_LOGGER_PREFIX, console_handler, rotating_file_handler

_loggers: Dict[str, "StructuredLogger"] = {}

NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "httpx", "uvicorn.access")


class StructuredLogger:
    """Thin wrapper over logging.Logger that accepts context as keyword arguments"""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, exc_info: Any = None, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, exc_info=exc_info, extra={"fields": fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    def critical(self, message: str, **fields: Any) -> None:
        self._log(logging.CRITICAL, message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=True, **fields)


def setup_logging(config: Optional[LoggingSettings] = None) -> None:
    """Replace the root handlers according to the logging settings"""
    config = config or settings.logging
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    root_logger.addHandler(console_handler(level, config.LOG_FORMAT))

    if config.LOG_FILE_ENABLED:
        file_options = {
            "log_dir": config.LOG_DIR,
            "max_bytes": config.LOG_MAX_FILE_SIZE,
            "backup_count": config.LOG_BACKUP_COUNT,
            "formatter_type": config.LOG_FORMAT,
        }
        root_logger.addHandler(rotating_file_handler("app.log", level=level, **file_options))
        root_logger.addHandler(
            rotating_file_handler("errors.log", level=logging.ERROR, **file_options)
        )
        root_logger.addHandler(
            rotating_file_handler(
                "jobs.log", level=level, only_logger=JOBS_LOGGER_PREFIX, **file_options
            )
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"fields": {"level": config.LOG_LEVEL, "format": config.LOG_FORMAT}},
    )


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance"""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(logging.getLogger(name))
    return _loggers[name]


setup_logging()
