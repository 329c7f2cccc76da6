"""
Log formatters

StructuredLogger attaches its keyword arguments to the record as `fields`;
the console formatter renders them as key=value pairs, the JSON formatter as
top-level keys so shop_id / job_type can be filtered on in the log pipeline.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "fields", None) or {}
    return {key: value for key, value in fields.items() if value is not None}


def render_fields(fields: Dict[str, Any]) -> str:
    parts = []
    for key, value in fields.items():
        if isinstance(value, str) and " " in value:
            parts.append(f'{key}="{value}"')
        else:
            parts.append(f"{key}={value}")
    return " | ".join(parts)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for local runs"""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{timestamp}] {record.levelname:8s} {record.name}: {record.getMessage()}"

        fields = record_fields(record)
        if fields:
            line = f"{line} | {render_fields(fields)}"
        if self.use_colors:
            line = f"{COLORS.get(record.levelname, '')}{line}{RESET}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(record_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def build_formatter(formatter_type: str, use_colors: bool = True) -> logging.Formatter:
    """`json` or `console` (anything unknown falls back to console)"""
    if formatter_type == "json":
        return JSONFormatter()
    return ConsoleFormatter(use_colors=use_colors)
