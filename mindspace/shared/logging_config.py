"""
Structured logging for the journal service.

JSON lines in production, a readable single-line format when
ENVIRONMENT=development. Every record carries the request's correlation ID.

Usage:
    from mindspace.shared.logging_config import setup_logging

    setup_logging(service_name="mindspace-journal-service")

    logger = logging.getLogger("MindSpace.Journal.EntryStore")
    logger.info("Entry created", extra={"entry_id": entry.id, "mood": entry.mood.value})

Output (JSON, one line per record):
    {"timestamp": "...", "level": "INFO", "logger": "MindSpace.Journal.EntryStore",
     "message": "Entry created", "service": "mindspace-journal-service",
     "correlation_id": "ab12cd34", "entry_id": "...", "mood": "good"}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from mindspace.shared.correlation import get_correlation_id

# LogRecord attributes that are not user-supplied ``extra`` fields
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})

_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "hpack",
    "asyncio",
    "anthropic",
    "postgrest",
)


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class CorrelationIdFilter(logging.Filter):
    """Inject the context's correlation_id into records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def __init__(self, service_name: str = "mindspace"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id and correlation_id != "-":
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Single-line format for local development."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", "-")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        extras = ", ".join(f"{key}={value}" for key, value in _extra_fields(record).items())
        formatted = f"{timestamp} [{record.levelname}] [{correlation_id}] {record.name}: {record.getMessage()}"
        if extras:
            formatted += f" | {extras}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Name stamped on every JSON record
        level: Log level name; defaults to LOG_LEVEL or INFO
        json_output: Force JSON on/off; defaults to JSON unless
                     ENVIRONMENT is "development"
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, level, logging.INFO)

    environment = os.getenv("ENVIRONMENT", "production").lower()
    if json_output is None:
        json_output = environment != "development"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter(service_name=service_name) if json_output else HumanReadableFormatter())
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(f"{service_name}.startup").info(
        "Logging configured",
        extra={"log_level": level, "json_output": json_output, "environment": environment},
    )
