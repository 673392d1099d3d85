"""
Logging helpers for journal data and generation calls.

Includes:
- Redaction of secrets and truncation of free text before it reaches a log
- One structured usage line per upstream generation call
"""
import json
import logging
import re
from typing import Any, Optional


# Keys whose values are never logged (substring match)
SENSITIVE_KEYS = [
    "api_key", "password", "secret", "auth",
    "authorization", "bearer", "email",
]

# Token-bearing keys; exact match so "maxTokens" stays visible
TOKEN_KEYS = ["token", "access_token", "refresh_token", "id_token"]

# Journal free text is personal; only its length is logged
JOURNAL_TEXT_KEYS = ["gratitude", "intentions", "thoughts", "prompt", "insights", "text"]


def sanitize_for_logging(data: Any, max_len: int = 100) -> Any:
    """
    Sanitize data for safe logging.

    Args:
        data: dict, list, str or scalar to sanitize
        max_len: Maximum length for string values before truncation

    Returns:
        A copy with sensitive values redacted and long strings truncated
    """
    if data is None:
        return "None"

    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            key = str(k).lower()
            if key in TOKEN_KEYS or any(sensitive in key for sensitive in SENSITIVE_KEYS):
                sanitized[k] = "***REDACTED***"
            elif key in JOURNAL_TEXT_KEYS and isinstance(v, str):
                sanitized[k] = f"<{len(v)} chars>"
            else:
                sanitized[k] = sanitize_for_logging(v, max_len)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item, max_len) for item in data]

    if isinstance(data, str):
        cleaned = re.sub(r'[\x00-\x1F\x7F]', '', data)
        if len(cleaned) > max_len:
            return cleaned[:max_len] + "..."
        return cleaned

    if isinstance(data, (int, float, bool)):
        return data

    return sanitize_for_logging(str(data), max_len)


_usage_logger = logging.getLogger("MindSpace.Usage")


def log_generation_usage(
    model: str,
    input_tokens: int,
    output_tokens: int,
    temperature: float,
    max_tokens: int,
    duration_ms: Optional[int] = None,
    endpoint: str = "enrichment",
) -> None:
    """
    Log a structured usage event for an upstream generation call.

    Produces a single ``GENERATION_USAGE {json}`` line that log aggregation
    can parse for cost dashboards.
    """
    event = {
        "event": "generation_usage",
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "endpoint": endpoint,
    }

    if duration_ms is not None:
        event["duration_ms"] = duration_ms

    _usage_logger.info("GENERATION_USAGE %s", json.dumps(event))
