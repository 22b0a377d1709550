"""Structured logging setup for notionfeed."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import structlog


# Notion integration tokens ("secret_..." or the newer "ntn_..." form)
_TOKEN_PATTERN = re.compile(r"\b(secret|ntn)_[A-Za-z0-9]{6,}")

_SECRET_KEYS = {"api_key", "authorization", "token"}


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        return _TOKEN_PATTERN.sub(lambda m: f"{m.group(1)}_***", value)
    return value


def redact_notion_tokens(logger: Any, method_name: str, event_dict: dict) -> dict:
    """structlog processor that keeps Notion tokens out of the log file.

    Values under secret-looking keys are replaced outright; token-shaped
    substrings in any other string value (e.g. error messages echoing a
    request) are masked.
    """
    for key, value in event_dict.items():
        if key.lower() in _SECRET_KEYS:
            event_dict[key] = "***"
        else:
            event_dict[key] = _mask(value)
    return event_dict


def configure_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Configure structlog for JSON logging to ~/.cache/notionfeed/logs/notionfeed.log.

    Log level is controlled via NOTIONFEED_LOG_LEVEL:
    - DEBUG: Every request, cache hit and per-stage item count
    - INFO: Board loads, database queries, reorders (default)
    - WARNING: Best-effort failures (icons), stale results discarded
    - ERROR: Notion API failures, config errors

    Notion tokens are masked before anything is written.

    Args:
        log_dir: Directory for notionfeed.log (default: ~/.cache/notionfeed/logs)

    Returns:
        Path of the log file

    Example:
        export NOTIONFEED_LOG_LEVEL=DEBUG
        notionfeed feed

        tail -f ~/.cache/notionfeed/logs/notionfeed.log | jq .
    """
    log_dir = log_dir or Path.home() / ".cache" / "notionfeed" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "notionfeed.log"

    log_level = os.environ.get("NOTIONFEED_LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_notion_tokens,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a", encoding="utf-8")),
        cache_logger_on_first_use=False,
    )
    return log_file


def get_logger(name: str) -> Any:
    """Get a structured logger bound to the calling module's name."""
    return structlog.get_logger(name)
