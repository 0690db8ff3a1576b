"""
Structured JSON logging: timestamp, wallet, event_type.

structlog with ISO timestamps, log level and consistent keys. Every module
logs through get_logger(__name__) with a snake_case event name as the first
argument and key/value context after it.

Uses only Python stdlib logging and structlog; no identity_prism imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# JSON output for production (LOG_FORMAT=json); human-readable for local
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

WALLET_PREFIX_LEN = 16


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog() -> None:
    """Configure structlog once at import: JSON, timestamp, level, event_type."""
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
    ]
    if LOG_FORMAT == "json":
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("snapshot_ready", wallet=short_wallet(addr), score=740, tier="uranus")
    """
    return structlog.get_logger(name).bind(logger=name)


def short_wallet(address: str) -> str:
    """Truncated address for log lines."""
    if len(address) <= WALLET_PREFIX_LEN:
        return address
    return address[:WALLET_PREFIX_LEN] + "..."


def bind_wallet(address: str) -> structlog.BoundLogger:
    """Return a logger with the (truncated) wallet bound to all subsequent log calls."""
    return get_logger("identity_prism").bind(wallet=short_wallet(address))
