"""
structlog setup for seeker_verify.

Each record carries event_type (the snake_case event name), level, an ISO UTC
timestamp, the emitting module as logger, and whatever context the call site
passes: wallet_id (always shortened), RPC method, attempt, tier, ...

RPC failures often echo the endpoint URL, and Helius URLs carry the API key in
the query string, so every string value is scrubbed of api-key before
rendering.

Output goes to stderr as JSON lines unless LOG_FORMAT selects the console
renderer. This module imports nothing from the rest of the package; every
other module imports it.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

SHORT_ADDRESS_LEN = 16
_API_KEY_RE = re.compile(r"(api[-_]key=)[^&\s'\"]+", re.IGNORECASE)


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _normalize_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def redact_api_keys(text: str) -> str:
    return _API_KEY_RE.sub(r"\1***", text)


def _redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and "key=" in value.lower():
            event_dict[key] = redact_api_keys(value)
    return event_dict


def configure_structlog(log_format: str | None = None, level: int | None = None) -> None:
    """(Re)configure structlog; called once on import with LOG_FORMAT / LOG_LEVEL."""
    fmt = (log_format or LOG_FORMAT).strip().lower()
    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_timestamp,
            _normalize_event,
            _redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE if level is None else level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger, bound with logger=name.

        logger = get_logger(__name__)
        logger.info("claim_detected", wallet_id=short_address(addr), tier="Vanguard")
    """
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str | None) -> str:
    address = address or ""
    return address[:SHORT_ADDRESS_LEN] + "..." if len(address) > SHORT_ADDRESS_LEN else address


def bind_wallet(wallet_id: str, base: Any = None) -> structlog.BoundLogger:
    """base (default: the package logger) with the shortened wallet_id bound."""
    if base is None:
        base = get_logger("seeker_verify")
    return base.bind(wallet_id=short_address(wallet_id))
