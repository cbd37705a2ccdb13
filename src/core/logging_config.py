"""Structured logging configuration.

This module initializes structlog with a stable JSON format and keeps
a bounded in-memory buffer of recent events for diagnostic retrieval.
"""

from __future__ import annotations

from collections import deque
import sys
from threading import Lock
from typing import Any, MutableMapping

import structlog

from core.constants import DEFAULT_LOG_BUFFER_SIZE

_RECENT_EVENTS: deque[dict[str, Any]] = deque(maxlen=DEFAULT_LOG_BUFFER_SIZE)
_RECENT_EVENTS_LOCK = Lock()
_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    configure_logging()
    return structlog.get_logger(name)


def configure_logging() -> None:
    """Configure structlog processors once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            _remember_event,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def recent_log_events() -> list[dict[str, Any]]:
    """Return a copy of buffered log events, oldest first."""
    with _RECENT_EVENTS_LOCK:
        return list(_RECENT_EVENTS)


def clear_log_events() -> None:
    """Drop all buffered log events."""
    with _RECENT_EVENTS_LOCK:
        _RECENT_EVENTS.clear()


def _remember_event(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Copy each event into the diagnostic buffer before rendering."""
    snapshot = {key: _jsonable(value) for key, value in event_dict.items()}
    with _RECENT_EVENTS_LOCK:
        _RECENT_EVENTS.append(snapshot)
    return event_dict


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return str(value)
