"""Context management for structured logging.

Provides automatic context injection into log records using contextvars,
so request IDs and user IDs show up in every log line of a request without
being passed around explicitly. Each asyncio task gets its own copy.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Set logging context for the current task.

    Example:
        set_log_context(request_id="abc-123")
        set_log_context(user_id="uid-42")
        logger.info("Processing request")  # includes request_id and user_id
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current task.

    Useful in tests and in long-running background loops.
    """
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Logging filter that injects the contextvars context into each LogRecord.

    Attached to the root logger by configure_logging(), so every logger
    benefits without code changes.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            # Don't overwrite existing attributes
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
