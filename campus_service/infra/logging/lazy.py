"""Lazy evaluation support for logging.

Expensive debug messages are wrapped in lambdas and only evaluated when the
level is enabled, which keeps hot paths (pagination, voting) cheap in
production.
"""
from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that evaluates callable messages and args lazily.

    Example:
        logger = get_lazy_logger(__name__)
        logger.debug(lambda: f"page fetched: {len(rows)} rows")
        # the f-string only runs if DEBUG is enabled
    """

    def log(
        self,
        level: int,
        msg: Any,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()

        if args:
            args = tuple(arg() if callable(arg) else arg for arg in args)

        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = kwargs.get("extra", {})
        kwargs["extra"] = {**(self.extra or {}), **extra}
        return msg, kwargs


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get a logger with lazy evaluation support.

    Args:
        name: Logger name (usually ``__name__``).
        **context: Context bound to every record of this logger.

    Returns:
        LazyLoggerAdapter wrapping ``logging.getLogger(name)``.
    """
    return LazyLoggerAdapter(logging.getLogger(name), context)
