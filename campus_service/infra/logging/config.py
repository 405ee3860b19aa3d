"""Logging configuration setup.

Production logging configuration using:
- dictConfig for root logger, formatters and filters
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter for automatic context propagation
- JSONL format for machine parsing
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from .formatters import JSONFormatter

if TYPE_CHECKING:
    from campus_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def shutdown() -> None:
    """Stop the QueueListener, flushing pending records.

    Registered with atexit on first configuration.
    """
    global _log_queue, _listener

    if _listener is not None:
        _listener.stop()
        _listener = None
    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints (app, CLI).

    Args:
        log_settings: Optional settings instance; loaded from the environment if omitted.
        force: Reconfigure even if logging was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from campus_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **configure_kwargs})
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    file_path: str | Path | None = None,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    include_context: bool = True,
    service_name: str = "campus-service",
    uvicorn_level: str = "INFO",
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All handlers are attached to a QueueListener; the root logger only gets
    a QueueHandler, so logging never blocks the event loop on I/O.

    Args:
        log_level: Root logger level.
        json_logs: Emit JSONL instead of human-readable text.
        console_enabled: Log to stderr.
        file_path: Rotating log file, or None to disable file logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated files to keep.
        include_context: Attach ContextInjectingFilter to the root logger.
        service_name: Static ``service`` field of JSON records.
        uvicorn_level: Level for the uvicorn loggers.
    """
    global _log_queue, _listener

    logging.captureWarnings(True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "context": {
                    "()": "campus_service.infra.logging.context.ContextInjectingFilter",
                },
            },
            "root": {
                "level": log_level.upper(),
                "handlers": [],
                "filters": ["context"] if include_context else [],
            },
            "loggers": {
                "uvicorn": {"level": uvicorn_level.upper()},
                "uvicorn.access": {"level": uvicorn_level.upper()},
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )

    formatter: logging.Formatter
    if json_logs:
        formatter = JSONFormatter(static={"service": service_name})
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handlers: list[logging.Handler] = []
    if console_enabled:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter(static={"service": service_name}))
        handlers.append(file_handler)

    # Replace any previous listener (reconfiguration in tests / CLI)
    shutdown()
    _log_queue = Queue(-1)
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, QueueHandler):
            root.removeHandler(existing)
    root.addHandler(QueueHandler(_log_queue))

    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    logger.debug(
        "Logging configured",
        extra={"json_logs": json_logs, "file": str(file_path) if file_path else None},
    )
