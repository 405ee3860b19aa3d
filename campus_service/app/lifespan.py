"""Application lifespan management.

Startup Order:
1. Core (logging)
2. Database (engine, optional schema creation)
3. Archived threshold (load stored value, start watcher)

Shutdown Order: Reverse of startup, then realtime connections and the
identity client are closed.

Anything already placed on ``app.state`` by ``create_app`` (an injected
session factory or threshold provider) is used as-is and left for the
caller to dispose.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from campus_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_tag_settings,
    get_websocket_settings,
)
from campus_service.features.tags.threshold import ArchivedThresholdProvider
from campus_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


# =============================================================================
# Startup functions
# =============================================================================


async def _startup_database(app: FastAPI) -> bool:
    """Create the process-wide engine unless a session factory was injected.

    Returns:
        True when the lifespan owns the engine and must dispose it.
    """
    if getattr(app.state, "session_factory", None) is not None:
        logger.debug("Using injected session factory")
        return False

    from campus_service.infra.database import create_schema, get_engine, get_session_factory

    db_settings = get_db_settings()
    engine = get_engine()
    app.state.session_factory = get_session_factory()

    if get_app_settings().create_schema_on_startup:
        try:
            await create_schema(engine)
        except Exception:
            logger.exception(
                "Schema creation failed, failing startup",
                extra={"sqlite": db_settings.is_sqlite},
            )
            raise
    logger.info("Database connection initialized", extra={"sqlite": db_settings.is_sqlite})
    return True


async def _startup_threshold(app: FastAPI) -> ArchivedThresholdProvider | None:
    """Create the threshold provider and start its watcher.

    Returns:
        The provider whose watcher was started, or None.
    """
    if getattr(app.state, "threshold", None) is None:
        tag_settings = get_tag_settings()
        app.state.threshold = ArchivedThresholdProvider(
            app.state.session_factory,
            default=tag_settings.default_archived_threshold,
            refresh_seconds=tag_settings.threshold_refresh_seconds,
        )

    provider = app.state.threshold
    if get_tag_settings().threshold_watch_enabled and isinstance(provider, ArchivedThresholdProvider):
        await provider.start()
        return provider
    return None


# =============================================================================
# Shutdown functions
# =============================================================================


async def _shutdown_realtime(app: FastAPI) -> None:
    manager = getattr(app.state, "realtime", None)
    if manager is None:
        return
    await manager.close_all()
    logger.info("Realtime connections closed")


async def _shutdown_auth() -> None:
    from campus_service.core.dependencies.auth_client import get_auth_client

    if get_auth_client.cache_info().currsize == 0:
        return
    await get_auth_client().aclose()
    logger.debug("Identity client closed")


async def _shutdown_database(owns_engine: bool) -> None:
    if not owns_engine:
        return
    from campus_service.infra.database import dispose_engine

    await dispose_engine()


# =============================================================================
# Main lifespan context manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    setup_logging()
    app_settings = get_app_settings()

    owns_engine = await _startup_database(app)
    watcher = await _startup_threshold(app)

    logger.info(
        "Application startup complete - listening on %s:%s",
        app_settings.host,
        app_settings.port,
        extra={
            "service": app_settings.service_name,
            "environment": app_settings.environment,
            "version": app_settings.version,
            "archived_threshold": app.state.threshold.current(),
            "threshold_watcher": watcher is not None,
            "websocket_enabled": get_websocket_settings().enabled,
            "event_subscribers": app.state.dispatcher.subscriber_names,
        },
    )

    yield

    logger.info("Application shutting down", extra={"service": app_settings.service_name})

    if watcher is not None:
        await watcher.stop()
    await _shutdown_realtime(app)
    await _shutdown_auth()
    await _shutdown_database(owns_engine)

    logger.info("Application shutdown complete", extra={"service": app_settings.service_name})
