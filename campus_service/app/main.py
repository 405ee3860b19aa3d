"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from campus_service.app.exception_handlers import configure_exception_handlers
from campus_service.app.lifespan import lifespan
from campus_service.app.middleware import configure_middleware
from campus_service.app.router import setup_routers
from campus_service.core.events import EventDispatcher
from campus_service.core.settings import get_app_settings, get_websocket_settings
from campus_service.infra.realtime import ConnectionManager

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from campus_service.features.tags.threshold import ThresholdProvider


def create_app(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    threshold: ThresholdProvider | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        session_factory: Session factory to use instead of the configured
            database. The caller keeps ownership of its engine.
        threshold: Archived threshold provider to use instead of the
            database-backed one created at startup.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()
    websocket_settings = get_websocket_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        docs_url=app_settings.docs_url,
        openapi_url=app_settings.openapi_url,
        root_path=app_settings.root_path,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Change events fan out to the realtime stream; other consumers subscribe here too
    dispatcher = EventDispatcher()
    realtime = ConnectionManager(websocket_settings)
    dispatcher.subscribe(realtime.handle_event, name="realtime")

    app.state.dispatcher = dispatcher
    app.state.realtime = realtime
    app.state.session_factory = session_factory
    app.state.threshold = threshold

    # Configure exception handlers (must be before middleware)
    configure_exception_handlers(app)

    configure_middleware(app, app_settings)

    setup_routers(app, app_settings, websocket_settings)

    return app


# Application instance for uvicorn
app = create_app()
