"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campus_service.core.settings import get_app_settings, get_websocket_settings
from campus_service.features.health.router import router as health_router
from campus_service.features.metrics.router import router as metrics_router
from campus_service.features.realtime.router import router as realtime_router
from campus_service.features.tags.router import (
    fixed_tags_router,
    research_tags_router,
    settings_router,
    tags_router,
)
from campus_service.features.users.router import router as users_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from campus_service.core.settings import AppSettings, WebSocketSettings

logger = logging.getLogger(__name__)


def setup_routers(
    app: FastAPI,
    app_settings: AppSettings | None = None,
    websocket_settings: WebSocketSettings | None = None,
) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API
            prefix and the metrics endpoint.
        websocket_settings: Optional override for the realtime stream.
    """
    app_settings = app_settings or get_app_settings()
    websocket_settings = websocket_settings or get_websocket_settings()

    api_prefix = app_settings.api_prefix

    # Include metrics endpoint (no prefix - accessible at /metrics)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(health_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(tags_router, prefix=api_prefix)
    app.include_router(research_tags_router, prefix=api_prefix)
    app.include_router(fixed_tags_router, prefix=api_prefix)
    app.include_router(settings_router, prefix=api_prefix)

    if websocket_settings.enabled:
        app.include_router(realtime_router, prefix=api_prefix)
        logger.info("Realtime change stream registered at %s/realtime/tags", api_prefix)

    logger.debug(
        "Routers registered",
        extra={"api_prefix": api_prefix, "metrics_enabled": app_settings.metrics_enabled},
    )
