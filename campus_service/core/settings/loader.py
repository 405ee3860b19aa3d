"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from campus_service.core.settings import get_tag_settings

    settings = get_tag_settings()

Testing:
    Clear the cache to force reload after changing environment variables:
    get_tag_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .logs import LoggingSettings
from .pagination import PaginationSettings
from .tags import TagSettings
from .websocket import WebSocketSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings.

    Returns:
        Validated and frozen PaginationSettings instance.
    """
    return PaginationSettings()


@lru_cache(maxsize=1)
def get_tag_settings() -> TagSettings:
    """Get cached tag voting/archival settings.

    Returns:
        Validated and frozen TagSettings instance.
    """
    return TagSettings()


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings."""
    return AuthSettings()


@lru_cache(maxsize=1)
def get_websocket_settings() -> WebSocketSettings:
    """Get cached WebSocket settings."""
    return WebSocketSettings()


def clear_all_caches() -> None:
    """Clear every settings cache (tests and CLI overrides)."""
    for loader in (
        get_app_settings,
        get_db_settings,
        get_logging_settings,
        get_pagination_settings,
        get_tag_settings,
        get_auth_settings,
        get_websocket_settings,
    ):
        loader.cache_clear()
