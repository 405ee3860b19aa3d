"""Modular Pydantic Settings v2 configuration.

One frozen settings class per domain, each with its own environment prefix
(APP_, DB_, LOG_, PAGINATION_, TAGS_, AUTH_, WS_), loaded through cached
loaders:

    from campus_service.core.settings import get_pagination_settings

    settings = get_pagination_settings()
    print(settings.max_page_size)
"""

from __future__ import annotations

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_auth_settings,
    get_db_settings,
    get_logging_settings,
    get_pagination_settings,
    get_tag_settings,
    get_websocket_settings,
)
from .logs import LoggingSettings
from .pagination import PaginationSettings, StaleCursorPolicy
from .tags import TagSettings
from .websocket import WebSocketSettings

__all__ = [
    "AppSettings",
    "AuthSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "PaginationSettings",
    "StaleCursorPolicy",
    "TagSettings",
    "WebSocketSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_auth_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_pagination_settings",
    "get_tag_settings",
    "get_websocket_settings",
]
