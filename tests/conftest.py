"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings for a self-contained test run
    - Database Fixtures: file-backed SQLite engine, session factory, session
    - Application Fixtures: FastAPI app and HTTP client
    - Data Fixtures: payload builders and seeded tags

The database is a SQLite file under ``tmp_path`` rather than ``:memory:``:
the vote ledger and archival policy open their own connections, and every
connection must see the same database.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from campus_service.features.tags.threshold import ArchivedThresholdProvider

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("AUTH_MOCK_MODE", "true")
os.environ.setdefault("AUTH_ADMIN_USER_IDS", '["admin"]')
os.environ.setdefault("TAGS_THRESHOLD_WATCH_ENABLED", "false")
os.environ.setdefault("TAGS_VOTE_RETRY_INITIAL_DELAY", "0.001")
os.environ.setdefault("TAGS_DEFAULT_ARCHIVED_THRESHOLD", "2")
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("DB_DATABASE_URL", "sqlite+aiosqlite:///./campus-test.db")


@pytest.fixture(autouse=True)
def _reset_cached_singletons():
    """Drop cached settings and the auth client around every test."""
    from campus_service.core.dependencies.auth_client import get_auth_client
    from campus_service.core.settings import clear_all_caches

    clear_all_caches()
    get_auth_client.cache_clear()
    yield
    clear_all_caches()
    get_auth_client.cache_clear()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Engine on a fresh SQLite file with the full schema.

    Built through ``build_engine`` so SQLite foreign keys (and with them the
    status/vote cascade on tag deletion) are enabled.
    """
    from campus_service.core.settings import DatabaseSettings
    from campus_service.infra.database import build_engine, create_schema

    settings = DatabaseSettings(dsn=f"sqlite+aiosqlite:///{tmp_path / 'campus.db'}")
    engine = build_engine(settings, echo=False)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    from campus_service.infra.database import build_session_factory

    return build_session_factory(db_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for service-level tests; the test commits when it needs to."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def threshold(session_factory: async_sessionmaker[AsyncSession]) -> ArchivedThresholdProvider:
    """Database-backed threshold of 2 without the background watcher."""
    from campus_service.features.tags.threshold import ArchivedThresholdProvider

    return ArchivedThresholdProvider(session_factory, default=2, refresh_seconds=0.05)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    threshold: ArchivedThresholdProvider,
) -> FastAPI:
    """Application wired to the test database.

    The lifespan does not run under ASGITransport, so everything it would
    provide is injected here.
    """
    from campus_service.app.main import create_app

    return create_app(session_factory, threshold=threshold)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def api_prefix() -> str:
    from campus_service.core.settings import get_app_settings

    return get_app_settings().api_prefix


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Headers authenticating as ``uid`` (mock mode takes the token as uid)."""

    def _headers(uid: str) -> dict[str, str]:
        return {"X-Auth-Token": uid}

    return _headers


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def tag_payload() -> Callable[..., dict[str, Any]]:
    """Build a camelCase TagCreate body."""

    def _payload(
        mission: str = "問題回報",
        location_name: str = "Library 2F restroom",
        **overrides: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "locationName": location_name,
            "category": {"missionName": mission, "subTypeName": "restroom", "targetName": "sink"},
            "coordinates": {"latitude": 24.7869, "longitude": 120.9975},
            "floor": "2F",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def tag_create() -> Callable[..., Any]:
    """Build a TagCreate model for service-level tests."""
    from campus_service.features.tags.missions import Mission
    from campus_service.features.tags.schemas import Category, Coordinates, TagCreate

    def _create(
        mission: Mission = Mission.ISSUE,
        location_name: str = "Library 2F restroom",
        **overrides: Any,
    ) -> TagCreate:
        return TagCreate(
            location_name=location_name,
            category=Category(mission_name=mission),
            coordinates=Coordinates(latitude=24.7869, longitude=120.9975),
            **overrides,
        )

    return _create
