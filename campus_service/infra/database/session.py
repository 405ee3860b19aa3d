"""Database engine and session management.

The engine is created lazily from DatabaseSettings so that importing the
package never opens connections. PostgreSQL (psycopg3) is the production
target; SQLite via aiosqlite serves local development and tests.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from campus_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from campus_service.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(settings: DatabaseSettings | None = None, *, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine for the configured URL.

    Pool sizing only applies to server databases; SQLite gets SQLAlchemy's
    default pool for its URL kind.
    """
    settings = settings or get_db_settings()
    url = settings.get_sqlalchemy_url()
    kwargs: dict[str, Any] = {
        "echo": settings.echo if echo is None else echo,
        "future": True,
    }
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=settings.pool_pre_ping,
        )

    engine = create_async_engine(url, **kwargs)
    if settings.is_sqlite:
        _enable_sqlite_foreign_keys(engine)

    logger.info(
        "Database engine created",
        extra={"dialect": engine.dialect.name, "driver": engine.dialect.driver},
    )
    return engine


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
        _ = connection_record
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by requests, transactions and background tasks."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(echo=get_db_settings().echo or get_app_settings().debug)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory bound to get_engine()."""
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close all pooled connections (application shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
