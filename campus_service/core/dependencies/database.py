"""Database dependencies for FastAPI route handlers.

The session factory lives on ``app.state`` so tests can inject one. The
session is closed (and rolled back if uncommitted) after the request;
handlers commit explicitly, then dispatch the resulting events. CLI
commands use ``infra.database.get_session_factory()`` instead.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Session factory owned by the application lifespan."""
    return request.app.state.session_factory


async def get_db_session(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for a request-scoped session.

    Example:
        @router.get("/tags")
        async def list_tags(session: Annotated[AsyncSession, Depends(get_db_session)]):
            ...
    """
    async with session_factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactoryDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
