"""Fixtures for tag feature tests: seeded tags of each mission."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

import pytest

from campus_service.features.tags.missions import Mission
from campus_service.features.tags.service import TagService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@dataclass
class SeededTag:
    tag_id: UUID
    status_id: UUID
    created_by: str


@pytest.fixture
def seed_tag(
    session_factory: async_sessionmaker[AsyncSession],
    tag_create: Callable[..., Any],
) -> Callable[..., Awaitable[SeededTag]]:
    """Create and commit a tag with its first status in its own session."""

    async def _seed(mission: Mission = Mission.ISSUE, user_id: str = "reporter", **overrides: Any) -> SeededTag:
        async with session_factory() as session:
            change = await TagService(session).add_tag(user_id, tag_create(mission, **overrides))
            await session.commit()
        return SeededTag(tag_id=change.tag.id, status_id=change.status.id, created_by=user_id)

    return _seed
