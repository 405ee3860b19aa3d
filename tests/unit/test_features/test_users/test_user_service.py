"""Tests for user profiles and the activity log."""
from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from campus_service.features.users.schemas import ActivityAction, UserProfileRead
from campus_service.features.users.service import ActivityRecorder, UserService


@pytest.mark.asyncio
async def test_profile_is_created_on_first_access(db_session: AsyncSession) -> None:
    profile = await UserService(db_session).get_profile("newcomer")
    await db_session.commit()

    assert profile.user_id == "newcomer"
    assert profile.has_read_guide is False
    assert profile.add_tag_count == 0


@pytest.mark.asyncio
async def test_profile_is_reused(db_session: AsyncSession) -> None:
    service = UserService(db_session)
    first = await service.get_profile("alice")
    await db_session.commit()

    assert (await service.get_profile("alice")).user_id == first.user_id


class _RacingUserService(UserService):
    """Its first lookup misses a profile another request creates meanwhile."""

    def __init__(self, session: AsyncSession, session_factory) -> None:
        super().__init__(session)
        self.session_factory = session_factory
        self.raced = False

    async def _select(self, user_id: str):
        if not self.raced:
            self.raced = True
            async with self.session_factory() as other:
                await UserService(other).adjust_add_tag_count(user_id, 3)
                await other.commit()
            return None
        return await super()._select(user_id)


@pytest.mark.asyncio
async def test_concurrent_first_access_reuses_the_winning_profile(session_factory) -> None:
    async with session_factory() as session:
        service = _RacingUserService(session, session_factory)
        profile = await service.get_profile("alice")
        await session.commit()

    assert service.raced
    assert profile.user_id == "alice"
    assert profile.add_tag_count == 3


@pytest.mark.asyncio
async def test_mark_guide_read_is_idempotent(db_session: AsyncSession) -> None:
    service = UserService(db_session)

    await service.mark_guide_read("alice")
    profile = await service.mark_guide_read("alice")
    await db_session.commit()

    assert profile.has_read_guide is True


@pytest.mark.asyncio
async def test_adjust_add_tag_count(db_session: AsyncSession) -> None:
    service = UserService(db_session)

    await service.adjust_add_tag_count("alice", 1)
    await service.adjust_add_tag_count("alice", 1)
    await service.adjust_add_tag_count("alice", -1)
    await db_session.commit()

    assert (await service.get_profile("alice")).add_tag_count == 1


def test_profile_read_is_camel_case() -> None:
    body = UserProfileRead(user_id="alice", has_read_guide=True, add_tag_count=3).model_dump(by_alias=True)

    assert body == {"userId": "alice", "hasReadGuide": True, "addTagCount": 3}


@pytest.mark.asyncio
async def test_activity_history_is_per_user_and_limited(db_session: AsyncSession) -> None:
    recorder = ActivityRecorder(db_session)
    tag_id = uuid4()
    await recorder.record("alice", ActivityAction.ADD_TAG, tag_id=tag_id, collection="tags")
    await recorder.record("alice", ActivityAction.VIEW_TAG, tag_id=tag_id, collection="tags")
    await recorder.record("bob", ActivityAction.UPVOTE, tag_id=tag_id, collection="tags")
    await db_session.commit()

    history = await recorder.history("alice")
    limited = await recorder.history("alice", limit=1)

    assert {a.action for a in history} == {"addTag", "viewTag"}
    assert all(a.user_id == "alice" for a in history)
    assert len(limited) == 1
