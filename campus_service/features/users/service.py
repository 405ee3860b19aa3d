"""Service layer for user profiles and the activity log.

Both services write through the caller's session; the caller commits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from campus_service.features.users.models import UserActivity, UserProfile
from campus_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from campus_service.features.users.schemas import ActivityAction

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class UserService:
    """Profile reads and updates."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_profile(self, user_id: str) -> UserProfile:
        """Return the profile, creating an empty one on first access.

        Concurrent first accesses by the same user both succeed: the insert
        skips an existing row and the profile is read back.
        """
        profile = await self._select(user_id)
        if profile is None:
            dialect = self._session.get_bind().dialect.name
            insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
            await self._session.execute(
                insert(UserProfile)
                .values(user_id=user_id, has_read_guide=False, add_tag_count=0)
                .on_conflict_do_nothing(index_elements=[UserProfile.user_id])
            )
            profile = await self._select(user_id)
            lazy_logger.debug(lambda: f"service.get_profile({user_id}) -> created")
        return profile

    async def _select(self, user_id: str) -> UserProfile | None:
        stmt = (
            select(UserProfile)
            .where(UserProfile.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def mark_guide_read(self, user_id: str) -> UserProfile:
        profile = await self.get_profile(user_id)
        if not profile.has_read_guide:
            profile.has_read_guide = True
            await self._session.flush()
            logger.info("User read the guide", extra={"user_id": user_id})
        return profile

    async def adjust_add_tag_count(self, user_id: str, delta: int) -> None:
        """Atomically add ``delta`` to the user's reported tag counter."""
        await self.get_profile(user_id)
        await self._session.execute(
            update(UserProfile)
            .where(UserProfile.user_id == user_id)
            .values(add_tag_count=UserProfile.add_tag_count + delta)
            .execution_options(synchronize_session=False)
        )


class ActivityRecorder:
    """Appends to the user activity log."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(
        self,
        user_id: str,
        action: ActivityAction,
        *,
        tag_id: UUID | None = None,
        collection: str | None = None,
    ) -> None:
        self._session.add(
            UserActivity(user_id=user_id, action=action.value, tag_id=tag_id, collection=collection)
        )
        await self._session.flush()
        lazy_logger.debug(lambda: f"activity: user={user_id} action={action.value} tag={tag_id}")

    async def history(self, user_id: str, limit: int = 50) -> list[UserActivity]:
        stmt = (
            select(UserActivity)
            .where(UserActivity.user_id == user_id)
            .order_by(UserActivity.created_at.desc(), UserActivity.id.desc())
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
