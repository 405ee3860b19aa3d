"""Repositories for the tags feature."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy import delete, exists, select, update

from campus_service.core.database import BaseRepository
from campus_service.features.tags.models import (
    FixedTag,
    FixedTagSubLocation,
    SubLocationStatus,
    Tag,
    TagSetting,
    TagStatus,
    UpVote,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


class TagRepository(BaseRepository[Tag]):
    """Tag queries beyond basic CRUD."""

    def unarchived(self, collection: str) -> Select[tuple[Tag]]:
        """Base query of the unarchived tag map (ordered by the caller)."""
        return select(Tag).where(Tag.collection == collection, Tag.archived.is_(False))

    def created_by(self, collection: str, user_id: str) -> Select[tuple[Tag]]:
        """Base query of the tags a user reported."""
        return select(Tag).where(Tag.collection == collection, Tag.created_by == user_id)

    async def get_in_collection(self, session: AsyncSession, collection: str, tag_id: UUID) -> Tag | None:
        stmt = select(Tag).where(Tag.id == tag_id, Tag.collection == collection)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def increment_view_count(self, session: AsyncSession, tag_id: UUID) -> int | None:
        """Atomically add one view; returns the new count or None if the tag is gone."""
        stmt = (
            update(Tag)
            .where(Tag.id == tag_id)
            .values(view_count=Tag.view_count + 1)
            .returning(Tag.view_count)
        )
        count = (await session.execute(stmt)).scalar_one_or_none()
        self._lazy.debug(lambda: f"db.increment_view_count({tag_id}) -> {count}")
        return count

    async def mark_archived(self, session: AsyncSession, tag_id: UUID) -> bool:
        """Set ``archived`` only if it is still false.

        Returns:
            True when this call performed the transition.
        """
        stmt = (
            update(Tag)
            .where(Tag.id == tag_id, Tag.archived.is_(False))
            .values(archived=True)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def delete_by_id(self, session: AsyncSession, tag_id: UUID) -> None:
        """Delete a tag; statuses and votes go with it (ON DELETE CASCADE)."""
        await session.execute(delete(Tag).where(Tag.id == tag_id))


class TagStatusRepository(BaseRepository[TagStatus]):
    """Status history and vote lookups."""

    def history(self, tag_id: UUID) -> Select[tuple[TagStatus]]:
        """Base query of a tag's status history."""
        return select(TagStatus).where(TagStatus.tag_id == tag_id)

    async def latest(self, session: AsyncSession, tag_id: UUID) -> TagStatus | None:
        """Latest status of a tag (highest created_at, id as tie-breaker)."""
        stmt = (
            select(TagStatus)
            .where(TagStatus.tag_id == tag_id)
            .order_by(TagStatus.created_at.desc(), TagStatus.id.desc())
            .limit(1)
        )
        return (await session.execute(stmt)).scalar_one_or_none()

    async def find_vote(self, session: AsyncSession, status_id: UUID, user_id: str) -> UpVote | None:
        stmt = select(UpVote).where(UpVote.status_id == status_id, UpVote.user_id == user_id)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def has_voted(self, session: AsyncSession, status_id: UUID, user_id: str) -> bool:
        stmt = select(exists().where(UpVote.status_id == status_id, UpVote.user_id == user_id))
        return bool((await session.execute(stmt)).scalar())


class TagSettingRepository(BaseRepository[TagSetting]):
    """Integer key/value settings."""

    async def read(self, session: AsyncSession, key: str) -> int | None:
        stmt = select(TagSetting.value).where(TagSetting.key == key)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def write(self, session: AsyncSession, key: str, value: int) -> None:
        setting = await session.get(TagSetting, key)
        if setting is None:
            session.add(TagSetting(key=key, value=value))
        else:
            setting.value = value
        await session.flush()


class FixedTagRepository(BaseRepository[FixedTag]):
    def all(self) -> Select[tuple[FixedTag]]:
        return select(FixedTag)

    async def sub_locations(self, session: AsyncSession, fixed_tag_id: UUID) -> Sequence[FixedTagSubLocation]:
        """Sub-locations of a fixed tag, in the order they were seeded."""
        stmt = (
            select(FixedTagSubLocation)
            .where(FixedTagSubLocation.fixed_tag_id == fixed_tag_id)
            .order_by(FixedTagSubLocation.created_at, FixedTagSubLocation.id)
        )
        return (await session.execute(stmt)).scalars().all()

    async def get_sub_location(self, session: AsyncSession, sub_location_id: UUID) -> FixedTagSubLocation | None:
        return await session.get(FixedTagSubLocation, sub_location_id)


class SubLocationStatusRepository(BaseRepository[SubLocationStatus]):
    """Status history of fixed tag sub-locations."""

    def history(self, sub_location_id: UUID) -> Select[tuple[SubLocationStatus]]:
        return select(SubLocationStatus).where(SubLocationStatus.sub_location_id == sub_location_id)

    async def latest(self, session: AsyncSession, sub_location_id: UUID) -> SubLocationStatus | None:
        stmt = (
            self.history(sub_location_id)
            .order_by(SubLocationStatus.created_at.desc(), SubLocationStatus.id.desc())
            .limit(1)
        )
        return (await session.execute(stmt)).scalar_one_or_none()


@lru_cache(maxsize=1)
def get_tag_repository() -> TagRepository:
    return TagRepository(Tag)


@lru_cache(maxsize=1)
def get_status_repository() -> TagStatusRepository:
    return TagStatusRepository(TagStatus)


@lru_cache(maxsize=1)
def get_setting_repository() -> TagSettingRepository:
    return TagSettingRepository(TagSetting)


@lru_cache(maxsize=1)
def get_fixed_tag_repository() -> FixedTagRepository:
    return FixedTagRepository(FixedTag)


@lru_cache(maxsize=1)
def get_sub_location_status_repository() -> SubLocationStatusRepository:
    return SubLocationStatusRepository(SubLocationStatus)
