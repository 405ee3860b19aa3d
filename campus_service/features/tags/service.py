"""Service layer for the tags feature.

Mutations return the change events they produced instead of publishing
them. The router commits the request session first and only then hands
the events to the dispatcher, so subscribers never see uncommitted state.

Voting is the exception to the single request session: the vote ledger
and the archival policy each run their own short transaction through the
session factory. Nothing is written through the request session before
they finish.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from campus_service.core.database import (
    NotFoundError,
    from_epoch_millis,
    to_epoch_millis,
    utcnow_millis,
)
from campus_service.core.exceptions import BadRequestException, ForbiddenException
from campus_service.core.pagination import PageFetcher, PageOrder
from campus_service.features.tags.archival import ArchivalPolicy
from campus_service.features.tags.events import TagAdded, TagChangeEvent, TagDeleted, TagUpdated
from campus_service.features.tags.geohash import encode as geohash_encode
from campus_service.features.tags.missions import (
    CATEGORY_CHANGE_DESCRIPTION,
    TAGS,
    Mission,
    TagCollection,
    initial_vote_count,
)
from campus_service.features.tags.models import (
    FixedTag,
    FixedTagSubLocation,
    SubLocationStatus,
    Tag,
    TagStatus,
)
from campus_service.features.tags.repository import (
    FixedTagRepository,
    SubLocationStatusRepository,
    TagRepository,
    TagStatusRepository,
    get_fixed_tag_repository,
    get_status_repository,
    get_sub_location_status_repository,
    get_tag_repository,
)
from campus_service.features.tags.schemas import (
    StatusRead,
    SubLocationRead,
    SubLocationStatusRead,
    TagRead,
    VoteAction,
)
from campus_service.features.tags.voting import VoteLedger, VoteResult
from campus_service.features.users.schemas import ActivityAction
from campus_service.features.users.service import ActivityRecorder, UserService
from campus_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from campus_service.core.pagination import PageParams, PageResult
    from campus_service.core.settings import TagSettings
    from campus_service.features.tags.schemas import (
        StatusCreate,
        SubLocationStatusCreate,
        TagCreate,
        TagUpdate,
    )
    from campus_service.features.tags.threshold import ThresholdProvider

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


@dataclass(slots=True)
class TagChange:
    """Result of a tag mutation."""

    tag: TagRead | None = None
    status: StatusRead | None = None
    events: list[TagChangeEvent] = field(default_factory=list)


@dataclass(slots=True)
class VoteOutcome:
    result: VoteResult
    archived: bool = False
    events: list[TagChangeEvent] = field(default_factory=list)


class TagService:
    """Tag operations of one collection.

    Args:
        session: Request session; the caller commits.
        collection: Collection the service is scoped to.
        session_factory: Factory for the vote and archival transactions.
        threshold: Archived threshold provider read by the archival policy.
    """

    def __init__(
        self,
        session: AsyncSession,
        collection: TagCollection = TAGS,
        *,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        threshold: ThresholdProvider | None = None,
        fetcher: PageFetcher | None = None,
        tag_settings: TagSettings | None = None,
        repo: TagRepository | None = None,
        statuses: TagStatusRepository | None = None,
    ) -> None:
        self._session = session
        self.collection = collection
        self._session_factory = session_factory
        self._threshold = threshold
        self._fetcher = fetcher or PageFetcher()
        self._tag_settings = tag_settings
        self._repo = repo or get_tag_repository()
        self._statuses = statuses or get_status_repository()
        self._users = UserService(session)
        self._activity = ActivityRecorder(session)

    # ──────────────────────────────────────────────────────────────
    # Reads
    # ──────────────────────────────────────────────────────────────

    async def get_tag(self, tag_id: UUID) -> Tag:
        """Get a tag of this collection.

        Raises:
            NotFoundError: No such tag in this collection.
        """
        tag = await self._repo.get_in_collection(self._session, self.collection.name, tag_id)
        if tag is None:
            raise NotFoundError("Tag", {"id": str(tag_id)})
        return tag

    async def get_latest_status(self, tag_id: UUID, user_id: str | None = None) -> StatusRead:
        """Latest status of a tag, with ``hasUpVote`` when a user is given."""
        await self.get_tag(tag_id)
        status = await self._latest_status(tag_id)
        has_up_vote = None
        if user_id is not None and status.number_of_up_vote is not None:
            has_up_vote = await self._statuses.has_voted(self._session, status.id, user_id)
        return StatusRead.from_model(status, has_up_vote=has_up_vote)

    async def list_unarchived(self, params: PageParams) -> PageResult[Tag]:
        """Unarchived tags, most recently updated first."""
        return await self._fetcher.fetch(
            self._session,
            self._repo.unarchived(self.collection.name),
            PageOrder(Tag.id, Tag.last_update_time, "desc"),
            params,
            listing=f"{self.collection.name}.unarchived",
        )

    async def list_created_by(self, user_id: str, params: PageParams) -> PageResult[Tag]:
        """Tags reported by ``user_id``, newest first."""
        return await self._fetcher.fetch(
            self._session,
            self._repo.created_by(self.collection.name, user_id),
            PageOrder(Tag.id, Tag.created_at, "desc"),
            params,
            listing=f"{self.collection.name}.created_by",
        )

    async def list_statuses(self, tag_id: UUID, params: PageParams) -> PageResult[TagStatus]:
        """Status history of a tag, newest first."""
        await self.get_tag(tag_id)
        return await self._fetcher.fetch(
            self._session,
            self._statuses.history(tag_id),
            PageOrder(TagStatus.id, TagStatus.created_at, "desc"),
            params,
            listing=f"{self.collection.name}.statuses",
        )

    # ──────────────────────────────────────────────────────────────
    # Mutations
    # ──────────────────────────────────────────────────────────────

    async def add_tag(self, user_id: str, data: TagCreate) -> TagChange:
        """Create a tag with its first status."""
        mission = data.category.mission_name
        now = utcnow_millis()
        tag = Tag(
            collection=self.collection.name,
            location_name=data.location_name,
            mission=mission.value,
            sub_type_name=data.category.sub_type_name,
            target_name=data.category.target_name,
            latitude=data.coordinates.latitude,
            longitude=data.coordinates.longitude,
            geohash=geohash_encode(data.coordinates.latitude, data.coordinates.longitude),
            floor=data.floor,
            created_by=user_id,
            created_at=now,
            last_update_time=now,
            archived=False,
            view_count=0,
        )
        self._apply_street_view(tag, data)
        await self._repo.create(self._session, tag)

        status = await self._append_status(
            tag,
            status_name=data.status_name or mission.default_status,
            description=data.description,
            status_desc_name=data.status_desc_name,
            user_id=user_id,
        )
        await self._users.adjust_add_tag_count(user_id, 1)
        await self._activity.record(
            user_id, ActivityAction.ADD_TAG, tag_id=tag.id, collection=self.collection.name
        )

        snapshot = TagRead.from_model(tag)
        logger.info(
            "Tag added",
            extra={"tag_id": str(tag.id), "collection": self.collection.name, "mission": mission.value},
        )
        return TagChange(
            tag=snapshot,
            status=StatusRead.from_model(status),
            events=[TagAdded.for_tag(snapshot, user_id=user_id)],
        )

    async def update_tag(self, user_id: str, tag_id: UUID, data: TagUpdate) -> TagChange:
        """Edit a tag; only its creator may do so.

        A category change appends a status named ``data.status_name``.

        Raises:
            NotFoundError: No such tag.
            ForbiddenException: ``user_id`` did not create the tag.
            BadRequestException: Category changed without a status name.
        """
        tag = await self.get_tag(tag_id)
        self._ensure_creator(tag, user_id, "update")
        if data.category is not None and not data.status_name:
            raise BadRequestException(
                detail="statusName is required when the category changes",
                type="status-name-required",
            )

        fields = data.model_fields_set
        if data.location_name is not None:
            tag.location_name = data.location_name
        if data.coordinates is not None:
            tag.latitude = data.coordinates.latitude
            tag.longitude = data.coordinates.longitude
            tag.geohash = geohash_encode(tag.latitude, tag.longitude)
        if "floor" in fields:
            tag.floor = data.floor
        if "street_view_info" in fields:
            self._apply_street_view(tag, data)

        status = None
        if data.category is not None:
            tag.mission = data.category.mission_name.value
            tag.sub_type_name = data.category.sub_type_name
            tag.target_name = data.category.target_name
            status = await self._append_status(
                tag,
                status_name=data.status_name,
                description=data.description or CATEGORY_CHANGE_DESCRIPTION,
                user_id=user_id,
            )

        tag.last_update_time = utcnow_millis()
        await self._session.flush()
        await self._activity.record(
            user_id, ActivityAction.UPDATE_TAG, tag_id=tag.id, collection=self.collection.name
        )

        snapshot = TagRead.from_model(tag)
        lazy_logger.debug(lambda: f"service.update_tag({tag_id}) fields={sorted(fields)}")
        return TagChange(
            tag=snapshot,
            status=StatusRead.from_model(status) if status is not None else None,
            events=[TagUpdated.for_tag(snapshot, user_id=user_id)],
        )

    async def update_status(self, user_id: str, tag_id: UUID, data: StatusCreate) -> TagChange:
        """Append a status to a tag (any signed-in user)."""
        tag = await self.get_tag(tag_id)
        status = await self._append_status(
            tag,
            status_name=data.status_name,
            description=data.description,
            status_desc_name=data.status_desc_name,
            user_id=user_id,
        )
        tag.last_update_time = utcnow_millis()
        await self._session.flush()
        await self._activity.record(
            user_id, ActivityAction.UPDATE_STATUS, tag_id=tag.id, collection=self.collection.name
        )

        snapshot = TagRead.from_model(tag)
        logger.info(
            "Tag status updated",
            extra={"tag_id": str(tag_id), "status_name": status.status_name},
        )
        return TagChange(
            tag=snapshot,
            status=StatusRead.from_model(status),
            events=[TagUpdated.for_tag(snapshot, user_id=user_id)],
        )

    async def delete_tag(self, user_id: str, tag_id: UUID) -> TagChange:
        """Delete a tag with its statuses and votes; only its creator may do so."""
        tag = await self.get_tag(tag_id)
        self._ensure_creator(tag, user_id, "delete")

        self._session.expunge(tag)
        await self._repo.delete_by_id(self._session, tag_id)
        await self._users.adjust_add_tag_count(tag.created_by, -1)
        await self._activity.record(
            user_id, ActivityAction.DELETE_TAG, tag_id=tag_id, collection=self.collection.name
        )

        logger.info("Tag deleted", extra={"tag_id": str(tag_id), "collection": self.collection.name})
        return TagChange(
            events=[TagDeleted(collection=self.collection.name, tag_id=tag_id, metadata={"user_id": user_id})]
        )

    async def view_tag(self, tag_id: UUID, user_id: str | None = None) -> int:
        """Count one view; returns the new view count."""
        await self.get_tag(tag_id)
        count = await self._repo.increment_view_count(self._session, tag_id)
        if count is None:
            raise NotFoundError("Tag", {"id": str(tag_id)})
        if user_id is not None:
            await self._activity.record(
                user_id, ActivityAction.VIEW_TAG, tag_id=tag_id, collection=self.collection.name
            )
        return count

    async def vote(self, user_id: str, tag_id: UUID, action: VoteAction) -> VoteOutcome:
        """Vote on the latest status of a tag, then evaluate archival.

        The vote stays committed when the archival step fails; that error
        still propagates to the caller.
        """
        if self._session_factory is None or self._threshold is None:
            raise RuntimeError("TagService needs session_factory and threshold to vote")

        await self.get_tag(tag_id)
        status = await self._latest_status(tag_id)

        ledger = VoteLedger(self._session_factory, self._tag_settings, collection=self.collection.name)
        result = await ledger.cast_vote(status.id, user_id, action)

        archival = await ArchivalPolicy(self._session_factory, self._threshold).maybe_archive(
            result.tag_id, result.new_count
        )
        outcome = VoteOutcome(result=result, archived=archival.transitioned, events=list(archival.events))

        activity = ActivityAction.UPVOTE if action is VoteAction.UPVOTE else ActivityAction.CANCEL_UPVOTE
        await self._activity.record(user_id, activity, tag_id=tag_id, collection=self.collection.name)
        return outcome

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    async def _latest_status(self, tag_id: UUID) -> TagStatus:
        status = await self._statuses.latest(self._session, tag_id)
        if status is None:
            raise NotFoundError("TagStatus", {"tag_id": str(tag_id)})
        return status

    async def _append_status(
        self,
        tag: Tag,
        *,
        status_name: str,
        description: str | None,
        user_id: str,
        status_desc_name: str | None = None,
    ) -> TagStatus:
        """Insert a status that sorts strictly after the current latest one."""
        if self.collection.accepts_status_desc_name and description is None:
            description = status_desc_name

        created_ms = to_epoch_millis(utcnow_millis())
        previous = await self._statuses.latest(self._session, tag.id)
        if previous is not None:
            created_ms = max(created_ms, to_epoch_millis(previous.created_at) + 1)

        status = TagStatus(
            tag_id=tag.id,
            status_name=status_name,
            description=description,
            created_by=user_id,
            created_at=from_epoch_millis(created_ms),
            number_of_up_vote=initial_vote_count(Mission(tag.mission)),
        )
        await self._statuses.create(self._session, status)
        return status

    @staticmethod
    def _apply_street_view(tag: Tag, data: TagCreate | TagUpdate) -> None:
        info = data.street_view_info
        tag.pov_heading = info.pov_heading if info else None
        tag.pov_pitch = info.pov_pitch if info else None
        tag.pano_id = info.pano_id if info else None
        tag.camera_latitude = info.camera_latitude if info else None
        tag.camera_longitude = info.camera_longitude if info else None

    @staticmethod
    def _ensure_creator(tag: Tag, user_id: str, action: str) -> None:
        if tag.created_by != user_id:
            logger.info(
                "Rejected tag change by non-creator",
                extra={"tag_id": str(tag.id), "user_id": user_id, "action": action},
            )
            raise ForbiddenException(
                detail=f"Only the creator may {action} this tag",
                type="not-tag-creator",
                extra={"tag_id": str(tag.id)},
            )


class FixedTagService:
    """Fixed landmarks, their sub-locations and the sub-location status history.

    Fixed tags are seeded, never reported, so the only write is appending a
    sub-location status. Sub-location statuses are not votable.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        fetcher: PageFetcher | None = None,
        repo: FixedTagRepository | None = None,
        statuses: SubLocationStatusRepository | None = None,
    ) -> None:
        self._session = session
        self._fetcher = fetcher or PageFetcher()
        self._repo = repo or get_fixed_tag_repository()
        self._statuses = statuses or get_sub_location_status_repository()
        self._activity = ActivityRecorder(session)

    async def list_fixed_tags(self, params: PageParams) -> PageResult[FixedTag]:
        """Fixed landmarks in identifier order."""
        return await self._fetcher.fetch(
            self._session,
            self._repo.all(),
            PageOrder(FixedTag.id, direction="asc"),
            params,
            listing="fixed_tags",
        )

    async def get_fixed_tag(self, fixed_tag_id: UUID) -> FixedTag:
        """Raises NotFoundError (``fixedtag-not-found``) for an unknown id."""
        return await self._repo.get_or_raise(self._session, fixed_tag_id)

    async def list_sub_locations(self, fixed_tag_id: UUID) -> list[SubLocationRead]:
        """Sub-locations of a fixed tag, each with its latest status."""
        await self.get_fixed_tag(fixed_tag_id)
        sub_locations = await self._repo.sub_locations(self._session, fixed_tag_id)
        return [
            SubLocationRead.from_model(sub_location, await self._statuses.latest(self._session, sub_location.id))
            for sub_location in sub_locations
        ]

    async def get_sub_location(self, sub_location_id: UUID) -> FixedTagSubLocation:
        sub_location = await self._repo.get_sub_location(self._session, sub_location_id)
        if sub_location is None:
            raise NotFoundError("FixedTagSubLocation", {"id": str(sub_location_id)})
        return sub_location

    async def describe_sub_location(self, sub_location_id: UUID) -> SubLocationRead:
        sub_location = await self.get_sub_location(sub_location_id)
        return SubLocationRead.from_model(sub_location, await self._statuses.latest(self._session, sub_location.id))

    async def get_latest_status(self, sub_location_id: UUID) -> SubLocationStatus:
        """Latest status of a sub-location.

        Raises:
            NotFoundError: Unknown sub-location, or one without any status yet.
        """
        await self.get_sub_location(sub_location_id)
        status = await self._statuses.latest(self._session, sub_location_id)
        if status is None:
            raise NotFoundError("SubLocationStatus", {"sub_location_id": str(sub_location_id)})
        return status

    async def list_statuses(self, sub_location_id: UUID, params: PageParams) -> PageResult[SubLocationStatus]:
        """Status history of a sub-location, newest first."""
        await self.get_sub_location(sub_location_id)
        return await self._fetcher.fetch(
            self._session,
            self._statuses.history(sub_location_id),
            PageOrder(SubLocationStatus.id, SubLocationStatus.created_at, "desc"),
            params,
            listing="fixed_tags.sub_location_statuses",
        )

    async def add_status(
        self, user_id: str, sub_location_id: UUID, data: SubLocationStatusCreate
    ) -> SubLocationStatusRead:
        """Append a status to a sub-location (any signed-in user)."""
        sub_location = await self.get_sub_location(sub_location_id)

        created_ms = to_epoch_millis(utcnow_millis())
        previous = await self._statuses.latest(self._session, sub_location.id)
        if previous is not None:
            created_ms = max(created_ms, to_epoch_millis(previous.created_at) + 1)

        status = SubLocationStatus(
            sub_location_id=sub_location.id,
            status_name=data.status_name,
            description=data.description,
            created_by=user_id,
            created_at=from_epoch_millis(created_ms),
        )
        await self._statuses.create(self._session, status)
        await self._activity.record(
            user_id,
            ActivityAction.UPDATE_FIXED_TAG_STATUS,
            tag_id=sub_location.fixed_tag_id,
            collection="fixed_tags",
        )

        logger.info(
            "Sub-location status updated",
            extra={"sub_location_id": str(sub_location_id), "status_name": status.status_name},
        )
        return SubLocationStatusRead.from_model(status)
