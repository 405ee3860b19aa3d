"""Pydantic schemas for the tags feature.

Field names are camelCase on the wire (``locationName``, ``createUserId``),
snake_case in Python.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from campus_service.features.tags.missions import Mission
from campus_service.features.tags.models import FixedTag, FixedTagSubLocation, SubLocationStatus, Tag, TagStatus


def _utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VoteAction(StrEnum):
    """Vote ledger actions."""

    UPVOTE = "UPVOTE"
    CANCEL_UPVOTE = "CANCEL_UPVOTE"


class SubLocationType(StrEnum):
    """Kinds of place inside a fixed tag."""

    FLOOR = "floor"
    RESTAURANT_STORE = "restaurant-store"


# ──────────────────────────────────────────────────────────────
# Value objects
# ──────────────────────────────────────────────────────────────


class Coordinates(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Category(CamelModel):
    """Mission classification with optional sub-type and target."""

    mission_name: Mission
    sub_type_name: str | None = Field(default=None, max_length=100)
    target_name: str | None = Field(default=None, max_length=100)


class StreetViewInfo(CamelModel):
    pov_heading: float
    pov_pitch: float
    pano_id: str = Field(alias="panoID", max_length=128)
    camera_latitude: float = Field(ge=-90, le=90)
    camera_longitude: float = Field(ge=-180, le=180)


# ──────────────────────────────────────────────────────────────
# Requests
# ──────────────────────────────────────────────────────────────


class TagCreate(CamelModel):
    """Payload for reporting a new tag.

    ``status_name`` defaults to the mission's default status.
    """

    location_name: str = Field(min_length=1, max_length=255)
    category: Category
    coordinates: Coordinates
    floor: str | None = Field(default=None, max_length=20)
    street_view_info: StreetViewInfo | None = None
    status_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    status_desc_name: str | None = Field(default=None, max_length=255)


class TagUpdate(CamelModel):
    """Partial tag update; only provided fields change.

    A category change appends a new status, which needs ``status_name``.
    """

    location_name: str | None = Field(default=None, min_length=1, max_length=255)
    category: Category | None = None
    coordinates: Coordinates | None = None
    floor: str | None = Field(default=None, max_length=20)
    street_view_info: StreetViewInfo | None = None
    status_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None


class StatusCreate(CamelModel):
    status_name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    status_desc_name: str | None = Field(default=None, max_length=255)


class SubLocationStatusCreate(CamelModel):
    status_name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class VoteRequest(CamelModel):
    action: VoteAction


class ThresholdUpdate(CamelModel):
    archived_threshold: int = Field(ge=0)


# ──────────────────────────────────────────────────────────────
# Responses
# ──────────────────────────────────────────────────────────────


class TagRead(CamelModel):
    """Full tag snapshot (also carried by change events)."""

    id: UUID
    collection: str
    location_name: str
    category: Category
    coordinates: Coordinates
    geohash: str
    floor: str | None = None
    street_view_info: StreetViewInfo | None = None
    created_at: datetime = Field(alias="createTime")
    last_update_time: datetime
    created_by: str = Field(alias="createUserId")
    archived: bool
    view_count: int

    @classmethod
    def from_model(cls, tag: Tag) -> TagRead:
        street_view = None
        if tag.pano_id is not None:
            street_view = StreetViewInfo(
                pov_heading=tag.pov_heading,
                pov_pitch=tag.pov_pitch,
                pano_id=tag.pano_id,
                camera_latitude=tag.camera_latitude,
                camera_longitude=tag.camera_longitude,
            )
        return cls(
            id=tag.id,
            collection=tag.collection,
            location_name=tag.location_name,
            category=Category(
                mission_name=Mission(tag.mission),
                sub_type_name=tag.sub_type_name,
                target_name=tag.target_name,
            ),
            coordinates=Coordinates(latitude=tag.latitude, longitude=tag.longitude),
            geohash=tag.geohash,
            floor=tag.floor,
            street_view_info=street_view,
            created_at=_utc(tag.created_at),
            last_update_time=_utc(tag.last_update_time),
            created_by=tag.created_by,
            archived=tag.archived,
            view_count=tag.view_count,
        )


class StatusRead(CamelModel):
    """Status history entry.

    ``has_up_vote`` is only filled in for the latest status when the request
    carries a user.
    """

    id: UUID
    tag_id: UUID
    status_name: str
    description: str | None = None
    created_at: datetime = Field(alias="createTime")
    created_by: str = Field(alias="createUserId")
    number_of_up_vote: int | None = Field(default=None, alias="numberOfUpVote")
    has_up_vote: bool | None = Field(default=None, alias="hasUpVote")

    @classmethod
    def from_model(cls, status: TagStatus, *, has_up_vote: bool | None = None) -> StatusRead:
        return cls(
            id=status.id,
            tag_id=status.tag_id,
            status_name=status.status_name,
            description=status.description,
            created_at=_utc(status.created_at),
            created_by=status.created_by,
            number_of_up_vote=status.number_of_up_vote,
            has_up_vote=has_up_vote,
        )


class VoteResponse(CamelModel):
    """Vote outcome: ``{entityId, newCount, hasVoted}``."""

    entity_id: UUID
    new_count: int
    has_voted: bool


class ThresholdRead(CamelModel):
    archived_threshold: int


class FixedTagRead(CamelModel):
    id: UUID
    location_name: str
    floor: str | None = None
    coordinates: Coordinates

    @classmethod
    def from_model(cls, fixed_tag: FixedTag) -> FixedTagRead:
        return cls(
            id=fixed_tag.id,
            location_name=fixed_tag.location_name,
            floor=fixed_tag.floor,
            coordinates=Coordinates(latitude=fixed_tag.latitude, longitude=fixed_tag.longitude),
        )


class SubLocationStatusRead(CamelModel):
    id: UUID
    sub_location_id: UUID
    status_name: str
    description: str | None = None
    created_at: datetime = Field(alias="createTime")
    created_by: str = Field(alias="createUserId")

    @classmethod
    def from_model(cls, status: SubLocationStatus) -> SubLocationStatusRead:
        return cls(
            id=status.id,
            sub_location_id=status.sub_location_id,
            status_name=status.status_name,
            description=status.description,
            created_at=_utc(status.created_at),
            created_by=status.created_by,
        )


class SubLocationRead(CamelModel):
    """A floor or store of a fixed tag with its latest status (None before the first one)."""

    id: UUID
    fixed_tag_id: UUID
    type: SubLocationType
    name: str | None = None
    floor: str | None = None
    status: SubLocationStatusRead | None = None

    @classmethod
    def from_model(
        cls, sub_location: FixedTagSubLocation, status: SubLocationStatus | None = None
    ) -> SubLocationRead:
        return cls(
            id=sub_location.id,
            fixed_tag_id=sub_location.fixed_tag_id,
            type=SubLocationType(sub_location.type),
            name=sub_location.name,
            floor=sub_location.floor,
            status=SubLocationStatusRead.from_model(status) if status is not None else None,
        )
