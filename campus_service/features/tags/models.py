"""Database models for the tags feature.

Tag
 └── TagStatus (append-only history, latest = highest created_at)
      └── UpVote (one per status and user, existence only)

FixedTag
 └── FixedTagSubLocation (floor or store)
      └── SubLocationStatus (append-only history, no votes)

TagStatus rows are versioned (``version_id_col``): an UPDATE issued by the
ORM carries ``WHERE version = :seen`` and fails with StaleDataError when a
concurrent transaction got there first. The vote ledger relies on this to
keep ``number_of_up_vote`` equal to the number of UpVote rows.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from campus_service.core.database import Base, CreatedAtMixin, UUIDPKMixin, utcnow_millis


class Tag(Base, UUIDPKMixin, CreatedAtMixin):
    """A reported facility or location."""

    __tablename__ = "tags"
    __table_args__ = (
        Index("ix_tags_collection_archived_last_update", "collection", "archived", "last_update_time"),
        Index("ix_tags_collection_created_by_created_at", "collection", "created_by", "created_at"),
    )

    collection: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="tags",
        comment="Tag collection (tags, research)",
    )
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Category
    mission: Mapped[str] = mapped_column(String(32), nullable=False, comment="Mission name")
    sub_type_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    target_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    geohash: Mapped[str] = mapped_column(String(12), nullable=False, index=True)
    floor: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Street view camera pose
    pov_heading: Mapped[float | None] = mapped_column(Float, nullable=True)
    pov_pitch: Mapped[float | None] = mapped_column(Float, nullable=True)
    pano_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    camera_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    camera_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_by: Mapped[str] = mapped_column(String(128), nullable=False, comment="Creating user id")
    last_update_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow_millis,
        comment="Bumped on edits and status updates (not on views or votes)",
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, location={self.location_name!r}, archived={self.archived})>"


class TagStatus(Base, UUIDPKMixin, CreatedAtMixin):
    """One immutable history entry of a tag.

    ``number_of_up_vote`` is None for statuses that cannot be voted on.
    """

    __tablename__ = "tag_statuses"
    __table_args__ = (Index("ix_tag_statuses_tag_id_created_at", "tag_id", "created_at"),)

    tag_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
    )
    status_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    number_of_up_vote: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<TagStatus(id={self.id}, name={self.status_name!r}, votes={self.number_of_up_vote})>"


class UpVote(Base, UUIDPKMixin, CreatedAtMixin):
    """Marker that a user upvoted a status."""

    __tablename__ = "tag_upvotes"
    __table_args__ = (UniqueConstraint("status_id", "user_id", name="uq_tag_upvotes_status_user"),)

    status_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tag_statuses.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)


class TagSetting(Base):
    """Key/value integer settings of the tags feature (archived threshold)."""

    __tablename__ = "tag_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow_millis,
        onupdate=utcnow_millis,
    )


class FixedTag(Base, UUIDPKMixin, CreatedAtMixin):
    """Static landmark seeded by operators, enumerated in identifier order."""

    __tablename__ = "fixed_tags"

    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    floor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)


class FixedTagSubLocation(Base, UUIDPKMixin, CreatedAtMixin):
    """A floor of a fixed tag, or a store on one of its floors."""

    __tablename__ = "sub_locations"

    fixed_tag_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("fixed_tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False, comment="floor or restaurant-store")
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    floor: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<FixedTagSubLocation(id={self.id}, type={self.type!r}, floor={self.floor!r})>"


class SubLocationStatus(Base, UUIDPKMixin, CreatedAtMixin):
    """Status history entry of a sub-location (crowdedness); never voted on."""

    __tablename__ = "sub_location_statuses"
    __table_args__ = (
        Index("ix_sub_location_statuses_sub_location_id_created_at", "sub_location_id", "created_at"),
    )

    sub_location_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sub_locations.id", ondelete="CASCADE"),
        nullable=False,
    )
    status_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
