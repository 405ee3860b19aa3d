"""Database models for user profiles and activity."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from campus_service.core.database import Base, CreatedAtMixin, UUIDPKMixin, utcnow_millis


class UserProfile(Base):
    """Per-user flags and counters, created on first access."""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    has_read_guide: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    add_tag_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of tags the user reported and has not deleted",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow_millis,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow_millis,
        onupdate=utcnow_millis,
    )

    def __repr__(self) -> str:
        return f"<UserProfile(user_id={self.user_id!r}, add_tag_count={self.add_tag_count})>"


class UserActivity(Base, UUIDPKMixin, CreatedAtMixin):
    """Append-only log of user actions on tags.

    ``tag_id`` is not a foreign key: the log outlives deleted tags.
    """

    __tablename__ = "user_activities"
    __table_args__ = (Index("ix_user_activities_user_id_created_at", "user_id", "created_at"),)

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    collection: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tag_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
