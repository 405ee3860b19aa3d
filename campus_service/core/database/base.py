"""Declarative base and mixins shared by all models.

Timestamps are timezone-aware UTC truncated to whole milliseconds. Cursors
carry epoch milliseconds, so a value stored with finer precision could not be
seeked exactly.

Examples:
    class Tag(Base, UUIDPKMixin, CreatedAtMixin):
        __tablename__ = "tags"
        location_name: Mapped[str] = mapped_column(String(255))
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# Consistent naming convention for database constraints
# Ensures predictable names for migrations and schema management
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utcnow_millis() -> datetime:
    """Current UTC time truncated to millisecond precision."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds.

    Naive values are taken as UTC; SQLite hands timestamps back without tzinfo.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - EPOCH) // timedelta(milliseconds=1)


def from_epoch_millis(millis: int) -> datetime:
    """Inverse of to_epoch_millis(), exact (no float rounding)."""
    return EPOCH + timedelta(milliseconds=millis)


class Base(DeclarativeBase):
    """Declarative base with automatic table naming.

    Provides:
    - Consistent constraint naming via NAMING_CONVENTION
    - Automatic table name generation from class name (lowercase)

    The automatic table naming can be overridden by setting __tablename__
    explicitly on the model class.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()


class UUIDPKMixin:
    """UUID v4 primary key.

    Identifiers are opaque to clients and double as the tie-breaker of every
    cursor ordering.
    """

    __allow_unmapped__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
        comment="UUID v4 primary key",
    )


class CreatedAtMixin:
    """Immutable creation timestamp (UTC, millisecond precision)."""

    __allow_unmapped__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow_millis,
        nullable=False,
        index=True,
        comment="Timestamp of record creation",
    )


__all__ = [
    "Base",
    "CreatedAtMixin",
    "NAMING_CONVENTION",
    "UUIDPKMixin",
    "from_epoch_millis",
    "to_epoch_millis",
    "utcnow_millis",
]
