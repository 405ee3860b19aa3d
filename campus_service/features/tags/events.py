"""Tag change events.

Each event carries the collection and the full tag snapshot taken after the
write committed (``deleted`` carries only the identifier). ``change`` is the
short name used on the realtime stream: added, updated, archived, deleted.
"""

from __future__ import annotations

from typing import Any, ClassVar
from uuid import UUID

from campus_service.core.events import DomainEvent
from campus_service.features.tags.schemas import TagRead


class TagChangeEvent(DomainEvent):
    """Base of all tag change events."""

    change: ClassVar[str] = ""

    collection: str
    tag_id: UUID
    tag: TagRead | None = None

    def to_message(self) -> dict[str, Any]:
        return {
            "event": self.change,
            "eventId": self.event_id,
            "collection": self.collection,
            "tagId": str(self.tag_id),
            "tag": self.tag.model_dump(mode="json", by_alias=True) if self.tag else None,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def for_tag(cls, snapshot: TagRead, **metadata: Any) -> TagChangeEvent:
        return cls(
            collection=snapshot.collection,
            tag_id=snapshot.id,
            tag=snapshot,
            metadata=metadata,
        )


class TagAdded(TagChangeEvent):
    event_type: ClassVar[str] = "tag.added"
    change: ClassVar[str] = "added"


class TagUpdated(TagChangeEvent):
    event_type: ClassVar[str] = "tag.updated"
    change: ClassVar[str] = "updated"


class TagArchived(TagChangeEvent):
    event_type: ClassVar[str] = "tag.archived"
    change: ClassVar[str] = "archived"


class TagDeleted(TagChangeEvent):
    event_type: ClassVar[str] = "tag.deleted"
    change: ClassVar[str] = "deleted"


__all__ = [
    "TagAdded",
    "TagArchived",
    "TagChangeEvent",
    "TagDeleted",
    "TagUpdated",
]
