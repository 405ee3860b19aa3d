"""Domain event base class.

Domain events are immutable records of something that happened. Services
return them instead of publishing them; the API layer hands them to an
EventDispatcher once the corresponding transaction has committed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from campus_service.core.settings import get_app_settings


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Subclasses must define:
    - event_type: ClassVar[str] - Unique event type identifier (e.g., "tag.archived")
    - event_version: ClassVar[int] - Schema version for evolution (default: 1)

    Example:
        class TagArchived(DomainEvent):
            event_type: ClassVar[str] = "tag.archived"

            tag_id: str

    Attributes:
        event_id: Unique identifier for this event instance
        timestamp: When the event occurred (UTC)
        service: Name of the service that generated the event
        metadata: Additional context (user_id, request_id, etc.)
    """

    event_type: ClassVar[str] = "domain.event"
    event_version: ClassVar[int] = 1

    event_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique event identifier",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Event timestamp in UTC",
    )
    service: str = Field(
        default_factory=lambda: get_app_settings().service_name,
        description="Service that generated the event",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event metadata",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Validate subclass has required class variables."""
        super().__init_subclass__(**kwargs)
        # Intermediate hierarchies don't define event_type
        if cls.__name__ in ("DomainEvent", "TagChangeEvent"):
            return
        if cls.event_type == "domain.event":
            msg = f"{cls.__name__} must define 'event_type' class variable"
            raise TypeError(msg)

    def to_message(self) -> dict[str, Any]:
        """JSON-ready representation used by transports."""
        return {
            "event_type": self.event_type,
            "event_version": self.event_version,
            **self.model_dump(mode="json"),
        }
