"""Cursor encoding and decoding for pagination.

Cursors are opaque strings identifying the last entity of a page. Two forms
are produced, depending on the ordering of the listing:

1. Identifier only, for listings ordered by identifier (and accepted by every
   listing for compatibility with older clients):
       "0d6f1c0e-3a0b-4f0e-9a57-6f3c1d2b9e41"

2. Epoch milliseconds of the sort timestamp plus identifier, for listings
   ordered by a timestamp:
       "1760870400123,0d6f1c0e-3a0b-4f0e-9a57-6f3c1d2b9e41"

The second form can be seeked without loading the anchor entity, so it keeps
working after that entity has been deleted.

Decoding is lenient: the empty string and malformed cursors both decode to
``None`` ("start from the beginning").
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from campus_service.core.database.base import from_epoch_millis, to_epoch_millis
from campus_service.infra.logging import get_lazy_logger

_lazy = get_lazy_logger(__name__)

SEPARATOR = ","


class CursorPosition(BaseModel):
    """Decoded cursor: the anchor entity and, if known, its sort value.

    Attributes:
        entity_id: Identifier of the last entity of the previous page.
        sort_millis: Epoch milliseconds of its sort timestamp, or None for
            identifier-only cursors.
    """

    entity_id: UUID
    sort_millis: int | None = None

    model_config = {"frozen": True}

    @property
    def sort_value(self) -> datetime | None:
        if self.sort_millis is None:
            return None
        return from_epoch_millis(self.sort_millis)


class CursorCodec:
    """Encode and decode pagination cursors for one ordering.

    Usage:
        codec = CursorCodec(sort_field="last_update_time")
        cursor = codec.encode(tag)      # "1760870400123,<uuid>"
        position = CursorCodec.decode(cursor)

        CursorCodec().encode(fixed_tag)  # "<uuid>"
    """

    def __init__(self, sort_field: str | None = None, id_field: str = "id") -> None:
        """Initialize codec.

        Args:
            sort_field: Timestamp attribute the listing is ordered by, or
                None when the listing is ordered by identifier.
            id_field: Identifier attribute.
        """
        self.sort_field = sort_field
        self.id_field = id_field

    def encode(self, entity: Any) -> str:
        """Encode the position of ``entity`` (the last item of a non-empty page)."""
        entity_id = getattr(entity, self.id_field)
        if self.sort_field is None:
            return str(entity_id)
        millis = to_epoch_millis(getattr(entity, self.sort_field))
        return f"{millis}{SEPARATOR}{entity_id}"

    @staticmethod
    def decode(cursor: str | None) -> CursorPosition | None:
        """Decode a cursor string.

        Returns:
            CursorPosition, or None for an empty or malformed cursor.
        """
        if not cursor or not cursor.strip():
            return None

        parts = cursor.strip().split(SEPARATOR)
        try:
            if len(parts) == 1:
                return CursorPosition(entity_id=UUID(parts[0]))
            if len(parts) == 2:
                millis_text, id_text = parts
                if not millis_text.lstrip("-").isdigit():
                    raise ValueError(millis_text)
                millis = int(millis_text)
                # Outside the datetime range
                from_epoch_millis(millis)
                return CursorPosition(entity_id=UUID(id_text), sort_millis=millis)
        except (ValueError, OverflowError):
            pass

        _lazy.debug(lambda: f"Ignoring malformed cursor {cursor!r}")
        return None


__all__ = ["CursorCodec", "CursorPosition"]
