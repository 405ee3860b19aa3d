"""Cursor-based (keyset) pagination.

    fetcher = PageFetcher()
    result = await fetcher.fetch(session, stmt, PageOrder(Tag.id, Tag.last_update_time), params)
    return Page[TagRead].from_result(result, TagRead.from_model)

Cursors are opaque strings that clients pass back unchanged.
"""

from campus_service.core.pagination.cursor import CursorCodec, CursorPosition
from campus_service.core.pagination.fetcher import PageFetcher, PageOrder
from campus_service.core.pagination.schemas import Page, PageParams, PageResult

__all__ = [
    "CursorCodec",
    "CursorPosition",
    "Page",
    "PageFetcher",
    "PageOrder",
    "PageParams",
    "PageResult",
]
