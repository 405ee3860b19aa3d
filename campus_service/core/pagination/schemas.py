"""Pagination request/response schemas.

Wire contract:
    request:  ?pageSize=10&cursor=
    response: {"items": [...], "cursor": "...", "empty": false}

``empty`` is true exactly when ``items`` is empty, and ``cursor`` is then the
empty string. A non-empty final page still carries a cursor; requesting the
next page with it yields an empty page.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")
S = TypeVar("S")


class PageParams(BaseModel):
    """Client pagination parameters.

    ``page_size`` above the configured maximum is clamped, not rejected.
    """

    page_size: int | None = Field(default=None, ge=1, alias="pageSize")
    cursor: str = Field(default="", description="Opaque cursor from the previous page")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


@dataclass(slots=True)
class PageResult(Generic[T]):
    """One fetched page of ORM entities."""

    items: Sequence[T] = field(default_factory=list)
    cursor: str = ""

    @property
    def empty(self) -> bool:
        return len(self.items) == 0

    def map(self, fn: Callable[[T], S]) -> PageResult[S]:
        return PageResult(items=[fn(item) for item in self.items], cursor=self.cursor)


class Page(BaseModel, Generic[T]):
    """Serialized page returned by list endpoints."""

    items: list[T] = Field(default_factory=list, description="Items of this page")
    cursor: str = Field(default="", description="Cursor for the next page; empty when the page is empty")
    empty: bool = Field(description="True when this page has no items (pagination finished)")

    @classmethod
    def from_result(cls, result: PageResult[Any], convert: Callable[[Any], T]) -> Page[T]:
        return cls(
            items=[convert(item) for item in result.items],
            cursor=result.cursor,
            empty=result.empty,
        )


__all__ = ["Page", "PageParams", "PageResult"]
