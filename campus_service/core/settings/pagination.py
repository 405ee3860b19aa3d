"""Pagination settings for list endpoints.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_PAGE_SIZE=10, PAGINATION_MAX_PAGE_SIZE=30
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StaleCursorPolicy = Literal["error", "restart"]


class PaginationSettings(BaseSettings):
    """Cursor pagination configuration settings.

    Attributes:
        default_page_size: Page size used when the client sends none.
        max_page_size: Hard cap. Larger requests are silently clamped.
        stale_cursor_policy: What to do when an identifier cursor points at
            an entity that no longer exists. ``error`` raises
            StaleCursorException, ``restart`` serves the first page.
    """

    default_page_size: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default page size when pageSize is not specified",
    )
    max_page_size: int = Field(
        default=30,
        ge=1,
        le=1000,
        description="Maximum page size (requests above are capped, not rejected)",
    )
    stale_cursor_policy: StaleCursorPolicy = Field(
        default="error",
        description="Handling of identifier cursors whose entity was deleted",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationSettings:
        if self.default_page_size > self.max_page_size:
            msg = "default_page_size must not exceed max_page_size"
            raise ValueError(msg)
        return self
