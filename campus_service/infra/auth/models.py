"""Authentication data models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """User resolved from an ``X-Auth-Token``.

    Attributes:
        user_id: Identity service uid.
        is_admin: Listed in ``AUTH_ADMIN_USER_IDS``.
    """

    user_id: str = Field(min_length=1)
    is_admin: bool = False

    model_config = ConfigDict(frozen=True)


class TokenInfo(BaseModel):
    """Identity service response for ``GET /token/{token}``."""

    uid: str = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")
