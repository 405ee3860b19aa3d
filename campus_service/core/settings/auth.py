"""Authentication settings.

Tokens arrive in the ``X-Auth-Token`` header and are validated against an
external identity service. In mock mode the token value itself is taken as
the user identifier, which keeps local development and tests self-contained.

Environment variables use AUTH_ prefix.
"""

from __future__ import annotations

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Identity service client settings."""

    service_url: AnyUrl | None = Field(
        default=None,
        description="Base URL of the identity service (e.g., https://auth.campus.local)",
    )
    token_validation_endpoint: str = Field(
        default="/token/{token}",
        description="Path template used to resolve a token to a user",
    )
    token_header: str = Field(default="X-Auth-Token", description="Header carrying the token")
    request_timeout: float = Field(default=5.0, gt=0, le=60)
    verify_ssl: bool = Field(default=True)

    mock_mode: bool = Field(
        default=False,
        description="Treat the presented token as the user id (development/testing only)",
    )
    admin_user_ids: list[str] = Field(
        default_factory=list,
        description="User ids allowed to change the archived threshold",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Whether tokens can be validated at all."""
        return self.mock_mode or self.service_url is not None
