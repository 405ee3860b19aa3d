"""WebSocket configuration settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WebSocketSettings(BaseSettings):
    """WebSocket change-stream settings.

    Environment variables use WS_ prefix.
    Example: WS_ENABLED=false
    """

    enabled: bool = Field(default=True, description="Expose the realtime tag change stream")
    max_connections: int = Field(
        default=10000,
        ge=1,
        le=100000,
        description="Maximum concurrent WebSocket connections per instance",
    )
    send_timeout: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Seconds to wait for a single send before dropping the connection",
    )

    model_config = SettingsConfigDict(
        env_prefix="WS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
