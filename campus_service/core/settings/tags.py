"""Tag feature settings: archival threshold and vote transaction tuning.

Environment variables use TAGS_ prefix.
Example: TAGS_DEFAULT_ARCHIVED_THRESHOLD=10, TAGS_VOTE_MAX_ATTEMPTS=5
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TagSettings(BaseSettings):
    """Settings for tag voting and archival."""

    default_archived_threshold: int = Field(
        default=10,
        ge=0,
        description="Archive threshold used until the settings row has been read",
    )
    threshold_refresh_seconds: float = Field(
        default=5.0,
        gt=0,
        le=3600,
        description="Polling interval of the archived-threshold watcher (staleness window)",
    )
    threshold_watch_enabled: bool = Field(
        default=True,
        description="Run the background threshold watcher during the app lifespan",
    )
    vote_max_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum attempts for a vote transaction on write conflicts",
    )
    vote_retry_initial_delay: float = Field(
        default=0.01,
        ge=0,
        le=5,
        description="Initial backoff between conflicting vote transaction attempts (seconds)",
    )
    vote_retry_max_delay: float = Field(default=0.25, ge=0, le=30)

    model_config = SettingsConfigDict(
        env_prefix="TAGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
