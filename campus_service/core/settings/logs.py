"""Logging configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Structured logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=INFO, LOG_JSON=true, LOG_FILE_ENABLED=false
    """

    service_name: str = Field(
        default="campus-service",
        description="Service name to include in log records (static field in JSON)",
    )
    level: LogLevel = Field(
        default="INFO",
        description="Root logger level (DEBUG|INFO|WARNING|ERROR|CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        alias="LOG_JSON",
        description="Enable JSON Lines (JSONL) formatted structured logs",
    )
    console_enabled: bool = Field(default=True, description="Enable console (stderr) logging")
    file_enabled: bool = Field(default=False, description="Enable rotating file logging")
    file_path: Path = Field(
        default=Path("logs/campus-service.log.jsonl"),
        description="Path to log file when file logging is enabled",
    )
    file_max_bytes: int = Field(default=10_485_760, ge=1024, le=1_073_741_824)
    file_backup_count: int = Field(default=5, ge=0, le=100)
    include_context: bool = Field(
        default=True,
        description="Inject contextvars (request_id, user_id) into every record",
    )
    uvicorn_level: LogLevel = Field(default="INFO", description="Level for uvicorn loggers")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Convert settings to configure_logging() keyword arguments."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "console_enabled": self.console_enabled,
            "file_path": self.file_path if self.file_enabled else None,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
            "include_context": self.include_context,
            "service_name": self.service_name,
            "uvicorn_level": self.uvicorn_level,
        }
