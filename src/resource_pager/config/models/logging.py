"""Logging configuration models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from resource_pager.core.logger import LogConfig, LogFormat


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO", description="Log level for UnifiedLogger.")
    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log format (json, key_value).",
    )

    def to_log_config(self) -> LogConfig:
        return LogConfig(level=self.level, format=self.format)
