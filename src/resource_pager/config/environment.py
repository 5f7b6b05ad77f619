"""Environment-driven settings for resource_pager.

Reads ``.env`` and the process environment through pydantic-settings and turns
the short variables into overrides of the YAML configuration tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["ResourcePagerSettings", "load_environment_settings", "build_env_override_mapping"]


class ResourcePagerSettings(BaseSettings):
    """Typed view of the ``RESOURCE_PAGER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: SecretStr | None = Field(default=None, alias="RESOURCE_PAGER_API_KEY")
    region: str | None = Field(default=None, alias="RESOURCE_PAGER_REGION")
    base_url: str | None = Field(default=None, alias="RESOURCE_PAGER_BASE_URL")
    config_path: Path | None = Field(default=None, alias="RESOURCE_PAGER_CONFIG")
    log_level: str | None = Field(default=None, alias="RESOURCE_PAGER_LOG_LEVEL")

    @field_validator("region", "base_url", "log_level")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator("config_path")
    @classmethod
    def _resolve_config_path(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return value.expanduser().resolve()


def load_environment_settings(*, env_file: Path | None = None) -> ResourcePagerSettings:
    """Load and validate settings, optionally from an explicit ``.env`` file."""

    init_kwargs: dict[str, Any] = {}
    if env_file is not None:
        init_kwargs["_env_file"] = env_file
    return ResourcePagerSettings(**init_kwargs)


def build_env_override_mapping(settings: ResourcePagerSettings) -> dict[str, Any]:
    """Return nested configuration overrides for the variables that are set."""

    overrides: dict[str, Any] = {}
    if settings.api_key is not None:
        overrides["api_key"] = settings.api_key.get_secret_value()
    if settings.region is not None:
        overrides["region"] = settings.region
    if settings.base_url is not None:
        overrides["base_url"] = settings.base_url
    if settings.log_level is not None:
        overrides["logging"] = {"level": settings.log_level}
    return overrides
