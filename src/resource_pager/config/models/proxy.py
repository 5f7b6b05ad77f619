"""Top-level configuration of a proxy client."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from resource_pager.config.models.http import HTTPClientConfig
from resource_pager.config.models.logging import LoggingConfig
from resource_pager.core.urls import Region


class ProxyClientConfig(BaseModel):
    """Credentials, region and transport settings for :class:`ProxyClient`."""

    model_config = ConfigDict(extra="forbid")

    api_key: SecretStr = Field(..., description="Application API key (a GUID).")
    region: Region = Field(default=Region.US, description="Deployment region of the API.")
    base_url: str | None = Field(
        default=None,
        description="Explicit API root, replacing the region derived host.",
    )
    expiration_minutes: int = Field(
        default=60,
        ge=1,
        le=120,
        description="Lifetime requested for each access token.",
    )
    auto_refresh: bool = Field(
        default=True,
        description="Request a new access token once the current one expires.",
    )
    http: HTTPClientConfig = Field(default_factory=HTTPClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("api_key")
    @classmethod
    def _validate_api_key(cls, value: SecretStr) -> SecretStr:
        """Require the API key to be a GUID string."""
        try:
            UUID(value.get_secret_value())
        except ValueError as exc:
            msg = "api_key must be a valid GUID string"
            raise ValueError(msg) from exc
        return value

    @field_validator("region", mode="before")
    @classmethod
    def _normalize_region(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value
