"""HTTP client configuration models."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt


class RateLimitConfig(BaseModel):
    """Leaky-bucket style client-side rate limiting."""

    model_config = ConfigDict(extra="forbid")

    max_calls: PositiveInt = Field(
        default=10,
        description="Maximum number of calls allowed within the configured period.",
    )
    period: PositiveFloat = Field(
        default=1.0,
        description="Time window in seconds for the rate limit.",
    )


class HTTPClientConfig(BaseModel):
    """Configuration for the transport used by the proxy clients."""

    model_config = ConfigDict(extra="forbid")

    timeout_sec: PositiveFloat = Field(
        default=60.0, description="Total request timeout in seconds."
    )
    connect_timeout_sec: PositiveFloat = Field(
        default=15.0,
        description="Connection timeout in seconds.",
    )
    read_timeout_sec: PositiveFloat = Field(
        default=60.0,
        description="Socket read timeout in seconds.",
    )
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    rate_limit_jitter: bool = Field(
        default=True,
        description="Whether to add jitter to rate limited calls to avoid thundering herds.",
    )
    headers: Mapping[str, str] = Field(
        default_factory=lambda: {
            "User-Agent": "resource-pager/1.0 (UnifiedAPIClient)",
            "Accept-Encoding": "gzip, deflate",
        },
        description="Default headers that will be sent with each request.",
    )
