"""Pydantic configuration models."""

from .http import HTTPClientConfig, RateLimitConfig
from .logging import LoggingConfig
from .proxy import ProxyClientConfig

__all__ = [
    "HTTPClientConfig",
    "LoggingConfig",
    "ProxyClientConfig",
    "RateLimitConfig",
]
