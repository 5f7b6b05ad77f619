"""Configuration models and loaders."""

from .environment import ResourcePagerSettings, load_environment_settings
from .loader import load_config, load_raw_config
from .models import HTTPClientConfig, LoggingConfig, ProxyClientConfig, RateLimitConfig

__all__ = [
    "HTTPClientConfig",
    "LoggingConfig",
    "ProxyClientConfig",
    "RateLimitConfig",
    "ResourcePagerSettings",
    "load_config",
    "load_environment_settings",
    "load_raw_config",
]
