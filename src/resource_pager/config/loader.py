"""Configuration loading utilities."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, cast

import yaml

from resource_pager.config.environment import (
    ResourcePagerSettings,
    build_env_override_mapping,
    load_environment_settings,
)
from resource_pager.config.models import ProxyClientConfig
from resource_pager.core.log_events import LogEvents
from resource_pager.core.logger import UnifiedLogger

__all__ = ["load_config", "load_raw_config"]


def load_raw_config(path: Path) -> dict[str, Any]:
    """Read a YAML file that must contain a mapping at its top level."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, MutableMapping):
        msg = f"Configuration file must produce a mapping: {path}"
        raise TypeError(msg)
    return {str(key): value for key, value in data.items()}


def load_config(
    path: str | Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    settings: ResourcePagerSettings | None = None,
) -> ProxyClientConfig:
    """Build a validated :class:`ProxyClientConfig`.

    Layers, lowest precedence first: the YAML file (``path`` or
    ``RESOURCE_PAGER_CONFIG``), environment variables, explicit ``overrides``.
    """

    env = settings or load_environment_settings()
    payload: dict[str, Any] = {}

    config_path = Path(path).expanduser() if path is not None else env.config_path
    if config_path is not None:
        payload = load_raw_config(config_path)
        UnifiedLogger.get(__name__).debug(LogEvents.CONFIG_FILE_LOADED, path=str(config_path))

    env_overrides = build_env_override_mapping(env)
    if env_overrides:
        payload = _deep_merge(payload, env_overrides)
    if overrides:
        payload = _deep_merge(payload, overrides)
    return ProxyClientConfig.model_validate(payload)


def _deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge two mapping-like objects."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], MutableMapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(
                cast(Mapping[str, Any], merged[key]),
                cast(Mapping[str, Any], value),
            )
        else:
            merged[key] = value
    return merged
