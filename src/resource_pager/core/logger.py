"""Structured logging shared by the transport, the paging engine and the CLI.

Everything logs through structlog on top of the standard ``logging`` module so
that applications embedding the library keep control of handlers. Per-call
context such as the resource being paged is bound with
:meth:`UnifiedLogger.scoped` and merged into every event emitted inside it.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, MutableMapping, Sequence
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Final, cast

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    get_contextvars,
    unbind_contextvars,
)
from structlog.exceptions import DropEvent
from structlog.stdlib import BoundLogger

__all__ = ["LogFormat", "LogConfig", "UnifiedLogger"]


class LogFormat(str, Enum):
    """Supported output formats for the renderer."""

    JSON = "json"
    KEY_VALUE = "key_value"


_ROOT_LOGGER: Final[str] = "resource_pager"
_REDACTED: Final[str] = "***REDACTED***"

# structlog method name -> stdlib level used for filtering
_METHOD_LEVELS: Mapping[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "exception": logging.ERROR,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_KEY_ORDER: Sequence[str] = (
    "timestamp",
    "level",
    "component",
    "message",
    "resource",
    "strategy",
    "method",
    "endpoint",
    "status_code",
    "request_id",
)


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Level, output format and the event keys whose values are masked."""

    level: int | str = logging.INFO
    format: LogFormat = LogFormat.JSON
    redact_fields: Sequence[str] = ("api_key", "access_token", "authorization")


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelNamesMapping().get(level.upper())
    if number is None:
        raise ValueError(f"Unsupported log level: {level}")
    return number


def _redact(
    _: Any,
    __: str,
    event_dict: MutableMapping[str, Any],
    *,
    fields: Iterable[str],
) -> MutableMapping[str, Any]:
    for key in fields:
        if key in event_dict:
            event_dict[key] = _REDACTED
    return event_dict


def _drop_below_level(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    target = logger or logging.getLogger(_ROOT_LOGGER)
    if target.isEnabledFor(_METHOD_LEVELS.get(method_name.lower(), logging.INFO)):
        return event_dict
    raise DropEvent


def _processors(config: LogConfig) -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.EventRenamer("message"),
        partial(_redact, fields=config.redact_fields),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _drop_below_level,
    ]


def _renderer(format: LogFormat) -> Any:
    if format is LogFormat.KEY_VALUE:
        return structlog.processors.KeyValueRenderer(key_order=_KEY_ORDER, drop_missing=True)
    return structlog.processors.JSONRenderer(sort_keys=True, ensure_ascii=False)


class UnifiedLogger:
    """Entry point for configuring and obtaining the library's loggers."""

    @staticmethod
    def configure(config: LogConfig | None = None) -> None:
        """Install the structlog pipeline and a stderr handler at ``config.level``."""

        cfg = config or LogConfig()
        level = _level_number(cfg.level)
        processors = _processors(cfg)

        handler = logging.StreamHandler()
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(cfg.format),
                ],
            )
        )
        logging.basicConfig(handlers=[handler], level=level, force=True)

        structlog.configure(
            processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def get(name: str | None = None) -> BoundLogger:
        return cast(BoundLogger, structlog.get_logger(name or _ROOT_LOGGER))

    @staticmethod
    def reset() -> None:
        """Forget every context value bound with :meth:`scoped`."""

        clear_contextvars()

    @staticmethod
    def scoped(**context: Any) -> AbstractContextManager[None]:
        """Bind ``context`` for the duration of a ``with`` block.

        Values that were bound before entering are restored on exit.
        """

        @contextmanager
        def _scope() -> Iterator[None]:
            existing = get_contextvars()
            previous = {key: existing[key] for key in context if key in existing}
            bind_contextvars(**context)
            try:
                yield None
            finally:
                unbind_contextvars(*context)
                if previous:
                    bind_contextvars(**previous)

        return _scope()
