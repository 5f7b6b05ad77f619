"""Registry of structured logging event identifiers."""

from __future__ import annotations

from enum import Enum, auto

__all__ = ["LogEvents"]


class LogEvents(str, Enum):
    """Strongly typed registry of logger events.

    Member names follow ``NAMESPACE_ACTION_SUFFIX`` and are rendered as the
    dotted identifier ``namespace.action.suffix``.
    """

    @staticmethod
    def _generate_next_value_(name: str, start: int, count: int, _last_values: list[str]) -> str:
        """Produce a dotted event identifier based on enum member naming."""
        parts = name.lower().split("_")
        namespace = parts[0] if parts else "event"
        suffix = parts[-1] if len(parts) > 1 else "event"
        action_parts = parts[1:-1] if len(parts) > 2 else []
        if not action_parts:
            action_parts = ["event"]
        action = ".".join(action_parts)
        return ".".join((namespace, action, suffix))

    CLI_RUN_START = auto()
    CLI_RUN_FINISH = auto()
    CLI_RUN_ERROR = auto()
    AUTH_TOKEN_REFRESHED = auto()
    AUTH_TOKEN_FAILED = auto()
    HTTP_RATE_LIMITER_WAIT = auto()
    HTTP_REQUEST_COMPLETED = auto()
    HTTP_REQUEST_EXCEPTION = auto()
    HTTP_REQUEST_FAILED = auto()
    PAGINATION_PROBE_FETCHED = auto()
    PAGINATION_PLAN_RESOLVED = auto()
    PAGINATION_PROBE_SERVED = auto()
    PAGINATION_PAGE_FETCHED = auto()
    PAGINATION_LOOP_COMPLETED = auto()
    CONFIG_FILE_LOADED = auto()
