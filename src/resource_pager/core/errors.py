"""Exceptions raised by the paging engine and the proxy clients."""

from __future__ import annotations

__all__ = [
    "ResourcePagerError",
    "RequestValidationError",
    "PagingValidationError",
    "PagingMetadataError",
    "MalformedContentError",
]


class ResourcePagerError(Exception):
    """Base class for every error raised by :mod:`resource_pager` itself."""


class RequestValidationError(ResourcePagerError, ValueError):
    """Raised before any request is sent when the caller supplied unusable arguments."""


class PagingValidationError(RequestValidationError):
    """Raised before any fetch when a read or paging request cannot be built."""


class PagingMetadataError(ResourcePagerError):
    """Raised when paging headers are missing or cannot be parsed.

    The planner cannot derive the number of rows to fetch without the total
    count header, so there is no fallback value.
    """

    def __init__(self, header: str, value: str | None, url: str | None = None) -> None:
        self.header = header
        self.value = value
        self.url = url
        detail = "missing" if value is None else f"not an integer: {value!r}"
        location = f" in response from {url}" if url else ""
        super().__init__(f"Header '{header}' is {detail}{location}")


class MalformedContentError(ResourcePagerError, ValueError):
    """Raised when a response body is not the JSON array the engine expects."""
