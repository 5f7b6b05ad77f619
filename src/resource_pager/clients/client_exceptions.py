"""Public exceptions exposed by resource_pager.

Upper layers (the CLI, callers of :class:`ProxyClient`) import transport and
paging errors from here only, so they never depend on ``requests`` directly.
"""

from __future__ import annotations

from requests.exceptions import ConnectionError as _RequestsConnectionError
from requests.exceptions import HTTPError as _RequestsHTTPError
from requests.exceptions import RequestException as _RequestsRequestException
from requests.exceptions import Timeout as _RequestsTimeout

from resource_pager.core.errors import (
    MalformedContentError,
    PagingMetadataError,
    PagingValidationError,
    RequestValidationError,
    ResourcePagerError,
)

__all__ = [
    "RequestException",
    "HTTPError",
    "Timeout",
    "ConnectionError",
    "ResourcePagerError",
    "RequestValidationError",
    "PagingValidationError",
    "PagingMetadataError",
    "MalformedContentError",
]

# Re-export requests exceptions while keeping the underlying types.
RequestException = _RequestsRequestException
HTTPError = _RequestsHTTPError
Timeout = _RequestsTimeout
ConnectionError = _RequestsConnectionError
