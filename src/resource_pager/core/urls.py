"""URL and header builders for the paginated resource API."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "DEFAULT_VERSION",
    "HDR_X_TOTAL_COUNT",
    "HDR_X_MAX_PAGE_SIZE",
    "Region",
    "api_url",
    "api_filter_url",
    "api_paging_url",
    "api_filter_paging_url",
    "auth_url",
    "build_headers",
]

DEFAULT_VERSION = "application/json"
HDR_X_TOTAL_COUNT = "x-total-count"
HDR_X_MAX_PAGE_SIZE = "x-max-page-size"

_MAIN_BASE_URL = "https://integrate.elluciancloud"


class Region(str, Enum):
    """Supported deployment regions and their top-level domain suffix."""

    US = "US"
    CANADA = "CANADA"
    EUROPE = "EUROPE"
    AUSTRALIA = "AUSTRALIA"

    @property
    def domain_suffix(self) -> str:
        return _REGION_SUFFIXES[self]


_REGION_SUFFIXES: dict[Region, str] = {
    Region.US: ".com",
    Region.CANADA: ".ca",
    Region.EUROPE: ".ie",
    Region.AUSTRALIA: ".com.au",
}


def base_url(region: Region, override: str | None = None) -> str:
    """Return the API root for ``region`` unless an explicit override is configured."""

    if override:
        return override.rstrip("/")
    return f"{_MAIN_BASE_URL}{region.domain_suffix}"


def api_url(region: Region, resource: str | None, resource_id: str | None = None, *, root: str | None = None) -> str:
    url = f"{base_url(region, root)}/api"
    if resource and resource.strip():
        url = f"{url}/{resource}"
        if resource_id and resource_id.strip():
            url = f"{url}/{resource_id}"
    return url


def api_filter_url(region: Region, resource: str, filter_query: str | None, *, root: str | None = None) -> str:
    """Append an already encoded filter query string to the resource URL."""

    url = api_url(region, resource, root=root)
    if filter_query and filter_query.strip():
        url = f"{url}{filter_query}"
    return url


def api_paging_url(region: Region, resource: str, offset: int, page_size: int, *, root: str | None = None) -> str:
    return _add_paging(api_url(region, resource, root=root), offset, page_size)


def api_filter_paging_url(
    region: Region,
    resource: str,
    filter_query: str | None,
    offset: int,
    page_size: int,
    *,
    root: str | None = None,
) -> str:
    return _add_paging(api_filter_url(region, resource, filter_query, root=root), offset, page_size)


def auth_url(region: Region, expiration_minutes: int, *, root: str | None = None) -> str:
    return f"{base_url(region, root)}/auth?expirationMinutes={expiration_minutes}"


def _add_paging(url: str, offset: int, page_size: int) -> str:
    # offset is emitted when non-negative, limit only when positive
    params: list[str] = []
    if offset >= 0:
        params.append(f"offset={offset}")
    if page_size > 0:
        params.append(f"limit={page_size}")
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{'&'.join(params)}"


def build_headers(version: str | None) -> dict[str, str]:
    """Return the ``Accept``/``Content-Type`` headers for a resource version."""

    if version is None or not version.strip():
        version = DEFAULT_VERSION
    return {"Accept": version, "Content-Type": version}
