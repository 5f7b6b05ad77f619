"""Probe fetch and derivation of the page size and total row count."""

from __future__ import annotations

from dataclasses import dataclass

from structlog.stdlib import BoundLogger

from resource_pager.core.errors import PagingMetadataError
from resource_pager.core.log_events import LogEvents
from resource_pager.core.logger import UnifiedLogger
from resource_pager.core.pagination.request import PagingRequest
from resource_pager.core.pagination.source import PageSource
from resource_pager.core.pagination.strategy import PagingStrategy
from resource_pager.core.response import ProxyResponse
from resource_pager.core.urls import HDR_X_MAX_PAGE_SIZE, HDR_X_TOTAL_COUNT

__all__ = [
    "DEFAULT_MAX_PAGE_SIZE",
    "PlannedRequest",
    "plan",
    "should_page",
    "resolve_page_size",
    "resolve_max_page_size",
    "resolve_total_count",
]

DEFAULT_MAX_PAGE_SIZE = 500


@dataclass(frozen=True, slots=True)
class PlannedRequest:
    """A normalized request annotated with what the probe fetch revealed."""

    request: PagingRequest
    page_size: int
    max_page_size: int
    total_count: int
    probe: ProxyResponse

    @property
    def strategy(self) -> PagingStrategy:
        return self.request.strategy

    @property
    def offset(self) -> int:
        return self.request.offset

    @property
    def num_pages(self) -> int:
        return self.request.num_pages

    @property
    def num_rows(self) -> int:
        return self.request.num_rows


def _parse_int_header(response: ProxyResponse, header: str) -> int | None:
    raw = response.header(header)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise PagingMetadataError(header, raw, response.requested_url) from exc


def resolve_max_page_size(response: ProxyResponse) -> int:
    """Return the advertised maximum page size, or the default of 500."""

    value = _parse_int_header(response, HDR_X_MAX_PAGE_SIZE)
    if value is None or value < 1:
        return DEFAULT_MAX_PAGE_SIZE
    return value


def resolve_total_count(response: ProxyResponse) -> int:
    value = _parse_int_header(response, HDR_X_TOTAL_COUNT)
    if value is None:
        raise PagingMetadataError(HDR_X_TOTAL_COUNT, None, response.requested_url)
    return value


def resolve_page_size(declared: int, probe: ProxyResponse) -> int:
    """Derive the effective page size.

    An unspecified size is the number of rows in the probe body, or the
    maximum page size when the body holds no rows. A declared size is clamped
    to the maximum.
    """

    if declared <= 0:
        if probe.is_blank():
            return resolve_max_page_size(probe)
        rows = probe.content_as_list()
        return len(rows) if rows else resolve_max_page_size(probe)
    return min(declared, resolve_max_page_size(probe))


def plan(request: PagingRequest, source: PageSource, *, logger: BoundLogger | None = None) -> PlannedRequest:
    """Issue the probe fetch and return the request annotated for execution."""

    log = logger or UnifiedLogger.get(__name__).bind(component="pagination.planner")
    normalized = request.normalized()
    probe = source.fetch_first_page(normalized)
    log.debug(
        LogEvents.PAGINATION_PROBE_FETCHED,
        resource=normalized.resource_name,
        status_code=probe.status_code,
        url=probe.requested_url,
    )
    page_size = resolve_page_size(normalized.page_size, probe)
    total_count = resolve_total_count(probe)
    planned = PlannedRequest(
        request=normalized,
        page_size=page_size,
        max_page_size=resolve_max_page_size(probe),
        total_count=total_count,
        probe=probe,
    )
    log.info(
        LogEvents.PAGINATION_PLAN_RESOLVED,
        resource=normalized.resource_name,
        strategy=planned.strategy.value,
        page_size=page_size,
        total_count=total_count,
        offset=normalized.offset,
        num_pages=normalized.num_pages,
        num_rows=normalized.num_rows,
        should_page=should_page(planned),
    )
    return planned


def should_page(planned: PlannedRequest) -> bool:
    """Return ``True`` when the probe alone cannot satisfy the request.

    Row-limited strategies compare against ``num_rows``, the others against
    the total row count.
    """

    bound = planned.num_rows if planned.strategy.limits_rows else planned.total_count
    return planned.page_size < bound
