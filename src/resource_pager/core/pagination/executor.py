"""Execution of a planned request: serve the probe or run the bounded fetch loop."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping

from structlog.stdlib import BoundLogger

from resource_pager.core import converter
from resource_pager.core.log_events import LogEvents
from resource_pager.core.logger import UnifiedLogger
from resource_pager.core.pagination.planner import PlannedRequest, should_page
from resource_pager.core.pagination.source import PageSource
from resource_pager.core.pagination.strategy import PagingStrategy
from resource_pager.core.response import ProxyResponse

__all__ = ["execute", "serve_from_probe", "fetch_pages"]

ProbeHandler = Callable[[PlannedRequest], ProxyResponse]
LoopHandler = Callable[[PlannedRequest, PageSource, BoundLogger], list[ProxyResponse]]


def _page_count(rows: int, page_size: int) -> int:
    if rows <= 0:
        return 0
    return math.ceil(rows / page_size)


def _fetch(
    planned: PlannedRequest,
    source: PageSource,
    log: BoundLogger,
    cursor: int,
    size: int,
    index: int,
) -> ProxyResponse:
    page = source.fetch_page(planned.request, cursor, size)
    log.info(
        LogEvents.PAGINATION_PAGE_FETCHED,
        resource=planned.request.resource_name,
        page_index=index,
        offset=cursor,
        page_size=size,
        status_code=page.status_code,
    )
    return page


def _page_from_offset(planned: PlannedRequest, source: PageSource, log: BoundLogger) -> list[ProxyResponse]:
    # ALL_PAGES runs through here with offset 0
    pages: list[ProxyResponse] = []
    cursor = planned.offset
    iterations = _page_count(planned.total_count - cursor, planned.page_size)
    for index in range(iterations):
        if cursor >= planned.total_count:
            break
        pages.append(_fetch(planned, source, log, cursor, planned.page_size, index))
        cursor += planned.page_size
    return pages


def _page_for_num_pages(planned: PlannedRequest, source: PageSource, log: BoundLogger) -> list[ProxyResponse]:
    pages: list[ProxyResponse] = []
    cursor = planned.offset
    for index in range(planned.num_pages):
        if cursor >= planned.total_count:
            break
        pages.append(_fetch(planned, source, log, cursor, planned.page_size, index))
        cursor += planned.page_size
    return pages


def _page_for_num_rows(planned: PlannedRequest, source: PageSource, log: BoundLogger) -> list[ProxyResponse]:
    pages: list[ProxyResponse] = []
    num_rows = min(planned.num_rows, planned.total_count)
    cursor = planned.offset
    end = num_rows + cursor
    for index in range(_page_count(num_rows, planned.page_size)):
        if cursor >= planned.total_count:
            break
        size = min(planned.page_size, end - cursor)
        pages.append(_fetch(planned, source, log, cursor, size, index))
        cursor += size
    return pages


_LOOP_HANDLERS: Mapping[PagingStrategy, LoopHandler] = {
    PagingStrategy.ALL_PAGES: _page_from_offset,
    PagingStrategy.FROM_OFFSET: _page_from_offset,
    PagingStrategy.TO_NUM_PAGES: _page_for_num_pages,
    PagingStrategy.FROM_OFFSET_TO_NUM_PAGES: _page_for_num_pages,
    PagingStrategy.TO_NUM_ROWS: _page_for_num_rows,
    PagingStrategy.FROM_OFFSET_TO_NUM_ROWS: _page_for_num_rows,
}

_PROBE_HANDLERS: Mapping[PagingStrategy, ProbeHandler] = {
    PagingStrategy.ALL_PAGES: lambda planned: planned.probe,
    PagingStrategy.TO_NUM_PAGES: lambda planned: planned.probe,
    PagingStrategy.TO_NUM_ROWS: lambda planned: converter.trim_to_first_n(planned.probe, planned.num_rows),
    PagingStrategy.FROM_OFFSET: lambda planned: converter.trim_from_offset(planned.probe, planned.offset),
    PagingStrategy.FROM_OFFSET_TO_NUM_PAGES: lambda planned: converter.trim_from_offset(
        planned.probe, planned.offset
    ),
    PagingStrategy.FROM_OFFSET_TO_NUM_ROWS: lambda planned: converter.trim_from_offset_for_n(
        planned.probe, planned.offset, planned.num_rows
    ),
}


def serve_from_probe(planned: PlannedRequest) -> list[ProxyResponse]:
    """Answer the request from the probe response alone, trimmed as needed."""

    return [_PROBE_HANDLERS[planned.strategy](planned)]


def fetch_pages(
    planned: PlannedRequest,
    source: PageSource,
    *,
    logger: BoundLogger | None = None,
) -> list[ProxyResponse]:
    """Run the strategy's fetch loop. A failed fetch propagates and no pages are returned."""

    log = logger or UnifiedLogger.get(__name__).bind(component="pagination.executor")
    return _LOOP_HANDLERS[planned.strategy](planned, source, log)


def execute(
    planned: PlannedRequest,
    source: PageSource,
    *,
    logger: BoundLogger | None = None,
) -> list[ProxyResponse]:
    """Produce the ordered list of pages for a planned request."""

    log = logger or UnifiedLogger.get(__name__).bind(component="pagination.executor")
    if not should_page(planned):
        pages = serve_from_probe(planned)
        log.info(
            LogEvents.PAGINATION_PROBE_SERVED,
            resource=planned.request.resource_name,
            strategy=planned.strategy.value,
        )
        return pages

    pages = fetch_pages(planned, source, logger=log)
    log.info(
        LogEvents.PAGINATION_LOOP_COMPLETED,
        resource=planned.request.resource_name,
        strategy=planned.strategy.value,
        pages=len(pages),
    )
    return pages
