"""The immutable description of one paged fetch and its fluent builder."""

from __future__ import annotations

from dataclasses import dataclass, replace

from resource_pager.core.errors import PagingValidationError
from resource_pager.core.pagination.filters import (
    CriteriaFilter,
    Filter,
    FilterMapFilter,
    NamedQueryFilter,
)
from resource_pager.core.pagination.strategy import PagingStrategy, resolve_strategy
from resource_pager.core.urls import DEFAULT_VERSION

__all__ = ["PagingRequest", "PagingRequestBuilder", "validate_request"]


@dataclass(frozen=True, slots=True)
class PagingRequest:
    """What to fetch and how.

    Non-positive ``page_size`` means "derive from the first response";
    ``num_pages``, ``num_rows`` and ``offset`` below 1 mean "unbounded" or
    "start at 0".
    """

    resource_name: str
    version: str = DEFAULT_VERSION
    filter: Filter = None
    page_size: int = 0
    num_pages: int = 0
    num_rows: int = 0
    offset: int = 0

    @property
    def strategy(self) -> PagingStrategy:
        return resolve_strategy(self.offset, self.num_pages, self.num_rows)

    @property
    def filter_query(self) -> str | None:
        return self.filter.to_query() if self.filter is not None else None

    def normalized(self) -> "PagingRequest":
        """Return a copy with the default version and a non-negative offset."""

        version = self.version
        if version is None or not version.strip():
            version = DEFAULT_VERSION
        offset = self.offset if self.offset >= 1 else 0
        return replace(self, version=version, offset=offset)


class PagingRequestBuilder:
    """Fluent construction of a :class:`PagingRequest`.

    Setting a filter replaces any filter set before it.
    """

    def __init__(self, resource_name: str) -> None:
        self._resource_name = resource_name
        self._version = DEFAULT_VERSION
        self._filter: Filter = None
        self._page_size = 0
        self._num_pages = 0
        self._num_rows = 0
        self._offset = 0

    def for_version(self, version: str | None) -> "PagingRequestBuilder":
        self._version = version or DEFAULT_VERSION
        return self

    def with_filter(self, request_filter: Filter) -> "PagingRequestBuilder":
        self._filter = request_filter
        return self

    def with_criteria_filter(self, criteria_filter: str | CriteriaFilter) -> "PagingRequestBuilder":
        if not isinstance(criteria_filter, CriteriaFilter):
            criteria_filter = CriteriaFilter(criteria_filter)
        return self.with_filter(criteria_filter)

    def with_named_query_filter(self, named_query: str | NamedQueryFilter) -> "PagingRequestBuilder":
        if not isinstance(named_query, NamedQueryFilter):
            named_query = NamedQueryFilter(named_query)
        return self.with_filter(named_query)

    def with_filter_map(self, filter_map: str | FilterMapFilter) -> "PagingRequestBuilder":
        if not isinstance(filter_map, FilterMapFilter):
            filter_map = FilterMapFilter(filter_map)
        return self.with_filter(filter_map)

    def with_page_size(self, page_size: int) -> "PagingRequestBuilder":
        self._page_size = page_size
        return self

    def for_num_pages(self, num_pages: int) -> "PagingRequestBuilder":
        self._num_pages = num_pages
        return self

    def for_num_rows(self, num_rows: int) -> "PagingRequestBuilder":
        self._num_rows = num_rows
        return self

    def from_offset(self, offset: int) -> "PagingRequestBuilder":
        self._offset = offset
        return self

    def build(self) -> PagingRequest:
        return PagingRequest(
            resource_name=self._resource_name,
            version=self._version,
            filter=self._filter,
            page_size=self._page_size,
            num_pages=self._num_pages,
            num_rows=self._num_rows,
            offset=self._offset,
        )


def validate_request(request: PagingRequest) -> PagingRequest:
    """Fail fast on requests that must never reach the planner."""

    if request.resource_name is None or not request.resource_name.strip():
        msg = "Cannot page a resource with a null or blank resource name"
        raise PagingValidationError(msg)
    if request.filter is not None and not (request.filter.value or "").strip():
        msg = f"Cannot page resource '{request.resource_name}' with a blank filter"
        raise PagingValidationError(msg)
    return request
