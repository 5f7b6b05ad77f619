"""Planning and execution of offset/limit paging against the resource API."""

from __future__ import annotations

from .criteria import (
    CriteriaArray,
    CriteriaFilterBuilder,
    CriteriaObject,
    CriteriaValueArray,
    FilterMapBuilder,
    NamedQuery,
    SimpleCriteria,
)
from .executor import execute, fetch_pages, serve_from_probe
from .filters import CriteriaFilter, Filter, FilterMapFilter, NamedQueryFilter
from .planner import DEFAULT_MAX_PAGE_SIZE, PlannedRequest, plan, should_page
from .request import PagingRequest, PagingRequestBuilder, validate_request
from .source import PageSource
from .strategy import PagingStrategy, resolve_strategy

__all__ = [
    "CriteriaArray",
    "CriteriaFilter",
    "CriteriaFilterBuilder",
    "CriteriaObject",
    "CriteriaValueArray",
    "DEFAULT_MAX_PAGE_SIZE",
    "Filter",
    "FilterMapBuilder",
    "FilterMapFilter",
    "NamedQuery",
    "NamedQueryFilter",
    "PageSource",
    "PagingRequest",
    "PagingRequestBuilder",
    "PagingStrategy",
    "PlannedRequest",
    "SimpleCriteria",
    "execute",
    "fetch_pages",
    "plan",
    "resolve_strategy",
    "serve_from_probe",
    "should_page",
    "validate_request",
]
