"""Caller-facing client for reading paged resources and writing single ones."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from structlog.stdlib import BoundLogger

from resource_pager.config.loader import load_config
from resource_pager.config.models.proxy import ProxyClientConfig
from resource_pager.core import converter, urls
from resource_pager.core.api_client import UnifiedAPIClient
from resource_pager.core.errors import PagingValidationError, RequestValidationError
from resource_pager.core.logger import UnifiedLogger
from resource_pager.core.pagination import (
    CriteriaFilter,
    Filter,
    FilterMapFilter,
    NamedQueryFilter,
    PagingRequest,
    PagingRequestBuilder,
    SimpleCriteria,
    execute,
    plan,
    validate_request,
)
from resource_pager.core.pagination.planner import resolve_max_page_size, resolve_page_size, resolve_total_count
from resource_pager.core.response import ProxyResponse

__all__ = ["ProxyClient"]


def _require_resource(resource_name: str) -> str:
    if resource_name is None or not resource_name.strip():
        msg = "Cannot fetch a resource with a null or blank resource name"
        raise PagingValidationError(msg)
    return resource_name


def _require_write_target(method: str, resource_name: str) -> None:
    if resource_name is None or not resource_name.strip():
        msg = f"Cannot submit a {method} request with a null or blank resource name"
        raise RequestValidationError(msg)


class ProxyClient:
    """Read resources through the API proxy, one page or many, and write them one at a time.

    The paging methods return the pages in fetch order. A failed fetch raises
    and no partial list is returned.
    """

    def __init__(
        self,
        config: ProxyClientConfig,
        *,
        api_client: UnifiedAPIClient | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.config = config
        self._api = api_client or UnifiedAPIClient(config, name="proxy")
        self._log = logger or UnifiedLogger.get(__name__).bind(component="proxy_client")

    @classmethod
    def from_config_file(cls, path: str | Path | None = None) -> "ProxyClient":
        """Build a client from YAML and ``RESOURCE_PAGER_*`` environment values."""

        return cls(load_config(path))

    def close(self) -> None:
        self._api.close()

    def __enter__(self) -> "ProxyClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # PageSource
    # ------------------------------------------------------------------

    def fetch_first_page(self, request: PagingRequest) -> ProxyResponse:
        url = urls.api_filter_url(
            self.config.region,
            request.resource_name,
            request.filter_query,
            root=self.config.base_url,
        )
        return self._api.get(url, urls.build_headers(request.version))

    def fetch_page(self, request: PagingRequest, offset: int, page_size: int) -> ProxyResponse:
        url = urls.api_filter_paging_url(
            self.config.region,
            request.resource_name,
            request.filter_query,
            offset,
            page_size,
            root=self.config.base_url,
        )
        return self._api.get(url, urls.build_headers(request.version))

    # ------------------------------------------------------------------
    # Single requests
    # ------------------------------------------------------------------

    def get(self, resource_name: str, version: str | None = None) -> ProxyResponse:
        """Fetch the first page the server returns for ``resource_name``."""

        _require_resource(resource_name)
        url = urls.api_url(self.config.region, resource_name, root=self.config.base_url)
        return self._api.get(url, urls.build_headers(version))

    def get_page(
        self,
        resource_name: str,
        offset: int,
        page_size: int,
        version: str | None = None,
    ) -> ProxyResponse:
        _require_resource(resource_name)
        url = urls.api_paging_url(
            self.config.region,
            resource_name,
            offset,
            page_size,
            root=self.config.base_url,
        )
        return self._api.get(url, urls.build_headers(version))

    def get_by_id(self, resource_name: str, resource_id: str, version: str | None = None) -> ProxyResponse:
        _require_resource(resource_name)
        if resource_id is None or not resource_id.strip():
            msg = f"Cannot fetch '{resource_name}' with a null or blank id"
            raise PagingValidationError(msg)
        url = urls.api_url(self.config.region, resource_name, resource_id, root=self.config.base_url)
        return self._api.get(url, urls.build_headers(version))

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def paginate(self, request: PagingRequest) -> list[ProxyResponse]:
        """Plan and execute ``request``, returning the ordered list of pages."""

        validate_request(request)
        with UnifiedLogger.scoped(resource=request.resource_name, strategy=request.strategy.value):
            planned = plan(request, self, logger=self._log)
            return execute(planned, self, logger=self._log)

    def get_all_pages(
        self,
        resource_name: str,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = PagingRequestBuilder(resource_name).for_version(version).with_page_size(page_size).build()
        return self.paginate(request)

    def get_all_pages_from_offset(
        self,
        resource_name: str,
        offset: int,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_page_size(page_size)
            .from_offset(offset)
            .build()
        )
        return self.paginate(request)

    def get_pages(
        self,
        resource_name: str,
        num_pages: int,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_page_size(page_size)
            .for_num_pages(num_pages)
            .build()
        )
        return self.paginate(request)

    def get_pages_from_offset(
        self,
        resource_name: str,
        offset: int,
        num_pages: int,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_page_size(page_size)
            .from_offset(offset)
            .for_num_pages(num_pages)
            .build()
        )
        return self.paginate(request)

    def get_rows(
        self,
        resource_name: str,
        num_rows: int,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_page_size(page_size)
            .for_num_rows(num_rows)
            .build()
        )
        return self.paginate(request)

    def get_rows_from_offset(
        self,
        resource_name: str,
        offset: int,
        num_rows: int,
        version: str | None = None,
        page_size: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_page_size(page_size)
            .from_offset(offset)
            .for_num_rows(num_rows)
            .build()
        )
        return self.paginate(request)

    # ------------------------------------------------------------------
    # Filtered requests
    # ------------------------------------------------------------------

    def _filtered_single(self, request: PagingRequest) -> ProxyResponse:
        validate_request(request)
        return self.fetch_first_page(request.normalized())

    def get_with_criteria_filter(
        self,
        resource_name: str,
        criteria: str | CriteriaFilter,
        version: str | None = None,
    ) -> ProxyResponse:
        request = PagingRequestBuilder(resource_name).for_version(version).with_criteria_filter(criteria).build()
        return self._filtered_single(request)

    def get_with_named_query(
        self,
        resource_name: str,
        named_query: str | NamedQueryFilter,
        version: str | None = None,
    ) -> ProxyResponse:
        request = PagingRequestBuilder(resource_name).for_version(version).with_named_query_filter(named_query).build()
        return self._filtered_single(request)

    def get_with_filter_map(
        self,
        resource_name: str,
        filter_map: str | FilterMapFilter,
        version: str | None = None,
    ) -> ProxyResponse:
        request = PagingRequestBuilder(resource_name).for_version(version).with_filter_map(filter_map).build()
        return self._filtered_single(request)

    def get_with_simple_criteria(
        self,
        resource_name: str,
        key: str,
        value: str,
        version: str | None = None,
    ) -> ProxyResponse:
        """Fetch with the one-pair criteria filter ``{"key": "value"}``."""

        return self.get_with_criteria_filter(resource_name, SimpleCriteria(key, value).build_filter(), version)

    def get_pages_with_criteria_filter(
        self,
        resource_name: str,
        criteria: str | CriteriaFilter,
        version: str | None = None,
        page_size: int = 0,
        offset: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_criteria_filter(criteria)
            .with_page_size(page_size)
            .from_offset(offset)
            .build()
        )
        return self.paginate(request)

    def get_pages_with_named_query(
        self,
        resource_name: str,
        named_query: str | NamedQueryFilter,
        version: str | None = None,
        page_size: int = 0,
        offset: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_named_query_filter(named_query)
            .with_page_size(page_size)
            .from_offset(offset)
            .build()
        )
        return self.paginate(request)

    def get_pages_with_filter_map(
        self,
        resource_name: str,
        filter_map: str | FilterMapFilter,
        version: str | None = None,
        page_size: int = 0,
        offset: int = 0,
    ) -> list[ProxyResponse]:
        request = (
            PagingRequestBuilder(resource_name)
            .for_version(version)
            .with_filter_map(filter_map)
            .with_page_size(page_size)
            .from_offset(offset)
            .build()
        )
        return self.paginate(request)

    # ------------------------------------------------------------------
    # Paging metadata
    # ------------------------------------------------------------------

    def get_total_count(self, resource_name: str, version: str | None = None, filter: Filter = None) -> int:
        """Return the ``x-total-count`` of ``resource_name``, narrowed by ``filter`` when given."""

        _require_resource(resource_name)
        request = PagingRequestBuilder(resource_name).for_version(version).with_filter(filter).build()
        validate_request(request)
        return resolve_total_count(self.fetch_first_page(request.normalized()))

    def get_page_size(self, resource_name: str, version: str | None = None) -> int:
        """Return the number of rows the server puts in an unsized page."""

        return resolve_page_size(0, self.get(resource_name, version))

    def get_max_page_size(self, resource_name: str, version: str | None = None) -> int:
        return resolve_max_page_size(self.get(resource_name, version))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def post(self, resource_name: str, body: Any, version: str | None = None) -> ProxyResponse:
        """Create a resource instance from ``body``.

        ``body`` may be JSON text, a pydantic model, or a dict or list that is
        serialised to JSON.
        """

        payload = self._require_body("POST", resource_name, body)
        url = urls.api_url(self.config.region, resource_name, root=self.config.base_url)
        return self._api.post(url, payload, urls.build_headers(version))

    def put(
        self,
        resource_name: str,
        resource_id: str | None,
        body: Any,
        version: str | None = None,
    ) -> ProxyResponse:
        """Update the instance ``resource_id``; without an id the collection URL is used."""

        payload = self._require_body("PUT", resource_name, body)
        url = urls.api_url(self.config.region, resource_name, resource_id, root=self.config.base_url)
        return self._api.put(url, payload, urls.build_headers(version))

    def delete(self, resource_name: str, resource_id: str) -> ProxyResponse:
        _require_write_target("DELETE", resource_name)
        if resource_id is None or not resource_id.strip():
            msg = f"Cannot submit a DELETE request for '{resource_name}' with a null or blank id"
            raise RequestValidationError(msg)
        url = urls.api_url(self.config.region, resource_name, resource_id, root=self.config.base_url)
        return self._api.delete(url, urls.build_headers(None))

    @staticmethod
    def _require_body(method: str, resource_name: str, body: Any) -> str:
        _require_write_target(method, resource_name)
        payload = converter.to_request_body(body) if body is not None else ""
        if not payload.strip():
            msg = f"Cannot submit a {method} request for '{resource_name}' with a null or empty body"
            raise RequestValidationError(msg)
        return payload
