"""End-to-end tests of ProxyClient against a stubbed HTTP API."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest
import responses
from pydantic import BaseModel

from resource_pager.clients import ProxyClient
from resource_pager.clients.client_exceptions import (
    HTTPError,
    PagingMetadataError,
    PagingValidationError,
    RequestValidationError,
)
from resource_pager.config.models import ProxyClientConfig
from resource_pager.core.api_client import UnifiedAPIClient
from resource_pager.core.logger import LogConfig, LogFormat, UnifiedLogger
from resource_pager.core.pagination import (
    CriteriaFilterBuilder,
    FilterMapBuilder,
    NamedQuery,
    PagingRequestBuilder,
    PagingStrategy,
    SimpleCriteria,
)
from resource_pager.core.response import ProxyResponse

BASE = "https://integrate.elluciancloud.com"
PERSONS_URL = re.compile(rf"{re.escape(BASE)}/api/persons(\?.*)?$")
TOTAL = 237
DEFAULT_PAGE_SIZE = 25


def _persons_callback(request: Any) -> tuple[int, dict[str, str], str]:
    query = parse_qs(urlsplit(request.url).query)
    offset = int(query.get("offset", ["0"])[0])
    limit = int(query.get("limit", [str(DEFAULT_PAGE_SIZE)])[0])
    rows = [{"id": str(index)} for index in range(TOTAL)][offset : offset + limit]
    headers = {"x-total-count": str(TOTAL), "x-max-page-size": "100"}
    return 200, headers, json.dumps(rows)


@pytest.fixture
def api() -> responses.RequestsMock:
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.POST, f"{BASE}/auth?expirationMinutes=60", body="token", status=200)
        mock.add_callback(responses.GET, PERSONS_URL, callback=_persons_callback)
        yield mock


@pytest.fixture
def client(proxy_config: ProxyClientConfig) -> ProxyClient:
    return ProxyClient(proxy_config)


def _get_urls(mock: responses.RequestsMock) -> list[str]:
    return [call.request.url for call in mock.calls if call.request.method == "GET"]


def _ids(pages: list[ProxyResponse]) -> list[int]:
    return [int(row["id"]) for page in pages for row in page.content_as_list()]


def test_get_all_pages(client: ProxyClient, api: responses.RequestsMock) -> None:
    pages = client.get_all_pages("persons", page_size=50)

    assert _ids(pages) == list(range(TOTAL))
    assert _get_urls(api) == [
        f"{BASE}/api/persons",
        f"{BASE}/api/persons?offset=0&limit=50",
        f"{BASE}/api/persons?offset=50&limit=50",
        f"{BASE}/api/persons?offset=100&limit=50",
        f"{BASE}/api/persons?offset=150&limit=50",
        f"{BASE}/api/persons?offset=200&limit=50",
    ]


def test_page_size_is_clamped_to_server_maximum(client: ProxyClient, api: responses.RequestsMock) -> None:
    pages = client.get_all_pages("persons", page_size=1000)

    assert len(pages) == 3
    assert _get_urls(api)[1] == f"{BASE}/api/persons?offset=0&limit=100"


def test_get_all_pages_from_offset(client: ProxyClient, api: responses.RequestsMock) -> None:
    pages = client.get_all_pages_from_offset("persons", 100, page_size=50)

    assert _ids(pages) == list(range(100, TOTAL))


def test_get_pages_and_pages_from_offset(client: ProxyClient, api: responses.RequestsMock) -> None:
    assert len(client.get_pages("persons", 2)) == 2
    assert _ids(client.get_pages_from_offset("persons", 10, 2)) == list(range(10, 60))


def test_get_rows_and_rows_from_offset(client: ProxyClient, api: responses.RequestsMock) -> None:
    assert _ids(client.get_rows("persons", 10)) == list(range(10))
    assert _ids(client.get_rows("persons", 60)) == list(range(60))
    assert _ids(client.get_rows_from_offset("persons", 230, 20, page_size=5)) == list(range(230, TOTAL))


def test_versioned_request_sends_media_type(client: ProxyClient, api: responses.RequestsMock) -> None:
    version = "application/vnd.hedtech.integration.v12+json"

    client.get_rows("persons", 5, version=version)

    request = api.calls[-1].request
    assert request.headers["Accept"] == version
    assert request.headers["Content-Type"] == version


def test_get_single_page_and_by_id(client: ProxyClient, api: responses.RequestsMock) -> None:
    api.add(responses.GET, f"{BASE}/api/persons-by-id/abc", json={"id": "abc"}, status=200)

    assert len(client.get("persons").content_as_list()) == DEFAULT_PAGE_SIZE
    assert [row["id"] for row in client.get_page("persons", 5, 2).content_as_list()] == ["5", "6"]
    assert client.get_by_id("persons-by-id", "abc").content_as_json() == {"id": "abc"}


def test_paging_metadata(client: ProxyClient, api: responses.RequestsMock) -> None:
    assert client.get_total_count("persons") == TOTAL
    assert client.get_page_size("persons") == DEFAULT_PAGE_SIZE
    assert client.get_max_page_size("persons") == 100


def test_criteria_filter_is_applied_to_every_fetch(client: ProxyClient, api: responses.RequestsMock) -> None:
    client.get_pages_with_criteria_filter("persons", '{"names":[{"firstName":"John"}]}', page_size=100)

    urls = _get_urls(api)
    assert len(urls) == 4
    assert all(url.startswith(f"{BASE}/api/persons?criteria=%7B") for url in urls)
    assert urls[-1].endswith("&offset=200&limit=100")


def test_named_query_and_filter_map(client: ProxyClient, api: responses.RequestsMock) -> None:
    client.get_with_named_query("persons", '?keywordSearch={"keywordSearch":"John"}')
    client.get_pages_with_filter_map("persons", "?firstName=John", page_size=100, offset=200)

    urls = _get_urls(api)
    assert urls[0] == f"{BASE}/api/persons?keywordSearch=%7B%22keywordSearch%22%3A%22John%22%7D"
    assert urls[1] == f"{BASE}/api/persons?firstName=John"
    assert urls[2] == f"{BASE}/api/persons?firstName=John&offset=200&limit=100"


def test_blank_filter_fails_before_any_fetch(client: ProxyClient, api: responses.RequestsMock) -> None:
    with pytest.raises(PagingValidationError):
        client.get_with_criteria_filter("persons", "  ")
    with pytest.raises(PagingValidationError):
        client.get_pages_with_filter_map("persons", "")

    assert len(api.calls) == 0


@pytest.mark.parametrize(
    "call",
    [
        lambda client: client.get_all_pages(""),
        lambda client: client.get_rows("   ", 5),
        lambda client: client.get(""),
        lambda client: client.get_by_id("persons", ""),
    ],
)
def test_blank_names_fail_before_any_fetch(
    call: Callable[[ProxyClient], Any],
    client: ProxyClient,
    api: responses.RequestsMock,
) -> None:
    with pytest.raises(PagingValidationError):
        call(client)

    assert len(api.calls) == 0


def test_http_error_mid_sequence_propagates(client: ProxyClient) -> None:
    def _failing_second_page(request: Any) -> tuple[int, dict[str, str], str]:
        if "offset=50" in request.url:
            return 503, {}, json.dumps({"errors": ["unavailable"]})
        return _persons_callback(request)

    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.POST, f"{BASE}/auth?expirationMinutes=60", body="token", status=200)
        mock.add_callback(responses.GET, PERSONS_URL, callback=_failing_second_page)

        with pytest.raises(HTTPError) as excinfo:
            client.get_all_pages("persons", page_size=50)

        assert excinfo.value.response.status_code == 503
        assert len([call for call in mock.calls if call.request.method == "GET"]) == 3


def test_missing_total_count_header(proxy_config: ProxyClientConfig, page_factory: Callable[..., ProxyResponse]) -> None:
    api_client = MagicMock(spec=UnifiedAPIClient)
    api_client.get.return_value = page_factory([{"id": "1"}])
    client = ProxyClient(proxy_config, api_client=api_client)

    with pytest.raises(PagingMetadataError):
        client.get_all_pages("persons")


def test_paginate_uses_api_client_for_probe_and_pages(
    proxy_config: ProxyClientConfig,
    page_factory: Callable[..., ProxyResponse],
) -> None:
    api_client = MagicMock(spec=UnifiedAPIClient)
    api_client.get.side_effect = [
        page_factory([{"id": 0}, {"id": 1}], total=3),
        page_factory([{"id": 0}, {"id": 1}], total=3),
        page_factory([{"id": 2}], total=3),
    ]
    client = ProxyClient(proxy_config, api_client=api_client)

    pages = client.paginate(PagingRequestBuilder("persons").build())

    assert len(pages) == 2
    requested = [call.args[0] for call in api_client.get.call_args_list]
    assert requested == [
        f"{BASE}/api/persons",
        f"{BASE}/api/persons?offset=0&limit=2",
        f"{BASE}/api/persons?offset=2&limit=2",
    ]


def test_context_manager_closes_transport(proxy_config: ProxyClientConfig) -> None:
    api_client = MagicMock(spec=UnifiedAPIClient)

    with ProxyClient(proxy_config, api_client=api_client):
        pass

    api_client.close.assert_called_once()


def test_from_config_file(tmp_path: Any, api_key: str) -> None:
    path = tmp_path / "pager.yaml"
    path.write_text(f"api_key: {api_key}\nregion: EUROPE\n", encoding="utf-8")

    with ProxyClient.from_config_file(path) as client:
        assert client.config.region.value == "EUROPE"
        assert client.config.api_key.get_secret_value() == api_key


def test_total_count_is_narrowed_by_filter(client: ProxyClient) -> None:
    def _filtered_total(request: Any) -> tuple[int, dict[str, str], str]:
        total = "3" if "criteria=" in request.url else str(TOTAL)
        return 200, {"x-total-count": total}, "[]"

    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.POST, f"{BASE}/auth?expirationMinutes=60", body="token", status=200)
        mock.add_callback(responses.GET, PERSONS_URL, callback=_filtered_total)

        narrowed = client.get_total_count("persons", filter=SimpleCriteria("lastName", "Smith").build_filter())
        unfiltered = client.get_total_count("persons")

        assert (narrowed, unfiltered) == (3, TOTAL)
        assert _get_urls(mock) == [
            f"{BASE}/api/persons?criteria=%7B%22lastName%22%3A%22Smith%22%7D",
            f"{BASE}/api/persons",
        ]


def test_built_filters_page_like_string_filters(client: ProxyClient, api: responses.RequestsMock) -> None:
    criteria = CriteriaFilterBuilder().with_simple_criteria("firstName", "John").build()
    named_query = NamedQuery("keywordSearch").add("keywordSearch", "John").build_filter()
    filter_map = FilterMapBuilder().with_parameter_pair("firstName", "John").build()

    client.get_pages_with_criteria_filter("persons", criteria, page_size=100, offset=200)
    client.get_with_named_query("persons", named_query)
    client.get_with_filter_map("persons", filter_map)
    client.get_with_simple_criteria("persons", "firstName", "John")

    urls = _get_urls(api)
    assert urls == [
        f"{BASE}/api/persons?criteria=%7B%22firstName%22%3A%22John%22%7D",
        f"{BASE}/api/persons?criteria=%7B%22firstName%22%3A%22John%22%7D&offset=200&limit=100",
        f"{BASE}/api/persons?keywordSearch=%7B%22keywordSearch%22%3A%22John%22%7D",
        f"{BASE}/api/persons?firstName=John",
        f"{BASE}/api/persons?criteria=%7B%22firstName%22%3A%22John%22%7D",
    ]


class _Person(BaseModel):
    first_name: str


def test_post_put_and_delete(client: ProxyClient, api: responses.RequestsMock) -> None:
    version = "application/vnd.hedtech.integration.v12+json"
    api.add(responses.POST, f"{BASE}/api/persons", json={"id": "1"}, status=201)
    api.add(responses.PUT, f"{BASE}/api/persons/1", json={"id": "1"}, status=200)
    api.add(responses.DELETE, f"{BASE}/api/persons/1", status=204)

    created = client.post("persons", {"firstName": "Ann"}, version=version)
    updated = client.put("persons", "1", _Person(first_name="Ann"))
    deleted = client.delete("persons", "1")

    writes = [call.request for call in api.calls if call.request.method != "GET" and "/api/" in call.request.url]
    assert [request.method for request in writes] == ["POST", "PUT", "DELETE"]
    assert writes[0].body == b'{"firstName": "Ann"}'
    assert writes[0].headers["Content-Type"] == version
    assert writes[1].body == b'{"first_name":"Ann"}'
    assert writes[2].headers["Accept"] == "application/json"
    assert (created.status_code, updated.status_code, deleted.status_code) == (201, 200, 204)


@pytest.mark.parametrize(
    "call",
    [
        lambda client: client.post("", '{"a": 1}'),
        lambda client: client.post("persons", None),
        lambda client: client.post("persons", "  "),
        lambda client: client.put(" ", "1", '{"a": 1}'),
        lambda client: client.put("persons", "1", ""),
        lambda client: client.delete("persons", ""),
        lambda client: client.delete("", "1"),
    ],
)
def test_invalid_writes_fail_before_any_request(
    call: Callable[[ProxyClient], Any],
    client: ProxyClient,
    api: responses.RequestsMock,
) -> None:
    with pytest.raises(RequestValidationError):
        call(client)

    assert len(api.calls) == 0


def test_paging_context_is_bound_to_transport_events(
    proxy_config: ProxyClientConfig,
    api: responses.RequestsMock,
    capsys: pytest.CaptureFixture[str],
) -> None:
    UnifiedLogger.configure(LogConfig(level="INFO", format=LogFormat.JSON))
    client = ProxyClient(proxy_config)

    client.get_pages("persons", 2, page_size=50)
    client.get("persons")

    events = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.strip()]
    completed = [
        event for event in events if event["message"] == "http.request.completed" and event["method"] == "GET"
    ]
    assert len(completed) == 4
    assert [(event.get("resource"), event.get("strategy")) for event in completed] == [
        ("persons", PagingStrategy.TO_NUM_PAGES.value),
        ("persons", PagingStrategy.TO_NUM_PAGES.value),
        ("persons", PagingStrategy.TO_NUM_PAGES.value),
        (None, None),
    ]
