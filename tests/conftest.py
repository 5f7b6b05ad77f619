"""Shared pytest fixtures for resource_pager tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog
from hypothesis import HealthCheck, settings

from resource_pager.config.models import HTTPClientConfig, ProxyClientConfig, RateLimitConfig
from resource_pager.core.logger import LogConfig, UnifiedLogger
from resource_pager.core.pagination import PagingRequest
from resource_pager.core.response import ProxyResponse

API_KEY = "0f0e5f5a-6c9b-4c5e-9d1c-1a2b3c4d5e6f"
BASE_URL = "https://integrate.elluciancloud.com"

settings.register_profile(
    "resource_pager",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("resource_pager")

_ENV_VARS = (
    "RESOURCE_PAGER_API_KEY",
    "RESOURCE_PAGER_REGION",
    "RESOURCE_PAGER_BASE_URL",
    "RESOURCE_PAGER_CONFIG",
    "RESOURCE_PAGER_LOG_LEVEL",
)


def make_page(
    rows: list[Any] | None,
    *,
    total: int | None = None,
    max_page_size: int | str | None = None,
    url: str | None = None,
) -> ProxyResponse:
    """Build a 200 response with a JSON array body and paging headers."""

    headers: dict[str, str] = {}
    if total is not None:
        headers["x-total-count"] = str(total)
    if max_page_size is not None:
        headers["x-max-page-size"] = str(max_page_size)
    content = None if rows is None else json.dumps(rows)
    return ProxyResponse(status_code=200, content=content, headers=headers, requested_url=url)


class StubPageSource:
    """In-memory :class:`PageSource` over ``total`` numbered rows."""

    def __init__(
        self,
        total: int,
        *,
        default_page_size: int = 25,
        max_page_size: int | None = None,
        fail_at: int | None = None,
    ) -> None:
        self.rows = [{"id": index} for index in range(total)]
        self.total = total
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.fail_at = fail_at
        self.first_page_calls: list[PagingRequest] = []
        self.page_calls: list[tuple[int, int]] = []

    def fetch_first_page(self, request: PagingRequest) -> ProxyResponse:
        self.first_page_calls.append(request)
        return make_page(
            self.rows[: self.default_page_size],
            total=self.total,
            max_page_size=self.max_page_size,
        )

    def fetch_page(self, request: PagingRequest, offset: int, page_size: int) -> ProxyResponse:
        if self.fail_at is not None and len(self.page_calls) == self.fail_at:
            raise ConnectionError(f"fetch {self.fail_at} failed")
        self.page_calls.append((offset, page_size))
        return make_page(
            self.rows[offset : offset + page_size],
            total=self.total,
            max_page_size=self.max_page_size,
        )

    @property
    def offsets(self) -> list[int]:
        return [offset for offset, _ in self.page_calls]

    @property
    def sizes(self) -> list[int]:
        return [size for _, size in self.page_calls]


@pytest.fixture
def page_source_factory() -> Callable[..., StubPageSource]:
    """Factory for :class:`StubPageSource` instances."""
    return StubPageSource


@pytest.fixture
def api_key() -> str:
    return API_KEY


@pytest.fixture
def proxy_config() -> ProxyClientConfig:
    """Client configuration with a rate limit high enough to never wait."""
    return ProxyClientConfig(
        api_key=API_KEY,
        http=HTTPClientConfig(
            rate_limit=RateLimitConfig(max_calls=1000, period=1.0),
            rate_limit_jitter=False,
        ),
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> Iterator[None]:
    """Isolate tests from ``RESOURCE_PAGER_*`` variables and any local ``.env``."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    UnifiedLogger.configure(LogConfig(level="WARNING"))
    yield
    UnifiedLogger.reset()
    structlog.reset_defaults()


@pytest.fixture
def page_factory() -> Callable[..., ProxyResponse]:
    """Factory for JSON array responses carrying paging headers."""
    return make_page
