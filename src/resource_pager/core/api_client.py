"""HTTP transport with timeouts, rate limiting and bearer authentication.

Each call is a single attempt: failures surface to the caller as ``requests``
exceptions and are never retried here.
"""

from __future__ import annotations

import random
import threading
import time
from collections import deque
from collections.abc import Mapping
from uuid import uuid4

import requests
from requests import Response
from requests.exceptions import RequestException

from resource_pager.config.models.http import HTTPClientConfig
from resource_pager.config.models.proxy import ProxyClientConfig
from resource_pager.core import urls
from resource_pager.core.auth import AccessToken
from resource_pager.core.log_events import LogEvents
from resource_pager.core.logger import UnifiedLogger
from resource_pager.core.response import ProxyResponse

__all__ = [
    "TokenBucketLimiter",
    "UnifiedAPIClient",
]

_BODY_METHODS = frozenset({"POST", "PUT"})


class TokenBucketLimiter:
    """Simple token bucket limiter enforcing max calls per period."""

    def __init__(self, max_calls: int, period: float, *, jitter: bool = True) -> None:
        if max_calls <= 0:
            msg = "max_calls must be > 0"
            raise ValueError(msg)
        if period <= 0:
            msg = "period must be > 0"
            raise ValueError(msg)
        self.max_calls = max_calls
        self.period = period
        self.jitter = jitter
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()
        self._jitter_max = period / max_calls

    def acquire(self) -> float:
        """Block until a token is available and return wait seconds."""

        waited = 0.0
        while True:
            with self._lock:
                now = time.monotonic()
                while self._timestamps and now - self._timestamps[0] >= self.period:
                    self._timestamps.popleft()
                if len(self._timestamps) < self.max_calls:
                    self._timestamps.append(now)
                    return waited
                sleep_for = self.period - (now - self._timestamps[0])
            if self.jitter:
                sleep_for += random.uniform(0.0, self._jitter_max)
            if sleep_for > 0:
                time.sleep(sleep_for)
                waited += sleep_for
            else:  # pragma: no cover - timestamps expire on the next pass
                time.sleep(0)


class UnifiedAPIClient:
    """Authenticated transport returning :class:`ProxyResponse` objects."""

    def __init__(
        self,
        config: ProxyClientConfig,
        *,
        name: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.name = name or "default"
        http_config = config.http
        self._session = session or requests.Session()
        self._session.headers.update(dict(http_config.headers))
        self._timeout = self._derive_timeout(http_config)
        self._rate_limiter = TokenBucketLimiter(
            http_config.rate_limit.max_calls,
            http_config.rate_limit.period,
            jitter=http_config.rate_limit_jitter,
        )
        self._token: AccessToken | None = None
        self._token_lock = threading.Lock()
        self._logger = UnifiedLogger.get(__name__).bind(
            component="http_client",
            http_client=self.name,
        )

    @staticmethod
    def _derive_timeout(config: HTTPClientConfig) -> tuple[float, float]:
        connect = min(config.connect_timeout_sec, config.timeout_sec)
        remaining = max(config.timeout_sec - connect, 0.0)
        read = config.read_timeout_sec
        if remaining > 0:
            read = min(read, remaining)
        return (connect, read)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "UnifiedAPIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def access_token(self) -> AccessToken:
        """Return the cached token, requesting a new one when none is usable."""

        with self._token_lock:
            token = self._token
            if token is None or (self.config.auto_refresh and not token.is_valid()):
                token = self._request_token()
                self._token = token
            return token

    def _request_token(self) -> AccessToken:
        url = urls.auth_url(
            self.config.region,
            self.config.expiration_minutes,
            root=self.config.base_url,
        )
        api_key = self.config.api_key.get_secret_value()
        headers = {"Authorization": f"Bearer {api_key}"}
        try:
            response = self._send("POST", url, headers)
        except RequestException as exc:
            self._logger.error(LogEvents.AUTH_TOKEN_FAILED, endpoint=url, error=str(exc))
            raise
        token = AccessToken.issued_now(response.text, self.config.expiration_minutes)
        self._logger.info(
            LogEvents.AUTH_TOKEN_REFRESHED,
            endpoint=url,
            expires_at=token.expires_at.isoformat(),
        )
        return token

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> ProxyResponse:
        """Issue one authenticated GET and wrap the result.

        Non-2xx statuses raise :class:`requests.HTTPError`.
        """

        return self.request("GET", url, headers)

    def post(self, url: str, body: str, headers: Mapping[str, str] | None = None) -> ProxyResponse:
        return self.request("POST", url, headers, body=body)

    def put(self, url: str, body: str, headers: Mapping[str, str] | None = None) -> ProxyResponse:
        return self.request("PUT", url, headers, body=body)

    def delete(self, url: str, headers: Mapping[str, str] | None = None) -> ProxyResponse:
        return self.request("DELETE", url, headers)

    def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        body: str | None = None,
    ) -> ProxyResponse:
        """Send one authenticated request; POST and PUT require a non-blank body."""

        if not url or not url.strip():
            msg = f"Cannot submit a {method} request due to a null or blank request URL"
            raise ValueError(msg)
        if method in _BODY_METHODS and (body is None or not body.strip()):
            msg = f"Cannot submit a {method} request due to a null or blank request body"
            raise ValueError(msg)
        merged: dict[str, str] = dict(headers or {})
        merged.update(self.access_token().auth_header())
        response = self._send(method, url, merged, body)
        return ProxyResponse(
            status_code=response.status_code,
            content=response.text,
            headers=response.headers,
            requested_url=response.url or url,
        )

    def _send(self, method: str, url: str, headers: Mapping[str, str], body: str | None = None) -> Response:
        request_id = str(uuid4())
        wait_seconds = self._rate_limiter.acquire()
        if wait_seconds:
            self._logger.debug(
                LogEvents.HTTP_RATE_LIMITER_WAIT,
                wait_seconds=wait_seconds,
                endpoint=url,
                request_id=request_id,
            )
        start = time.perf_counter()
        try:
            response = self._session.request(
                method,
                url,
                headers=dict(headers),
                data=body.encode("utf-8") if body is not None else None,
                timeout=self._timeout,
            )
        except RequestException as exc:
            self._logger.warning(
                LogEvents.HTTP_REQUEST_EXCEPTION,
                method=method,
                endpoint=url,
                duration_ms=(time.perf_counter() - start) * 1000,
                request_id=request_id,
                error=str(exc),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if not 200 <= response.status_code < 300:
            self._logger.error(
                LogEvents.HTTP_REQUEST_FAILED,
                method=method,
                endpoint=url,
                duration_ms=duration_ms,
                status_code=response.status_code,
                request_id=request_id,
            )
            if response.status_code < 400:
                raise requests.HTTPError(
                    f"{response.status_code} Unexpected status for url: {url}",
                    response=response,
                )
            response.raise_for_status()
        self._logger.info(
            LogEvents.HTTP_REQUEST_COMPLETED,
            method=method,
            endpoint=url,
            duration_ms=duration_ms,
            status_code=response.status_code,
            request_id=request_id,
        )
        return response
