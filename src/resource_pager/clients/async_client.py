"""Future-returning facade over :class:`ProxyClient`."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, TypeVar

from resource_pager.clients.proxy import ProxyClient

__all__ = ["AsyncProxyClient", "ThreadPoolScheduler"]

T = TypeVar("T")

_ASYNC_SUFFIX = "_async"


class ThreadPoolScheduler:
    """Run blocking callables on a thread pool and hand back futures."""

    def __init__(self, max_workers: int | None = None, *, executor: ThreadPoolExecutor | None = None) -> None:
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="resource-pager",
        )

    def run_async(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class AsyncProxyClient:
    """Expose every public ``ProxyClient`` method as ``<name>_async``.

    ``client.get_all_pages_async("persons")`` submits
    ``client.get_all_pages("persons")`` to the scheduler and returns a
    :class:`concurrent.futures.Future`. Errors surface from ``Future.result()``.
    """

    def __init__(self, client: ProxyClient, scheduler: ThreadPoolScheduler | None = None) -> None:
        self.client = client
        self.scheduler = scheduler or ThreadPoolScheduler()

    def __getattr__(self, name: str) -> Callable[..., Future[Any]]:
        if not name.endswith(_ASYNC_SUFFIX) or name.startswith("_"):
            raise AttributeError(name)
        target = getattr(self.client, name[: -len(_ASYNC_SUFFIX)], None)
        if target is None or not callable(target):
            raise AttributeError(name)
        return partial(self.scheduler.run_async, target)

    def __dir__(self) -> list[str]:
        names = [f"{name}{_ASYNC_SUFFIX}" for name in dir(self.client) if not name.startswith("_")]
        return sorted(set(super().__dir__()) | set(names))

    def close(self) -> None:
        self.scheduler.shutdown()
        self.client.close()

    def __enter__(self) -> "AsyncProxyClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
