"""Clients for the paginated resource API."""

from resource_pager.clients.async_client import AsyncProxyClient, ThreadPoolScheduler
from resource_pager.clients.proxy import ProxyClient

__all__ = ["AsyncProxyClient", "ProxyClient", "ThreadPoolScheduler"]
