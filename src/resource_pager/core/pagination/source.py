"""Protocol of the collaborator the paging engine fetches pages through."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from resource_pager.core.response import ProxyResponse

if TYPE_CHECKING:
    from resource_pager.core.pagination.request import PagingRequest

__all__ = ["PageSource"]


class PageSource(Protocol):
    """Issues the GET calls of a paged fetch."""

    def fetch_first_page(self, request: "PagingRequest") -> ProxyResponse:
        """Fetch the resource with the request's filter and no offset or limit."""
        ...

    def fetch_page(self, request: "PagingRequest", offset: int, page_size: int) -> ProxyResponse:
        """Fetch ``page_size`` rows starting at ``offset``."""
        ...
