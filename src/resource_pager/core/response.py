"""Response container shared by the transport, the paging engine and converters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from requests.structures import CaseInsensitiveDict

from resource_pager.core.errors import MalformedContentError

__all__ = ["ProxyResponse"]


@dataclass(frozen=True, slots=True)
class ProxyResponse:
    """One fetched page: status, headers and the raw body text."""

    status_code: int
    content: str | None
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    requested_url: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers))

    def header(self, name: str) -> str | None:
        """Return the header value for ``name`` (case-insensitive) or ``None``."""

        if not name or not name.strip():
            return None
        return self.headers.get(name)

    def is_blank(self) -> bool:
        return self.content is None or not self.content.strip()

    def content_as_json(self) -> Any:
        """Decode the body as JSON, raising :class:`MalformedContentError` on failure."""

        if self.content is None:
            return None
        try:
            return json.loads(self.content)
        except ValueError as exc:
            raise MalformedContentError(
                f"Unable to decode JSON response from {self.requested_url!s}"
            ) from exc

    def content_as_list(self) -> list[Any]:
        """Decode the body and require it to be a JSON array."""

        payload = self.content_as_json()
        if not isinstance(payload, list):
            raise MalformedContentError(
                f"Expected JSON array from {self.requested_url!s}, "
                f"received {type(payload).__name__}"
            )
        return payload

    def with_content(self, content: str) -> "ProxyResponse":
        """Return a copy carrying ``content`` with the same status, headers and url."""

        return ProxyResponse(
            status_code=self.status_code,
            content=content,
            headers=CaseInsensitiveDict(self.headers),
            requested_url=self.requested_url,
        )
