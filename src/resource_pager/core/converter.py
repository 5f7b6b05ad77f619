"""Conversions between :class:`ProxyResponse` pages and strings, JSON and models.

The trimming helpers are used by the paging engine when the probe response
already holds every requested row: they cut the JSON array body down to the
requested window and return a new response with the original headers.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from resource_pager.core.errors import MalformedContentError
from resource_pager.core.response import ProxyResponse

__all__ = [
    "trim_to_first_n",
    "trim_from_offset",
    "trim_from_offset_for_n",
    "to_page_based_strings",
    "to_row_based_strings",
    "to_page_based_json",
    "to_row_based_json",
    "to_typed_list",
    "to_request_body",
]

ModelT = TypeVar("ModelT")


def _dump(rows: Sequence[Any]) -> str:
    return json.dumps(list(rows), separators=(",", ":"), ensure_ascii=False)


def _params_valid(response: ProxyResponse, value: int) -> bool:
    if response.is_blank():
        return False
    return value >= 0


def trim_to_first_n(response: ProxyResponse, num_rows: int) -> ProxyResponse:
    """Keep the first ``num_rows`` elements of the body."""

    if not _params_valid(response, num_rows):
        return response
    rows = response.content_as_list()
    return response.with_content(_dump(rows[:num_rows]))


def trim_from_offset(response: ProxyResponse, offset: int) -> ProxyResponse:
    """Keep the elements at index ``offset`` and beyond."""

    if not _params_valid(response, offset):
        return response
    rows = response.content_as_list()
    return response.with_content(_dump(rows[offset:]))


def trim_from_offset_for_n(response: ProxyResponse, offset: int, num_rows: int) -> ProxyResponse:
    """Keep ``num_rows`` elements starting at ``offset``."""

    if not _params_valid(response, offset):
        return response
    trimmed = trim_from_offset(response, offset)
    return trim_to_first_n(trimmed, num_rows)


def to_page_based_strings(responses: Iterable[ProxyResponse] | None) -> list[str | None]:
    """Return the raw body of each page."""

    if responses is None:
        return []
    return [response.content for response in responses]


def to_page_based_json(responses: Iterable[ProxyResponse] | None) -> list[Any]:
    if responses is None:
        return []
    return [response.content_as_json() for response in responses]


def to_row_based_json(responses: Iterable[ProxyResponse] | None) -> list[Any]:
    """Flatten every page into one list of rows.

    A page whose body is not an array contributes itself as a single row.
    """

    rows: list[Any] = []
    for page in to_page_based_json(responses):
        if isinstance(page, list):
            rows.extend(page)
        else:
            rows.append(page)
    return rows


def to_row_based_strings(responses: Iterable[ProxyResponse] | None) -> list[str]:
    return [json.dumps(row, separators=(",", ":"), ensure_ascii=False) for row in to_row_based_json(responses)]


def to_typed_list(response: ProxyResponse, item_type: type[ModelT]) -> list[ModelT]:
    """Validate the JSON array body into a list of ``item_type`` instances."""

    if response.content is None:
        return []
    adapter = TypeAdapter(list[item_type])  # type: ignore[valid-type]
    try:
        return adapter.validate_json(response.content)
    except ValidationError as exc:
        raise MalformedContentError(
            f"Response from {response.requested_url!s} does not match {item_type.__name__}"
        ) from exc


def to_request_body(body: str | BaseModel | Mapping[str, Any] | Sequence[Any]) -> str:
    """Serialise a POST/PUT body to JSON text.

    Strings are sent as given; pydantic models are dumped by alias.
    """

    if isinstance(body, str):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True)
    return json.dumps(body, ensure_ascii=False)
