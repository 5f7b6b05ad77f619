"""Selection of the fetch strategy from the caller's offset and count bounds."""

from __future__ import annotations

from enum import Enum

__all__ = ["PagingStrategy", "resolve_strategy"]


class PagingStrategy(str, Enum):
    """How a request is paged. Exactly one applies per request."""

    ALL_PAGES = "all_pages"
    TO_NUM_PAGES = "to_num_pages"
    FROM_OFFSET = "from_offset"
    FROM_OFFSET_TO_NUM_PAGES = "from_offset_to_num_pages"
    TO_NUM_ROWS = "to_num_rows"
    FROM_OFFSET_TO_NUM_ROWS = "from_offset_to_num_rows"

    @property
    def limits_rows(self) -> bool:
        return self in (PagingStrategy.TO_NUM_ROWS, PagingStrategy.FROM_OFFSET_TO_NUM_ROWS)


def resolve_strategy(offset: int, num_pages: int, num_rows: int) -> PagingStrategy:
    """Map which bounds are present to a strategy.

    A bound below 1 counts as absent. When both ``num_pages`` and ``num_rows``
    are given the page bound wins; the client API never passes both.
    """

    has_offset = offset >= 1
    has_pages = num_pages >= 1
    has_rows = num_rows >= 1

    if not has_offset and not has_pages and not has_rows:
        return PagingStrategy.ALL_PAGES
    if not has_offset and has_pages:
        return PagingStrategy.TO_NUM_PAGES
    if has_offset and not has_pages and not has_rows:
        return PagingStrategy.FROM_OFFSET
    if has_offset and has_pages:
        return PagingStrategy.FROM_OFFSET_TO_NUM_PAGES
    if not has_offset:
        return PagingStrategy.TO_NUM_ROWS
    return PagingStrategy.FROM_OFFSET_TO_NUM_ROWS
