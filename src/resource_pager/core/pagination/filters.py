"""Filter kinds accepted by a paging request.

A request carries at most one filter. Each kind knows how to render itself as
the query string appended to the resource URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote_plus

__all__ = [
    "CRITERIA_FILTER_PREFIX",
    "CriteriaFilter",
    "NamedQueryFilter",
    "FilterMapFilter",
    "Filter",
]

CRITERIA_FILTER_PREFIX = "?criteria="


@dataclass(frozen=True, slots=True)
class CriteriaFilter:
    """JSON criteria filter, sent as ``?criteria=<encoded json>``."""

    value: str

    def to_query(self) -> str:
        criteria = self.value
        if criteria.startswith(CRITERIA_FILTER_PREFIX):
            criteria = criteria[criteria.index("=") + 1 :]
        return f"{CRITERIA_FILTER_PREFIX}{quote_plus(criteria)}"


@dataclass(frozen=True, slots=True)
class NamedQueryFilter:
    """Named query such as ``?keywordSearch={"keywordSearch": "x"}``.

    Everything up to the first ``=`` is kept as is; the remainder is encoded.
    """

    value: str

    def to_query(self) -> str:
        if "=" not in self.value:
            return quote_plus(self.value)
        split_at = self.value.index("=") + 1
        return f"{self.value[:split_at]}{quote_plus(self.value[split_at:])}"


@dataclass(frozen=True, slots=True)
class FilterMapFilter:
    """Legacy filter map (``?firstName=John``), appended verbatim."""

    value: str

    def to_query(self) -> str:
        return self.value


Filter = CriteriaFilter | NamedQueryFilter | FilterMapFilter | None
