"""Structured builders for criteria filters, named queries and filter maps.

Each builder renders to one of the filter kinds in
:mod:`resource_pager.core.pagination.filters`, so a built filter can be passed
anywhere a pre-rendered filter string is accepted::

    criteria = (
        CriteriaFilterBuilder()
        .with_simple_criteria("lastName", "Smith")
        .with_criteria(CriteriaObject("names").add("firstName", "John"))
        .build()
    )
    criteria.value
    # '?criteria={"lastName":"Smith","names":{"firstName":"John"}}'

Criteria nodes build plain dicts and lists which are serialised with
:func:`json.dumps`. String values are quoted; ``int``, ``float`` and ``bool``
values are emitted as JSON numbers and booleans.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from resource_pager.core.errors import PagingValidationError
from resource_pager.core.pagination.filters import (
    CRITERIA_FILTER_PREFIX,
    CriteriaFilter,
    FilterMapFilter,
    NamedQueryFilter,
)

__all__ = [
    "Criteria",
    "CriteriaArray",
    "CriteriaFilterBuilder",
    "CriteriaObject",
    "CriteriaValueArray",
    "FilterMapBuilder",
    "NamedQuery",
    "SimpleCriteria",
]

Scalar = str | int | float | bool


def _require_text(value: Any, what: str, owner: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        msg = f"Cannot build {owner} with a null or blank {what}"
        raise PagingValidationError(msg)


def _dump(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _merge(members: Iterable["Criteria"], owner: str) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for member in members:
        for key, value in member.as_dict().items():
            if key in merged:
                msg = f"Cannot build {owner}: key '{key}' is given more than once"
                raise PagingValidationError(msg)
            merged[key] = value
    return merged


@dataclass(slots=True)
class SimpleCriteria:
    """A single ``"key": value`` pair."""

    key: str
    value: Scalar

    def __post_init__(self) -> None:
        _require_text(self.key, "key", "SimpleCriteria")
        _require_text(self.value, "value", "SimpleCriteria")

    def as_dict(self) -> dict[str, Any]:
        return {self.key: self.value}

    def nest(self, label: str) -> "CriteriaObject":
        """Wrap this pair in an object: ``"label": {"key": value}``."""

        return CriteriaObject(label, [self])

    def build_filter(self) -> CriteriaFilter:
        return CriteriaFilterBuilder().with_criteria(self).build()


@dataclass(slots=True)
class CriteriaObject:
    """Several criteria grouped under ``label``.

    Without a label the members are rendered inline into the enclosing
    object or array element.
    """

    label: str | None
    members: list["Criteria"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.label is not None:
            _require_text(self.label, "label", "CriteriaObject")

    def add(self, key: str, value: Scalar) -> "CriteriaObject":
        self.members.append(SimpleCriteria(key, value))
        return self

    def add_criteria(self, criteria: "Criteria") -> "CriteriaObject":
        self.members.append(criteria)
        return self

    def nest(self, label: str) -> "CriteriaObject":
        return CriteriaObject(label, [self])

    def as_dict(self) -> dict[str, Any]:
        body = _merge(self.members, "CriteriaObject")
        if self.label is None:
            return body
        return {self.label: body}


@dataclass(slots=True)
class CriteriaValueArray:
    """A key matching any of several values: ``"key": ["a", "b"]``."""

    key: str
    values: list[Scalar] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_text(self.key, "key", "CriteriaValueArray")
        for value in self.values:
            _require_text(value, "value", "CriteriaValueArray")

    def add_value(self, value: Scalar) -> "CriteriaValueArray":
        _require_text(value, "value", "CriteriaValueArray")
        self.values.append(value)
        return self

    def as_dict(self) -> dict[str, Any]:
        return {self.key: list(self.values)}


@dataclass(slots=True)
class CriteriaArray:
    """An array of objects under ``label``; every element is its own object."""

    label: str
    elements: list["Criteria"] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_text(self.label, "label", "CriteriaArray")

    def add(self, key: str, value: Scalar) -> "CriteriaArray":
        self.elements.append(SimpleCriteria(key, value))
        return self

    def add_object(self, label: str, key: str, value: Scalar) -> "CriteriaArray":
        self.elements.append(CriteriaObject(label, [SimpleCriteria(key, value)]))
        return self

    def add_criteria(self, criteria: "Criteria") -> "CriteriaArray":
        self.elements.append(criteria)
        return self

    def as_dict(self) -> dict[str, Any]:
        return {self.label: [element.as_dict() for element in self.elements]}


Criteria = SimpleCriteria | CriteriaObject | CriteriaValueArray | CriteriaArray


class CriteriaFilterBuilder:
    """Collect criteria and render them as ``?criteria={...}``.

    Criteria sets only group criteria while building; all sets are rendered
    into the same JSON object.
    """

    def __init__(self) -> None:
        self._sets: list[list[Criteria]] = [[]]

    def with_criteria(self, criteria: Criteria) -> "CriteriaFilterBuilder":
        if criteria is None:
            msg = "Cannot build a criteria filter from a null criteria"
            raise PagingValidationError(msg)
        self._sets[-1].append(criteria)
        return self

    def with_simple_criteria(self, key: str, value: Scalar) -> "CriteriaFilterBuilder":
        return self.with_criteria(SimpleCriteria(key, value))

    def new_criteria_set(self) -> "CriteriaFilterBuilder":
        if self._sets[-1]:
            self._sets.append([])
        return self

    def build(self) -> CriteriaFilter:
        members = [criteria for criteria_set in self._sets for criteria in criteria_set]
        return CriteriaFilter(f"{CRITERIA_FILTER_PREFIX}{_dump(_merge(members, 'a criteria filter'))}")


@dataclass(slots=True)
class NamedQuery:
    """A server-defined query such as ``?keywordSearch={"keywordSearch": "x"}``.

    The query body is an object built from the same criteria nodes as a
    criteria filter, so combinations of plain pairs, labelled objects and
    arrays of objects are expressed by adding several members.
    """

    name: str
    members: list[Criteria] = field(default_factory=list)

    def __post_init__(self) -> None:
        _require_text(self.name, "query name", "NamedQuery")

    def add(self, key: str, value: Scalar) -> "NamedQuery":
        self.members.append(SimpleCriteria(key, value))
        return self

    def add_object(self, label: str, key: str, value: Scalar) -> "NamedQuery":
        self.members.append(CriteriaObject(label, [SimpleCriteria(key, value)]))
        return self

    def add_criteria(self, criteria: Criteria) -> "NamedQuery":
        self.members.append(criteria)
        return self

    def render(self) -> str:
        return f"?{self.name}={_dump(_merge(self.members, 'a named query'))}"

    def build_filter(self) -> NamedQueryFilter:
        return NamedQueryFilter(self.render())


class FilterMapBuilder:
    """Build a legacy ``?key=value&...`` filter from parameter pairs."""

    def __init__(self) -> None:
        self._pairs: dict[str, str] = {}

    def with_parameter_pair(self, key: str, value: str) -> "FilterMapBuilder":
        _require_text(key, "key", "a filter map")
        _require_text(value, "value", "a filter map")
        self._pairs[key] = value
        return self

    def build(self) -> FilterMapFilter:
        if not self._pairs:
            msg = "Cannot build a filter map without parameter pairs"
            raise PagingValidationError(msg)
        return FilterMapFilter(f"?{urlencode(self._pairs)}")
