# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Declarative query descriptions for table list calls.

A :class:`QueryDescriptor` says what to fetch from one table: filter and sort
conditions, an optional total cap, a per-page size, a named view and an
opaque cursor. Its :meth:`~QueryDescriptor.signature` identifies the result
sequence a cursor belongs to.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union


class FilterOperator(str, Enum):
    """Operators understood by the formula translator."""

    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    CUSTOM = "custom"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FilterCondition:
    """
    One filter condition.

    With ``operator=CUSTOM`` the ``value`` is a raw formula fragment used
    verbatim and ``field`` is ignored.

    :param field: Field name as shown in the backend.
    :type field: str
    :param operator: Comparison operator; plain strings such as ``"eq"`` are accepted.
    :type operator: FilterOperator or str
    :param value: Value to compare against.
    :param is_array: Hint that the field holds multiple values. Upstream callers use it
        to pick ``contains``; the translator does not read it.
    :type is_array: bool
    """

    field: str
    operator: FilterOperator
    value: Any = None
    is_array: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", FilterOperator(self.operator))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "operator": self.operator.value,
            "value": self.value,
            "isArray": self.is_array,
        }


@dataclass(frozen=True)
class SortCondition:
    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection(self.direction))

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "direction": self.direction.value}


FilterLike = Union[FilterCondition, Dict[str, Any]]
SortLike = Union[SortCondition, Dict[str, Any]]


def _coerce_filter(item: FilterLike) -> FilterCondition:
    if isinstance(item, FilterCondition):
        return item
    if isinstance(item, dict):
        return FilterCondition(
            field=item.get("field", ""),
            operator=item["operator"],
            value=item.get("value"),
            is_array=bool(item.get("isArray", item.get("is_array", False))),
        )
    raise TypeError("filters must contain FilterCondition or dict items")


def _coerce_sort(item: SortLike) -> SortCondition:
    if isinstance(item, SortCondition):
        return item
    if isinstance(item, dict):
        return SortCondition(field=item["field"], direction=item.get("direction", SortDirection.ASC))
    raise TypeError("sort must contain SortCondition or dict items")


@dataclass(frozen=True)
class QueryDescriptor:
    """
    What to fetch from a table.

    Two descriptors are cursor-compatible when ``table_id``, ``filters`` and
    ``sort`` are equal; ``limit``, ``page_size``, ``view`` and ``cursor`` do not
    take part in that comparison.

    :param table_id: Table identifier. Required.
    :type table_id: str
    :param filters: Filter conditions, AND-ed together. Dicts are converted.
    :type filters: Sequence[FilterCondition | dict]
    :param sort: Sort conditions, in priority order. Dicts are converted.
    :type sort: Sequence[SortCondition | dict]
    :param limit: Total record cap (``maxRecords``).
    :type limit: int or None
    :param page_size: Records per page (``pageSize``).
    :type page_size: int or None
    :param cursor: Opaque continuation token returned by a previous page.
    :type cursor: str or None
    :param view: Named backend view.
    :type view: str or None

    Example::

        descriptor = QueryDescriptor(
            "Opportunities",
            filters=[FilterCondition("Owner", "contains", "emp_42", is_array=True)],
            sort=[SortCondition("Created Date", "desc")],
            page_size=50,
        )
    """

    table_id: str
    filters: Tuple[FilterCondition, ...] = field(default_factory=tuple)
    sort: Tuple[SortCondition, ...] = field(default_factory=tuple)
    limit: Optional[int] = None
    page_size: Optional[int] = None
    cursor: Optional[str] = None
    view: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.table_id, str) or not self.table_id.strip():
            raise ValueError("table_id is required")
        object.__setattr__(self, "filters", tuple(_coerce_filter(f) for f in (self.filters or ())))
        object.__setattr__(self, "sort", tuple(_coerce_sort(s) for s in (self.sort or ())))
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be at least 1")
        if self.page_size is not None and self.page_size < 1:
            raise ValueError("page_size must be at least 1")

    def signature(self) -> str:
        """
        Return the stable key identifying this descriptor's result sequence.

        :return: JSON text built from the table id, filters and sort.
        :rtype: str
        """
        return json.dumps(
            {
                "table": self.table_id,
                "filters": [f.to_dict() for f in self.filters],
                "sort": [s.to_dict() for s in self.sort],
            },
            sort_keys=True,
            default=str,
        )

    def is_compatible(self, other: "QueryDescriptor") -> bool:
        return self.signature() == other.signature()

    def with_cursor(self, cursor: Optional[str]) -> "QueryDescriptor":
        return replace(self, cursor=cursor)

    def with_page_size(self, page_size: Optional[int]) -> "QueryDescriptor":
        return replace(self, page_size=page_size)


def descriptor_for(
    table_id: str,
    filters: Optional[Sequence[FilterLike]] = None,
    sort: Optional[Sequence[SortLike]] = None,
    **options: Any,
) -> QueryDescriptor:
    """Build a :class:`QueryDescriptor`, accepting plain dicts for conditions."""
    return QueryDescriptor(table_id, filters=tuple(filters or ()), sort=tuple(sort or ()), **options)


__all__ = [
    "FilterOperator",
    "SortDirection",
    "FilterCondition",
    "SortCondition",
    "QueryDescriptor",
    "descriptor_for",
]
