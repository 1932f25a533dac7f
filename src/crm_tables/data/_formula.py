# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Filter/sort translation into the backend's query-parameter encoding.

Filters become one boolean formula (``filterByFormula``) and sort conditions
become a JSON array (``sort``). Both keys are omitted when there is nothing
to express.
"""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any, Callable, Dict, List, Sequence

from ..common.constants import PARAM_FILTER_BY_FORMULA, PARAM_SORT
from ..models.query import FilterCondition, FilterOperator, SortCondition

_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)\Z")

_COMPARISONS = {
    FilterOperator.LT: "<",
    FilterOperator.LTE: "<=",
    FilterOperator.GT: ">",
    FilterOperator.GTE: ">=",
}


def _escape(value: Any) -> str:
    """Escape a value for use inside a single-quoted formula string."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def _quoted(value: Any) -> str:
    if value is None:
        return "BLANK()"
    if isinstance(value, bool):
        return "TRUE()" if value else "FALSE()"
    return f"'{_escape(value)}'"


def _numeric(value: Any) -> str:
    """Plain decimal literal for a comparison operand."""
    if isinstance(value, bool):
        raise ValueError(f"numeric comparison needs a number, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"numeric comparison needs a finite number, got {value!r}")
        # repr keeps the shortest round-trip digits; 'f' drops the exponent
        return format(Decimal(repr(value)), "f")
    text = str(value).strip()
    if not _DECIMAL.match(text):
        raise ValueError(f"numeric comparison needs a number, got {value!r}")
    return text


def _ref(field: str) -> str:
    return "{" + " ".join(field.split()) + "}"


def _eq(c: FilterCondition) -> str:
    return f"{_ref(c.field)} = {_quoted(c.value)}"


def _neq(c: FilterCondition) -> str:
    return f"{_ref(c.field)} != {_quoted(c.value)}"


def _find(c: FilterCondition) -> str:
    return f"FIND('{_escape(c.value)}', {_ref(c.field)})"


def _not_find(c: FilterCondition) -> str:
    return f"NOT({_find(c)})"


def _custom(c: FilterCondition) -> str:
    return "" if c.value is None else str(c.value).strip()


_FRAGMENTS: Dict[FilterOperator, Callable[[FilterCondition], str]] = {
    FilterOperator.EQ: _eq,
    FilterOperator.NEQ: _neq,
    FilterOperator.CONTAINS: _find,
    FilterOperator.NOT_CONTAINS: _not_find,
    FilterOperator.CUSTOM: _custom,
}


def filter_fragment(condition: FilterCondition) -> str:
    """
    Translate one condition into a formula fragment.

    :param condition: Filter condition.
    :type condition: ~crm_tables.models.query.FilterCondition
    :return: Formula fragment; empty for a blank custom fragment.
    :rtype: str
    :raises ValueError: If a numeric comparison gets a non-numeric value.

    Example::

        filter_fragment(FilterCondition("Stage", "eq", "Won"))      # "{Stage} = 'Won'"
        filter_fragment(FilterCondition("Deal Value", "gt", 1000))  # "{Deal Value} > 1000"
    """
    op = condition.operator
    if op in _COMPARISONS:
        return f"{_ref(condition.field)} {_COMPARISONS[op]} {_numeric(condition.value)}"
    return _FRAGMENTS[op](condition)


def build_formula(filters: Sequence[FilterCondition]) -> str:
    """AND all non-empty fragments together; empty string when there are none."""
    fragments = [f for f in (filter_fragment(c) for c in filters) if f]
    if not fragments:
        return ""
    return f"AND({', '.join(fragments)})"


def build_sort(sort: Sequence[SortCondition]) -> List[Dict[str, str]]:
    return [s.to_dict() for s in sort]


def translate(filters: Sequence[FilterCondition], sort: Sequence[SortCondition]) -> Dict[str, str]:
    """
    Translate filter and sort conditions into list-call query parameters.

    :param filters: Conditions, AND-ed together. ``is_array`` hints are ignored here.
    :type filters: Sequence[FilterCondition]
    :param sort: Sort conditions in priority order.
    :type sort: Sequence[SortCondition]
    :return: Dict with ``filterByFormula`` and/or ``sort`` keys, each present only when non-empty.
    :rtype: dict[str, str]

    Example::

        translate([FilterCondition("Owner", "contains", "emp_42", is_array=True)], [])
        # {"filterByFormula": "AND(FIND('emp_42', {Owner}))"}
    """
    params: Dict[str, str] = {}
    formula = build_formula(filters)
    if formula:
        params[PARAM_FILTER_BY_FORMULA] = formula
    if sort:
        params[PARAM_SORT] = json.dumps(build_sort(sort))
    return params


__all__ = ["translate", "filter_fragment", "build_formula", "build_sort"]
