# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types for table operations.

- :class:`ListPage`: one page returned by a list call, with its continuation cursor.
- :class:`QuerySnapshot`: a read-only view of a paginated query's current state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.record import RawRecord, TypedRecord


@dataclass(frozen=True)
class ListPage:
    """
    A single page of a list call.

    :param records: Records in this page, in server order.
    :type records: list[RawRecord]
    :param cursor: Opaque cursor for the next page; ``None`` when this is the last page.
    :type cursor: str | None
    """

    records: List[RawRecord] = field(default_factory=list)
    cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return bool(self.cursor)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class QuerySnapshot:
    """
    Point-in-time copy of a paginated query, safe to hand to rendering code.

    Example::

        snap = query.snapshot()
        if snap.is_error:
            show_error(snap.error)
        for row in snap.records:
            render(row)
    """

    records: List[TypedRecord] = field(default_factory=list)
    is_loading: bool = False
    is_error: bool = False
    error: Optional[BaseException] = None
    has_more: bool = False


__all__ = ["ListPage", "QuerySnapshot"]
