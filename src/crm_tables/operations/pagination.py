# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Cursor pagination state machine.

:class:`PaginationController` owns one accumulated record list, the opaque
cursor of the next page and a ``has_more`` flag, for one active
:class:`~crm_tables.models.query.QueryDescriptor` at a time::

    idle -> fetching_initial -> ready <-> fetching_more
                  \\                 \\
                   +----> error <----+

Every request is tagged with the controller generation it was issued in.
Changing the descriptor's signature, forcing a refetch, or resetting starts a
new generation; a response that comes back for an older generation is
dropped instead of being applied. Any exception raised while fetching a page
moves the controller to ``error``; it is never raised to the caller. Within
one generation at most one request is in flight, so pages are applied in the
order they were requested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Set

from ..core.results import ListPage, QuerySnapshot
from ..models.query import QueryDescriptor
from ..models.record import TypedRecord, normalize_record

_logger = logging.getLogger(__name__)


class PaginationStatus(str, Enum):
    IDLE = "idle"
    FETCHING_INITIAL = "fetchingInitial"
    FETCHING_MORE = "fetchingMore"
    READY = "ready"
    ERROR = "error"


_FETCHING = (PaginationStatus.FETCHING_INITIAL, PaginationStatus.FETCHING_MORE)


@dataclass
class PaginationState:
    """
    Mutable state owned by exactly one controller.

    ``cursor`` is only meaningful together with the ``signature`` that produced it.
    """

    accumulated: List[TypedRecord] = field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = True
    signature: str = ""
    status: PaginationStatus = PaginationStatus.IDLE
    error: Optional[BaseException] = None


class PaginationController:
    """
    Accumulates the pages of one query and keeps its cursor paired with its signature.

    The controller is caller-owned: consumers that read the same table each
    create their own instance. There is no shared cache between instances.

    :param source: Anything with an ``async list(descriptor) -> ListPage`` method,
        normally the table transport.

    Example::

        controller = PaginationController(transport)
        await controller.apply(QueryDescriptor("Opportunities", page_size=50))
        while controller.state.has_more:
            await controller.load_more()
        rows = controller.records
    """

    def __init__(self, source: Any) -> None:
        self._source = source
        self.state = PaginationState()
        self._descriptor: Optional[QueryDescriptor] = None
        self._generation = 0
        self._requests = 0
        self._seen: Set[str] = set()
        self._failed_phase: Optional[PaginationStatus] = None

    # ------------------------------------------------------------ accessors
    @property
    def descriptor(self) -> Optional[QueryDescriptor]:
        return self._descriptor

    @property
    def records(self) -> List[TypedRecord]:
        return list(self.state.accumulated)

    @property
    def is_loading(self) -> bool:
        return self.state.status in _FETCHING

    def snapshot(self) -> QuerySnapshot:
        return QuerySnapshot(
            records=self.records,
            is_loading=self.is_loading,
            is_error=self.state.status is PaginationStatus.ERROR,
            error=self.state.error,
            has_more=self.state.has_more,
        )

    # ----------------------------------------------------------- transitions
    async def apply(self, descriptor: QueryDescriptor, *, force: bool = False) -> bool:
        """
        Make ``descriptor`` the active query.

        When its signature differs from the current one (or ``force`` is set, or
        the controller is idle) the accumulated records and cursor are cleared
        before anything else happens, and the first page is fetched. Otherwise
        the new descriptor only replaces ``limit``, ``page_size`` and ``view``
        for later pages.

        :param descriptor: Query to activate.
        :type descriptor: ~crm_tables.models.query.QueryDescriptor
        :param force: Refetch from the first page even when the signature is unchanged.
        :type force: bool
        :return: True if a first-page response was applied to the state.
        :rtype: bool
        """
        signature = descriptor.signature()
        if (
            not force
            and self.state.status is not PaginationStatus.IDLE
            and signature == self.state.signature
        ):
            self._descriptor = descriptor.with_cursor(None)
            return False

        self._generation += 1
        self._descriptor = descriptor.with_cursor(None)
        self._seen = set()
        self._failed_phase = None
        self.state = PaginationState(
            accumulated=[],
            cursor=None,
            has_more=True,
            signature=signature,
            status=PaginationStatus.FETCHING_INITIAL,
        )
        return await self._fetch(self._descriptor, PaginationStatus.FETCHING_INITIAL)

    async def load_more(self) -> bool:
        """
        Fetch the page after the stored cursor.

        A no-op unless the controller is ready with more pages to come, or a
        previous follow-up page failed and its cursor is still held. A second
        call made while a page is in flight is dropped.

        :return: True if a response was applied to the state.
        :rtype: bool
        """
        state = self.state
        resumable = state.status is PaginationStatus.ERROR and self._failed_phase is PaginationStatus.FETCHING_MORE
        if state.status is not PaginationStatus.READY and not resumable:
            return False
        if not state.has_more or not state.cursor or self._descriptor is None:
            return False
        state.status = PaginationStatus.FETCHING_MORE
        return await self._fetch(self._descriptor.with_cursor(state.cursor), PaginationStatus.FETCHING_MORE)

    async def refetch(self) -> bool:
        """Fetch the active query again from its first page."""
        if self._descriptor is None:
            return False
        return await self.apply(self._descriptor, force=True)

    def reset(self) -> None:
        """Return to ``idle`` with everything cleared; in-flight responses will be dropped."""
        self._generation += 1
        self._seen = set()
        self._failed_phase = None
        self.state = PaginationState()

    # --------------------------------------------------------------- internal
    async def _fetch(self, request: QueryDescriptor, phase: PaginationStatus) -> bool:
        generation = self._generation
        self._requests += 1
        seq = self._requests
        _logger.debug(
            "request #%d (%s) table=%s cursor=%r", seq, phase.value, request.table_id, request.cursor
        )
        try:
            page = await self._source.list(request)
        except Exception as exc:  # credential, transport and decoding failures alike
            if generation != self._generation:
                _logger.debug("dropping failure of superseded request #%d", seq)
                return False
            self._fail(exc, phase, request)
            return True
        if generation != self._generation:
            _logger.debug("dropping response of superseded request #%d", seq)
            return False
        _logger.debug("request #%d returned %d record(s)", seq, len(page))
        self._apply_page(page, phase)
        return True

    def _apply_page(self, page: ListPage, phase: PaginationStatus) -> None:
        state = self.state
        if phase is PaginationStatus.FETCHING_INITIAL:
            state.accumulated = []
            self._seen = set()
        for raw in page.records:
            if raw.id in self._seen:
                continue
            self._seen.add(raw.id)
            state.accumulated.append(normalize_record(raw))
        state.cursor = page.cursor or None
        state.has_more = page.has_more
        state.error = None
        state.status = PaginationStatus.READY
        self._failed_phase = None

    def _fail(self, exc: BaseException, phase: PaginationStatus, request: QueryDescriptor) -> None:
        _logger.warning("list %s failed during %s: %s", request.table_id, phase.value, exc)
        self.state.status = PaginationStatus.ERROR
        self.state.error = exc
        self._failed_phase = phase


__all__ = ["PaginationController", "PaginationState", "PaginationStatus"]
