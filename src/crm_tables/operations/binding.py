# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Per-table bindings.

:func:`create_table_binding` closes the transport over one table identifier
and returns a :class:`TableBinding` exposing paginated queries, single-record
reads, create/update/delete, and a load-everything helper.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from ..core.results import QuerySnapshot
from ..models.query import QueryDescriptor, descriptor_for
from ..models.record import TypedRecord, normalize_record
from ..models.schema import TableSchema
from .pagination import PaginationController, PaginationStatus

if TYPE_CHECKING:
    import pandas as pd

    from ..data._transport import _TableTransport

_logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class TableQuery:
    """
    Handle on one paginated query, backed by its own
    :class:`~crm_tables.operations.pagination.PaginationController`.

    Obtained from :meth:`TableBinding.query`. List failures never raise here:
    they surface through :attr:`is_error` and :attr:`error`.

    Example::

        q = await client.table("Opportunities").query(page_size=50)
        render(q.records)
        if q.has_more:
            await q.load_more()
        await q.set_descriptor(q.descriptor_with(filters=[...]))   # resets
    """

    def __init__(self, binding: "TableBinding", controller: PaginationController) -> None:
        self._binding = binding
        self._controller = controller

    @property
    def controller(self) -> PaginationController:
        return self._controller

    @property
    def descriptor(self) -> Optional[QueryDescriptor]:
        return self._controller.descriptor

    @property
    def records(self) -> List[TypedRecord]:
        return self._controller.records

    @property
    def is_loading(self) -> bool:
        return self._controller.is_loading

    @property
    def is_error(self) -> bool:
        return self._controller.state.status is PaginationStatus.ERROR

    @property
    def error(self) -> Optional[BaseException]:
        return self._controller.state.error

    @property
    def has_more(self) -> bool:
        return self._controller.state.has_more

    def snapshot(self) -> QuerySnapshot:
        return self._controller.snapshot()

    def descriptor_with(self, **options: Any) -> QueryDescriptor:
        """Build a descriptor for this table from keyword options."""
        return descriptor_for(self._binding.table_id, **options)

    async def set_descriptor(self, descriptor: QueryDescriptor) -> bool:
        """Switch to ``descriptor``; a changed filter/sort signature restarts from the first page."""
        self._binding._check_query(descriptor)
        return await self._controller.apply(descriptor)

    async def load_more(self) -> bool:
        return await self._controller.load_more()

    async def refetch(self) -> bool:
        return await self._controller.refetch()

    def reset_records(self) -> None:
        self._controller.reset()


class TableBinding:
    """
    The operations bound to one table.

    :param transport: Table transport issuing the HTTP calls.
    :type transport: ~crm_tables.data._transport._TableTransport
    :param table_id: Table identifier.
    :type table_id: str
    :param schema: Optional declared field set; when given, queries and payloads
        naming unknown fields raise :class:`~crm_tables.core.errors.SchemaError`.
    :type schema: ~crm_tables.models.schema.TableSchema or None
    """

    def __init__(self, transport: "_TableTransport", table_id: str, schema: Optional[TableSchema] = None) -> None:
        if not isinstance(table_id, str) or not table_id.strip():
            raise ValueError("table_id is required")
        if schema is not None and schema.table_id != table_id:
            raise ValueError(f"schema is for table '{schema.table_id}', not '{table_id}'")
        self._transport = transport
        self.table_id = table_id
        self.schema = schema

    def __repr__(self) -> str:
        return f"TableBinding(table_id={self.table_id!r})"

    # ------------------------------------------------------------ helpers
    def _descriptor(self, descriptor: Optional[QueryDescriptor], options: Mapping[str, Any]) -> QueryDescriptor:
        if descriptor is None:
            descriptor = descriptor_for(self.table_id, **options)
        elif options:
            raise TypeError("pass either a descriptor or keyword options, not both")
        self._check_query(descriptor)
        return descriptor

    def _check_query(self, descriptor: QueryDescriptor) -> None:
        if descriptor.table_id != self.table_id:
            raise ValueError(f"descriptor targets table '{descriptor.table_id}', binding is for '{self.table_id}'")
        if self.schema is not None:
            self.schema.check_query(descriptor)

    def controller(self) -> PaginationController:
        """Return a new, caller-owned pagination controller for this table."""
        return PaginationController(self._transport)

    # ------------------------------------------------------------- queries
    async def query(
        self,
        descriptor: Optional[QueryDescriptor] = None,
        *,
        fetch: bool = True,
        **options: Any,
    ) -> TableQuery:
        """
        Start a paginated query with its own controller.

        :param descriptor: Query to run. When omitted, one is built from ``options``
            (``filters``, ``sort``, ``limit``, ``page_size``, ``view``).
        :type descriptor: ~crm_tables.models.query.QueryDescriptor or None
        :param fetch: Fetch the first page before returning. With ``False`` the
            handle stays idle until :meth:`TableQuery.set_descriptor` is awaited.
        :type fetch: bool
        :return: Query handle.
        :rtype: TableQuery
        """
        descriptor = self._descriptor(descriptor, options)
        handle = TableQuery(self, self.controller())
        if fetch:
            await handle.set_descriptor(descriptor)
        return handle

    async def list_all(
        self,
        descriptor: Optional[QueryDescriptor] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        **options: Any,
    ) -> List[TypedRecord]:
        """
        Load every page of a query and return the complete record list.

        Runs only when awaited, on a fresh controller per call, requesting
        ``batch_size`` records per page. Unlike :meth:`query`, a page failure is raised.

        :param descriptor: Query to run, or ``None`` to build one from ``options``.
        :type descriptor: ~crm_tables.models.query.QueryDescriptor or None
        :param batch_size: Records per page.
        :type batch_size: int
        :return: All matching records, in server order.
        :rtype: list[dict[str, Any]]
        :raises ~crm_tables.core.errors.TransportError: If any page fails.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        descriptor = self._descriptor(descriptor, options).with_page_size(batch_size)
        controller = self.controller()
        await controller.apply(descriptor)
        while True:
            state = controller.state
            if state.status is PaginationStatus.ERROR:
                raise state.error
            if not state.has_more:
                break
            if not await controller.load_more():
                break
        return controller.records

    async def list_all_dataframe(
        self,
        descriptor: Optional[QueryDescriptor] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        **options: Any,
    ) -> "pd.DataFrame":
        """Like :meth:`list_all`, returned as a pandas DataFrame with ``id`` and ``createdTime`` first."""
        from ..utils._pandas import records_to_dataframe

        records = await self.list_all(descriptor, batch_size, **options)
        return records_to_dataframe(records)

    # -------------------------------------------------------------- records
    async def get_by_id(self, record_id: Optional[str]) -> Optional[TypedRecord]:
        """
        Fetch one record.

        :param record_id: Record identifier. Empty or ``None`` skips the call.
        :type record_id: str or None
        :return: The typed record, or ``None`` when absent.
        :rtype: dict[str, Any] or None
        """
        if not record_id:
            return None
        try:
            raw = await self._transport.get_by_id(self.table_id, record_id)
        except Exception:
            _logger.error("Failed to fetch %s record %s", self.table_id, record_id, exc_info=True)
            raise
        return normalize_record(raw) if raw is not None else None

    async def create(self, fields: Mapping[str, Any]) -> TypedRecord:
        """
        Create a record and return it as the server stored it.

        :param fields: Field values. Required-field checks are the caller's job.
        :type fields: Mapping[str, Any]
        :return: The created record with its server-assigned ``id``.
        :rtype: dict[str, Any]
        :raises ~crm_tables.core.errors.TransportError: If the call fails; the failure is logged first.
        """
        if self.schema is not None:
            self.schema.check_payload(fields)
        try:
            raw = await self._transport.create(self.table_id, fields)
        except Exception:
            _logger.error("Failed to create %s record", self.table_id, exc_info=True)
            raise
        return normalize_record(raw)

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> TypedRecord:
        """Patch the given fields of a record and return the updated record."""
        if not record_id:
            raise ValueError("record_id is required")
        if self.schema is not None:
            self.schema.check_payload(fields)
        try:
            raw = await self._transport.update(self.table_id, record_id, fields)
        except Exception:
            _logger.error("Failed to update %s record %s", self.table_id, record_id, exc_info=True)
            raise
        return normalize_record(raw)

    async def delete(self, record_id: str) -> bool:
        """Delete a record. Returns True on success; failures are logged and re-raised."""
        if not record_id:
            raise ValueError("record_id is required")
        try:
            await self._transport.delete(self.table_id, record_id)
        except Exception:
            _logger.error("Failed to delete %s record %s", self.table_id, record_id, exc_info=True)
            raise
        return True


def create_table_binding(
    transport: "_TableTransport",
    table_id: str,
    schema: Optional[TableSchema] = None,
) -> TableBinding:
    """
    Bind the table operations to ``table_id``.

    :param transport: Table transport.
    :param table_id: Table identifier.
    :type table_id: str
    :param schema: Optional declared field set for the table.
    :type schema: ~crm_tables.models.schema.TableSchema or None
    :return: The bound operations.
    :rtype: TableBinding
    """
    return TableBinding(transport, table_id, schema)


__all__ = ["TableBinding", "TableQuery", "create_table_binding", "DEFAULT_BATCH_SIZE"]
