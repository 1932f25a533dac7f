# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Known field sets per table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping

from ..common.constants import RECORD_CREATED_TIME, RECORD_ID
from ..core._error_codes import SCHEMA_TABLE_MISMATCH, SCHEMA_UNKNOWN_FIELD
from ..core.errors import SchemaError
from .query import FilterOperator, QueryDescriptor
from .record import TypedRecord


@dataclass(frozen=True)
class TableSchema:
    """
    The declared field names of one table.

    :param table_id: Table identifier the schema belongs to.
    :type table_id: str
    :param fields: Field names the table exposes.
    :type fields: Iterable[str]

    Example::

        schema = TableSchema("Accounts", ["Name", "Owner", "Deal Value"])
        schema.check_fields(["Name"])        # ok
        schema.check_fields(["Nmae"])        # raises SchemaError
    """

    table_id: str
    fields: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", frozenset(self.fields))

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def check_fields(self, names: Iterable[str]) -> None:
        """
        Raise :class:`~crm_tables.core.errors.SchemaError` for the first undeclared name.

        :param names: Field names to check.
        :type names: Iterable[str]
        """
        unknown = sorted({n for n in names if n not in self.fields})
        if unknown:
            raise SchemaError(
                f"Unknown field(s) for table '{self.table_id}': {', '.join(unknown)}",
                subcode=SCHEMA_UNKNOWN_FIELD,
                details={"table": self.table_id, "fields": unknown},
            )

    def check_payload(self, fields: Mapping[str, Any]) -> None:
        self.check_fields(fields.keys())

    def check_query(self, descriptor: QueryDescriptor) -> None:
        """Check a descriptor's filter and sort fields. Custom filters carry no field and are skipped."""
        if descriptor.table_id != self.table_id:
            raise SchemaError(
                f"Schema for '{self.table_id}' cannot check a query on '{descriptor.table_id}'",
                subcode=SCHEMA_TABLE_MISMATCH,
                details={"table": self.table_id, "query_table": descriptor.table_id},
            )
        names = [f.field for f in descriptor.filters if f.operator is not FilterOperator.CUSTOM]
        names.extend(s.field for s in descriptor.sort)
        self.check_fields(names)

    def project(self, record: TypedRecord) -> Dict[str, Any]:
        """Return only the declared fields of a typed record, plus ``id`` and ``createdTime``."""
        out = {k: v for k, v in record.items() if k in self.fields}
        out[RECORD_ID] = record.get(RECORD_ID)
        out[RECORD_CREATED_TIME] = record.get(RECORD_CREATED_TIME)
        return out


__all__ = ["TableSchema"]
