# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Record shapes for table rows.

:class:`RawRecord` is the backend wire shape ``{id, fields, createdTime}``.
:func:`normalize_record` flattens it into a ``TypedRecord``: a plain dict
carrying ``id``, every field, and ``createdTime``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..common.constants import RECORD_CREATED_TIME, RECORD_FIELDS, RECORD_ID

# Type aliases for semantic clarity
RecordId = str
TypedRecord = Dict[str, Any]


@dataclass(frozen=True)
class RawRecord:
    """
    A record exactly as the backend returns it.

    :param id: Record identifier.
    :type id: str
    :param fields: Field name to value mapping. Absent fields are absent keys.
    :type fields: dict[str, Any]
    :param created_time: ISO 8601 creation timestamp.
    :type created_time: str
    """

    id: RecordId
    fields: Dict[str, Any] = field(default_factory=dict)
    created_time: str = ""

    @classmethod
    def from_api_response(cls, response_data: Mapping[str, Any]) -> "RawRecord":
        """
        Create a RawRecord from a decoded response body.

        :param response_data: Mapping with ``id``, ``fields`` and ``createdTime`` keys.
        :type response_data: Mapping[str, Any]
        :return: RawRecord instance.
        :rtype: RawRecord
        :raises ValueError: If the mapping carries no ``id`` or its ``fields`` is not an object.
        """
        record_id = response_data.get(RECORD_ID)
        if not record_id:
            raise ValueError("record payload is missing 'id'")
        fields = response_data.get(RECORD_FIELDS) or {}
        if not isinstance(fields, Mapping):
            raise ValueError(f"record {record_id!r} has non-object 'fields': {type(fields).__name__}")
        return cls(
            id=str(record_id),
            fields=dict(fields),
            created_time=response_data.get(RECORD_CREATED_TIME) or "",
        )


def normalize_record(raw: RawRecord) -> TypedRecord:
    """
    Flatten a raw record into a typed record.

    Fields are spread first, then ``id`` and ``createdTime`` are written, so a
    field that happens to be named ``id`` or ``createdTime`` never shadows them.
    No coercion, validation or default-filling takes place.

    :param raw: Record in wire shape.
    :type raw: RawRecord
    :return: Flat record.
    :rtype: dict[str, Any]
    """
    record: TypedRecord = dict(raw.fields)
    record[RECORD_ID] = raw.id
    record[RECORD_CREATED_TIME] = raw.created_time
    return record


__all__ = ["RawRecord", "RecordId", "TypedRecord", "normalize_record"]
