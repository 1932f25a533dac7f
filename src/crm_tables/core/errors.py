# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured errors raised by the CRM table access layer.

An empty result set is never an error: list calls that match nothing succeed
with an empty page.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional

from ._error_codes import NETWORK_ERROR, SCHEMA_UNKNOWN_FIELD


class TableAccessError(Exception):
    """Base structured error for the table access layer."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class TransportError(TableAccessError):
    """
    A request that failed on the wire.

    Raised for any non-2xx HTTP status (``subcode="http_<status>"``) and for
    network failures (``subcode="network_error"``, ``status_code=None``), once
    the transport-level retry has been used up.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        service_error_code: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if method is not None:
            d["method"] = method
        if url is not None:
            d["url"] = url
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        if retry_after is not None:
            d["retry_after"] = retry_after
        super().__init__(
            message,
            code="transport_error",
            subcode=subcode if subcode is not None else (NETWORK_ERROR if status_code is None else None),
            status_code=status_code,
            details=d,
            source="server" if status_code is not None else "client",
            is_transient=is_transient,
        )


class SchemaError(TableAccessError):
    """A filter, sort or payload named a field the bound table schema does not declare."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            code="schema_error",
            subcode=subcode or SCHEMA_UNKNOWN_FIELD,
            details=details,
            source="client",
        )


__all__ = ["TableAccessError", "TransportError", "SchemaError"]
