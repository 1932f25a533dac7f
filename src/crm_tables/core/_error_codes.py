# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_409 = "http_409"
HTTP_422 = "http_422"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

# Network failure after the transport-level retry
NETWORK_ERROR = "network_error"

# Status codes considered transient (worth the single automatic retry)
TRANSIENT_STATUS = {429, 500, 502, 503, 504}

# Schema subcodes
SCHEMA_UNKNOWN_FIELD = "schema_unknown_field"
SCHEMA_TABLE_MISMATCH = "schema_table_mismatch"


def http_subcode(status: int) -> str:
    """Return the ``http_<status>`` subcode for an HTTP status code."""
    return f"http_{status}"
