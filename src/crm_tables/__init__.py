# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Remote table access layer for the CRM dashboard.

Translates declarative queries into calls against a record-oriented REST
backend, accumulates cursor-paginated results, and exposes typed
create/read/update/delete operations per table.
"""

from .__version__ import __version__
from .client import TableClient

__all__ = ["TableClient", "__version__"]
