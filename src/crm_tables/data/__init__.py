# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the table backend.

Contains the filter/sort formula translator and the REST transport.
These are internal modules; use :class:`~crm_tables.client.TableClient`.
"""

__all__ = []
