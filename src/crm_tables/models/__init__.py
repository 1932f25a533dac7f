# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the table access layer.

- :class:`~crm_tables.models.query.QueryDescriptor`: What to fetch from a table.
- :class:`~crm_tables.models.record.RawRecord`: Backend wire shape of a record.
- :func:`~crm_tables.models.record.normalize_record`: Flattens a raw record.
- :class:`~crm_tables.models.schema.TableSchema`: Known field names of a table.

Note:
    This ``__init__.py`` does NOT import/export models.
    Import directly from the specific module files.
"""

__all__ = []
