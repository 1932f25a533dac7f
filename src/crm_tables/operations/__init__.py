# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation classes for the table access layer.

- PaginationController: cursor pagination state machine
- TableBinding / TableQuery: operations bound to one table
"""

__all__ = []
