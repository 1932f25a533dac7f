# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the table access layer.

This module contains the foundational components including authentication,
configuration, HTTP client, result types and error handling.
"""

from .results import ListPage, QuerySnapshot

__all__ = ["ListPage", "QuerySnapshot"]
