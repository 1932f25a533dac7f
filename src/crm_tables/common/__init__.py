# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Common constants for the CRM table access layer.

This module contains wire-level names and table identifiers shared across the package.
"""

__all__ = []
