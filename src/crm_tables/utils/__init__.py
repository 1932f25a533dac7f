# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Utility helpers for the table access layer."""

__all__ = []
