# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Version information for crm-tables."""

__version__ = "0.1.0"
