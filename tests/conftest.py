# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for table access layer tests.
"""

import pytest

from crm_tables.core.config import TableClientConfig
from crm_tables.models.query import QueryDescriptor


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return TableClientConfig(http_retries=0, http_backoff=0.0, http_timeout=5)


@pytest.fixture
def sample_base_url():
    return "https://api.example.com/v0/appTEST"


@pytest.fixture
def owner_filter():
    return {"field": "Owner", "operator": "contains", "value": "emp_42", "isArray": True}


@pytest.fixture
def accounts_query():
    return QueryDescriptor("Accounts")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep CRM_TABLES_* variables from the host out of config defaults."""
    import os

    for name in list(os.environ):
        if name.startswith("CRM_TABLES_"):
            monkeypatch.delenv(name, raising=False)
