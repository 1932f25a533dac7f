# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from typing import Dict, Optional, Union

import requests

from azure.core.credentials import AzureKeyCredential, TokenCredential

from .common.constants import CRM_TABLES, DEFAULT_API_URL
from .core._auth import TenantSource, _AuthManager
from .core.config import TableClientConfig
from .data._transport import _TableTransport
from .models.schema import TableSchema
from .operations.binding import TableBinding, create_table_binding


class TableClient:
    """
    High-level client for a record-oriented table backend.

    The client forwards a caller-supplied credential and tenant identifier on
    every request and hands out per-table bindings. It never refreshes or
    validates credentials.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager enables connection pooling
        and ensures the pooled session is released::

            with TableClient(base_url, AzureKeyCredential(api_key), "tenant-1") as client:
                accounts = client.table("Accounts")
                record = asyncio.run(accounts.create({"Name": "Acme"}))

    **Without Context Manager**:
        The transport is created lazily on first use. Call ``close()`` when done.

    :param base_url: Backend base URL, for example ``"https://api.airtable.com/v0/appXXXX"``.
        Trailing slash is automatically removed.
    :type base_url: :class:`str`
    :param credential: Bearer credential: a token credential or a static API key credential.
    :type credential: ~azure.core.credentials.TokenCredential or ~azure.core.credentials.AzureKeyCredential
    :param tenant_id: Tenant identifier sent on every request, or a callable returning it.
    :type tenant_id: :class:`str` or Callable[[], str]
    :param config: Optional configuration for timeouts, retries and headers.
        If not provided, defaults are loaded from :meth:`~crm_tables.core.config.TableClientConfig.from_env`.
    :type config: ~crm_tables.core.config.TableClientConfig or None

    :raises ValueError: If ``base_url`` is missing or empty after trimming.

    Example::

        async def main():
            with TableClient(url, credential, "tenant-1") as client:
                opportunities = client.table("Opportunities")
                q = await opportunities.query(
                    filters=[{"field": "Owner", "operator": "contains", "value": "emp_42", "isArray": True}],
                    sort=[{"field": "Created Date", "direction": "desc"}],
                    page_size=50,
                )
                while q.has_more and not q.is_error:
                    await q.load_more()
    """

    def __init__(
        self,
        base_url: str,
        credential: Union[TokenCredential, AzureKeyCredential],
        tenant_id: TenantSource,
        config: Optional[TableClientConfig] = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValueError("base_url is required.")
        self._config = config or TableClientConfig.from_env()
        scope = self._config.token_scope or f"{self._base_url}/.default"
        self.auth = _AuthManager(credential, tenant_id, scope)
        self._transport: Optional[_TableTransport] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False
        self._bindings: Dict[str, TableBinding] = {}

    @classmethod
    def from_env(
        cls,
        credential: Union[TokenCredential, AzureKeyCredential],
        tenant_id: TenantSource,
    ) -> "TableClient":
        """
        Build a client whose base URL comes from ``CRM_TABLES_API_URL``.

        Falls back to the public Airtable API root when the variable is unset.
        """
        base_url = os.environ.get("CRM_TABLES_API_URL") or DEFAULT_API_URL
        return cls(base_url, credential, tenant_id, TableClientConfig.from_env())

    def __enter__(self) -> "TableClient":
        """
        Enter the context manager.

        Creates an HTTP session for connection pooling. All bindings created
        within the context reuse this session.
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Explicitly close the client and release resources.

        Safe to call multiple times. Bindings handed out earlier must not be
        used after closing.
        """
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False
        self._bindings.clear()

    def _get_transport(self) -> _TableTransport:
        """
        Get or create the internal transport.

        When a session exists (from the context manager) it is passed to the
        transport for connection pooling.
        """
        if self._transport is None:
            self._transport = _TableTransport(
                self.auth,
                self._base_url,
                self._config,
                session=self._session,
            )
        return self._transport

    def table(self, table_id: str, schema: Optional[TableSchema] = None) -> TableBinding:
        """
        Return the operations bound to ``table_id``.

        Bindings are stateless apart from their schema, so the same binding is
        returned for repeated calls without a schema. Each :meth:`TableBinding.query`
        still creates its own pagination controller.

        :param table_id: Table identifier, e.g. ``"Opportunities"``.
        :type table_id: :class:`str`
        :param schema: Optional declared field set of the table.
        :type schema: ~crm_tables.models.schema.TableSchema or None
        :rtype: ~crm_tables.operations.binding.TableBinding
        """
        if schema is not None:
            return create_table_binding(self._get_transport(), table_id, schema)
        binding = self._bindings.get(table_id)
        if binding is None:
            binding = create_table_binding(self._get_transport(), table_id)
            self._bindings[table_id] = binding
        return binding

    def crm_tables(self) -> Dict[str, TableBinding]:
        """Bindings for every CRM table the dashboard uses, keyed by table id."""
        return {name: self.table(name) for name in CRM_TABLES}


__all__ = ["TableClient"]
