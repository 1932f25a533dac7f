# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""REST transport for ``{base}/{table}[/{record_id}]``."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests

from ..common.constants import (
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    PARAM_MAX_RECORDS,
    PARAM_OFFSET,
    PARAM_PAGE_SIZE,
    PARAM_VIEW,
    RECORD_FIELDS,
    RESPONSE_OFFSET,
    RESPONSE_RECORDS,
)
from ..core._auth import _AuthManager
from ..core._error_codes import TRANSIENT_STATUS, http_subcode
from ..core._http import _HttpClient
from ..core.config import TableClientConfig
from ..core.errors import TransportError
from ..core.results import ListPage
from ..models.query import QueryDescriptor
from ..models.record import RawRecord
from ._formula import translate

_logger = logging.getLogger(__name__)

_BODY_EXCERPT_LIMIT = 200


class _TableTransport:
    """
    Issues list, get, create, update and delete calls against the table backend.

    Every call attaches the bearer token and tenant header, runs the blocking
    HTTP exchange off the event loop, and raises
    :class:`~crm_tables.core.errors.TransportError` on a non-2xx status or a
    network failure. Calls cannot be cancelled once issued.

    :param auth: Credential resolver.
    :type auth: ~crm_tables.core._auth._AuthManager
    :param base_url: Backend base URL; tables live at ``{base_url}/{table_id}``.
    :type base_url: str
    :param config: Client configuration.
    :type config: ~crm_tables.core.config.TableClientConfig or None
    :param session: Optional pooled session.
    :type session: requests.Session or None
    """

    def __init__(
        self,
        auth: _AuthManager,
        base_url: str,
        config: Optional[TableClientConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth = auth
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        self.config = config or TableClientConfig.from_env()
        self._http = _HttpClient(
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            timeout=self.config.http_timeout,
            session=session,
        )

    # ----------------------------- plumbing -----------------------------
    def _headers(self) -> Dict[str, str]:
        creds = self.auth._acquire()
        return {
            HEADER_CONTENT_TYPE: "application/json",
            HEADER_AUTHORIZATION: f"Bearer {creds.token}",
            self.config.tenant_header: creds.tenant_id,
        }

    def _url(self, table_id: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/{quote(table_id, safe='')}"
        if record_id is not None:
            url = f"{url}/{quote(record_id, safe='')}"
        return url

    @staticmethod
    def _error_from_response(r: Any, method: str, url: str) -> TransportError:
        status = r.status_code
        body: Any = None
        try:
            body = r.json()
        except ValueError:
            body = None
        message = f"HTTP {status}"
        service_code = None
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                service_code = err.get("type") or err.get("code")
                if err.get("message"):
                    message = f"HTTP {status}: {err['message']}"
            elif isinstance(err, str):
                service_code = err
        retry_after = None
        headers = getattr(r, "headers", None) or {}
        if "Retry-After" in headers:
            try:
                retry_after = int(headers["Retry-After"])
            except (TypeError, ValueError):
                retry_after = None
        text = getattr(r, "text", "") or ""
        return TransportError(
            message,
            status_code=status,
            is_transient=status in TRANSIENT_STATUS,
            subcode=http_subcode(status),
            method=method.upper(),
            url=url,
            service_error_code=service_code,
            body_excerpt=text[:_BODY_EXCERPT_LIMIT] or None,
            retry_after=retry_after,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Blocking request with credential headers; maps every failure to TransportError."""
        kwargs.setdefault("headers", self._headers())
        try:
            r = self._http._request(method, url, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                f"Network failure: {exc}",
                is_transient=True,
                method=method.upper(),
                url=url,
            ) from exc
        if not 200 <= r.status_code < 300:
            raise self._error_from_response(r, method, url)
        return r

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request, method, url, **kwargs)

    @staticmethod
    def _json(r: Any) -> Any:
        if not getattr(r, "text", ""):
            return None
        try:
            return r.json()
        except ValueError:
            return None

    def _list_params(self, descriptor: QueryDescriptor) -> Dict[str, Any]:
        params: Dict[str, Any] = translate(descriptor.filters, descriptor.sort)
        if descriptor.limit is not None:
            params[PARAM_MAX_RECORDS] = int(descriptor.limit)
        page_size = descriptor.page_size if descriptor.page_size is not None else self.config.default_page_size
        if page_size is not None:
            params[PARAM_PAGE_SIZE] = int(page_size)
        if descriptor.cursor:
            params[PARAM_OFFSET] = descriptor.cursor
        if descriptor.view:
            params[PARAM_VIEW] = descriptor.view
        return params

    # ------------------------------- calls -------------------------------
    async def list(self, descriptor: QueryDescriptor) -> ListPage:
        """
        Fetch one page of a table.

        :param descriptor: Query to run; its ``cursor`` selects the page.
        :type descriptor: ~crm_tables.models.query.QueryDescriptor
        :return: The page and the cursor of the next one.
        :rtype: ~crm_tables.core.results.ListPage
        """
        url = self._url(descriptor.table_id)
        params = self._list_params(descriptor)
        _logger.debug("GET %s cursor=%r", descriptor.table_id, descriptor.cursor or None)
        r = await self._send("get", url, params=params)
        body = self._json(r)
        if not isinstance(body, dict):
            return ListPage()
        items = body.get(RESPONSE_RECORDS) or []
        records = [RawRecord.from_api_response(x) for x in items if isinstance(x, dict)]
        return ListPage(records=records, cursor=body.get(RESPONSE_OFFSET) or None)

    async def get_by_id(self, table_id: str, record_id: str) -> Optional[RawRecord]:
        """Fetch one record; ``None`` when the backend reports 404 or sends no body."""
        url = self._url(table_id, record_id)
        _logger.debug("GET %s/%s", table_id, record_id)
        try:
            r = await self._send("get", url)
        except TransportError as exc:
            if exc.status_code == 404:
                return None
            raise
        body = self._json(r)
        if not isinstance(body, dict) or not body:
            return None
        return RawRecord.from_api_response(body)

    async def create(self, table_id: str, fields: Mapping[str, Any]) -> RawRecord:
        url = self._url(table_id)
        _logger.debug("POST %s", table_id)
        r = await self._send("post", url, json={RECORD_FIELDS: dict(fields)})
        return RawRecord.from_api_response(self._json(r) or {})

    async def update(self, table_id: str, record_id: str, fields: Mapping[str, Any]) -> RawRecord:
        url = self._url(table_id, record_id)
        _logger.debug("PATCH %s/%s", table_id, record_id)
        r = await self._send("patch", url, json={RECORD_FIELDS: dict(fields)})
        return RawRecord.from_api_response(self._json(r) or {})

    async def delete(self, table_id: str, record_id: str) -> None:
        url = self._url(table_id, record_id)
        _logger.debug("DELETE %s/%s", table_id, record_id)
        await self._send("delete", url)

    def close(self) -> None:
        self._http.close()
