# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with a single automatic retry, timeout handling, and optional session support.

This module provides :class:`~crm_tables.core._http._HttpClient`, a wrapper
around the requests library that retries a failed request once (network
errors and transient statuses only), applies per-method default timeouts,
and reuses a pooled session when one is supplied.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import requests

from ._error_codes import TRANSIENT_STATUS

_logger = logging.getLogger(__name__)


class _HttpClient:
    """
    HTTP client with configurable retry logic, timeout handling, and optional session support.

    The retry is not pagination-aware: it replays exactly the same request.

    :param retries: Number of automatic retries after a failed attempt. Default is 1.
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between attempts. Default is 0.5.
    :type backoff: :class:`float` | None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        retries = retries if retries is not None else 1
        self.max_attempts = max(1, retries + 1)
        self.base_delay = backoff if backoff is not None else 0.5
        self.default_timeout: Optional[float] = timeout
        self._session = session

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with one automatic retry and timeout management.

        Applies default timeouts based on HTTP method (120s for POST/DELETE, 10s for others).
        A network error or a transient status (429, 5xx) on any attempt but the last
        triggers a retry after an exponential backoff delay. The last response is
        returned whatever its status; status handling belongs to the caller.

        :param method: HTTP method (GET, POST, PATCH, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, params and json.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If every attempt fails on the network.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "delete") else 10

        for attempt in range(self.max_attempts):
            last = attempt == self.max_attempts - 1
            try:
                response = self._send(method, url, **kwargs)
            except requests.exceptions.RequestException as exc:
                if last:
                    raise
                _logger.debug("%s %s failed (%s); retrying", method.upper(), url, exc)
            else:
                if last or response.status_code not in TRANSIENT_STATUS:
                    return response
                _logger.debug("%s %s returned %s; retrying", method.upper(), url, response.status_code)
            time.sleep(self.base_delay * (2**attempt))

    def close(self) -> None:
        """
        Close the HTTP client and release resources.

        If a session was provided, this method closes it. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
