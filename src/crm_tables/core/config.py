# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ..common.constants import DEFAULT_TENANT_HEADER

_T = TypeVar("_T")


def _env(name: str, cast: Callable[[str], _T]) -> Optional[_T]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} has an invalid value: {raw!r}") from exc


@dataclass(frozen=True)
class TableClientConfig:
    """
    Configuration settings for table client operations.

    :param http_retries: Number of automatic retries after a failed request (default: 1).
        Only network failures and transient statuses (429, 5xx) are retried.
    :type http_retries: int or None
    :param http_backoff: Delay in seconds before the retry (default: 0.5).
    :type http_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param tenant_header: Header carrying the tenant identifier on every request.
    :type tenant_header: str
    :param token_scope: Scope requested from a token credential. Defaults to ``{base_url}/.default``.
    :type token_scope: str or None
    :param default_page_size: ``pageSize`` sent on list calls whose descriptor sets none.
    :type default_page_size: int or None
    """

    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    tenant_header: str = DEFAULT_TENANT_HEADER
    token_scope: Optional[str] = None
    default_page_size: Optional[int] = None

    @classmethod
    def from_env(cls) -> "TableClientConfig":
        """
        Create a configuration instance from ``CRM_TABLES_*`` environment variables.

        Unset variables fall back to the defaults of the corresponding field.

        :return: Configuration instance.
        :rtype: ~crm_tables.core.config.TableClientConfig
        :raises ValueError: If a variable is set to a value that cannot be parsed.
        """
        return cls(
            http_retries=_env("CRM_TABLES_HTTP_RETRIES", int),  # Will default to 1 in _HttpClient
            http_backoff=_env("CRM_TABLES_HTTP_BACKOFF", float),  # Will default to 0.5 in _HttpClient
            http_timeout=_env("CRM_TABLES_HTTP_TIMEOUT", float),  # Will use method-dependent defaults
            tenant_header=_env("CRM_TABLES_TENANT_HEADER", str) or DEFAULT_TENANT_HEADER,
            token_scope=_env("CRM_TABLES_TOKEN_SCOPE", str),
            default_page_size=_env("CRM_TABLES_PAGE_SIZE", int),
        )
