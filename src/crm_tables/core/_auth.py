# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authentication helper forwarding caller-supplied credentials.

The table layer never refreshes or validates credentials: it asks the
collaborator for the current bearer token and tenant identifier on every
request and forwards them as headers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from azure.core.credentials import AzureKeyCredential, TokenCredential

TenantSource = Union[str, Callable[[], str]]


@dataclass
class _RequestCredentials:
    token: str
    tenant_id: str


class _AuthManager:
    """
    Resolves the bearer token and tenant identifier for each request.

    :param credential: A token credential (``get_token(scope).token``) or a static
        API key credential (``.key``).
    :type credential: ~azure.core.credentials.TokenCredential or ~azure.core.credentials.AzureKeyCredential
    :param tenant_id: Tenant identifier, or a zero-argument callable returning it.
    :type tenant_id: str or Callable[[], str]
    :param scope: Scope requested from a token credential.
    :type scope: str
    """

    def __init__(self, credential: Union[TokenCredential, AzureKeyCredential], tenant_id: TenantSource, scope: str) -> None:
        if not isinstance(credential, (TokenCredential, AzureKeyCredential)):
            raise TypeError(
                "credential must implement azure.core.credentials.TokenCredential or be an AzureKeyCredential."
            )
        if not callable(tenant_id) and not isinstance(tenant_id, str):
            raise TypeError("tenant_id must be a str or a callable returning str.")
        self.credential = credential
        self._tenant = tenant_id
        self.scope = scope

    def _acquire(self) -> _RequestCredentials:
        if isinstance(self.credential, AzureKeyCredential):
            token = self.credential.key
        else:
            token = self.credential.get_token(self.scope).token
        tenant = self._tenant() if callable(self._tenant) else self._tenant
        return _RequestCredentials(token=token, tenant_id=tenant)
