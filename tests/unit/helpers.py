# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared test utilities for unit tests.

Provides dummy credentials, a scripted HTTP client, and fake page sources
for driving the pagination controller without a network.
"""

import asyncio
import json
import types

from azure.core.credentials import AzureKeyCredential, TokenCredential

from crm_tables.core._auth import _AuthManager
from crm_tables.core.config import TableClientConfig
from crm_tables.core.results import ListPage
from crm_tables.data._transport import _TableTransport
from crm_tables.models.record import RawRecord

BASE_URL = "https://api.example.com/v0/appTEST"


class DummyCredential(TokenCredential):
    def get_token(self, *scopes, **kwargs):
        class Tok:
            token = "dummy-token"

        return Tok()


def raw(record_id, created="2024-01-01T00:00:00.000Z", **fields):
    """Wire-shaped record dict."""
    return {"id": record_id, "fields": fields, "createdTime": created}


def page(*ids, cursor=None):
    """A ListPage of records with the given ids."""
    return ListPage(
        records=[RawRecord(id=i, fields={"Name": f"name-{i}"}, created_time="2024-01-01T00:00:00.000Z") for i in ids],
        cursor=cursor,
    )


class DummyHTTP:
    """Mock HTTP client that returns pre-configured responses.

    Args:
        responses: List of (status_code, headers, body) tuples, or exceptions to raise.

    Attributes:
        calls: List of (method, url, kwargs) tuples recording all requests made.
    """

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def _request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError("No more dummy responses configured")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        status, headers, body = item
        resp = types.SimpleNamespace()
        resp.status_code = status
        resp.headers = headers
        if isinstance(body, (dict, list)):
            resp.text = json.dumps(body)
            resp.json = lambda: body
        else:
            resp.text = body or ""

            def json_fail():
                raise ValueError("non-json")

            resp.json = json_fail
        return resp

    def close(self):
        pass


def make_transport(responses, config=None, credential=None, tenant_id="tenant-1"):
    """_TableTransport wired to a DummyHTTP; returns (transport, http)."""
    config = config or TableClientConfig(http_retries=0, http_backoff=0)
    auth = _AuthManager(credential or AzureKeyCredential("key-123"), tenant_id, f"{BASE_URL}/.default")
    transport = _TableTransport(auth, BASE_URL, config)
    http = DummyHTTP(responses)
    transport._http = http
    return transport, http


class ScriptedSource:
    """Page source returning pre-configured pages (or raising exceptions) in order."""

    def __init__(self, results):
        self._results = list(results)
        self.calls = []

    async def list(self, descriptor):
        self.calls.append(descriptor)
        if not self._results:
            raise AssertionError("No more scripted pages configured")
        item = self._results.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class GatedSource:
    """Page source whose requests stay pending until the test releases them, in any order."""

    def __init__(self):
        self.calls = []
        self._pending = []

    async def list(self, descriptor):
        gate = asyncio.Event()
        slot = {"descriptor": descriptor, "gate": gate, "result": None}
        self.calls.append(descriptor)
        self._pending.append(slot)
        await gate.wait()
        if isinstance(slot["result"], BaseException):
            raise slot["result"]
        return slot["result"]

    def release(self, index, result):
        slot = self._pending[index]
        slot["result"] = result
        slot["gate"].set()


async def settle():
    """Let every ready task run until it blocks."""
    for _ in range(5):
        await asyncio.sleep(0)
