# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import logging

import pytest

from crm_tables.core.errors import SchemaError, TransportError
from crm_tables.models.query import QueryDescriptor
from crm_tables.models.schema import TableSchema
from crm_tables.operations.binding import TableBinding, TableQuery, create_table_binding
from crm_tables.operations.pagination import PaginationStatus
from tests.unit.helpers import BASE_URL, make_transport, raw

ACCOUNTS = TableSchema("Accounts", ["Name", "Owner", "Deal Value", "Stage"])


def binding_for(responses, table_id="Accounts", schema=None):
    transport, http = make_transport(responses)
    return create_table_binding(transport, table_id, schema), http


# ------------------------------------------------------------ construction


def test_create_table_binding_returns_binding():
    b, _ = binding_for([])
    assert isinstance(b, TableBinding)
    assert b.table_id == "Accounts"
    assert "Accounts" in repr(b)


def test_blank_table_id_rejected():
    with pytest.raises(ValueError):
        binding_for([], table_id="  ")


def test_schema_for_other_table_rejected():
    with pytest.raises(ValueError):
        binding_for([], table_id="Contacts", schema=ACCOUNTS)


def test_each_controller_is_new():
    b, _ = binding_for([])
    assert b.controller() is not b.controller()


# ----------------------------------------------------------------- queries


@pytest.mark.asyncio
async def test_query_fetches_first_page():
    b, http = binding_for([(200, {}, {"records": [raw("rec1", Name="Acme")], "offset": "c1"})])

    q = await b.query(sort=[{"field": "Name", "direction": "asc"}], page_size=1)

    assert isinstance(q, TableQuery)
    assert [r["Name"] for r in q.records] == ["Acme"]
    assert q.has_more is True
    assert q.is_loading is False
    assert q.is_error is False
    assert http.calls[0][2]["params"]["pageSize"] == 1


@pytest.mark.asyncio
async def test_query_without_fetch_stays_idle():
    b, http = binding_for([])

    q = await b.query(fetch=False)

    assert http.calls == []
    assert q.descriptor is None
    assert q.controller.state.status is PaginationStatus.IDLE


@pytest.mark.asyncio
async def test_query_failure_surfaces_as_state():
    b, _ = binding_for([(503, {}, {"error": {"type": "SERVICE_UNAVAILABLE"}})])

    q = await b.query()

    assert q.is_error is True
    assert isinstance(q.error, TransportError)
    assert q.records == []
    assert q.snapshot().is_error is True


@pytest.mark.asyncio
async def test_query_rejects_descriptor_and_options_together():
    b, _ = binding_for([])
    with pytest.raises(TypeError):
        await b.query(QueryDescriptor("Accounts"), page_size=5)


@pytest.mark.asyncio
async def test_query_rejects_descriptor_for_other_table():
    b, _ = binding_for([])
    with pytest.raises(ValueError):
        await b.query(QueryDescriptor("Contacts"))


@pytest.mark.asyncio
async def test_set_descriptor_with_new_filters_restarts():
    b, http = binding_for(
        [
            (200, {}, {"records": [raw("rec1", Owner=["emp_1"])], "offset": "c1"}),
            (200, {}, {"records": [raw("rec7", Owner=["emp_42"])]}),
        ]
    )
    q = await b.query()
    d = q.descriptor_with(filters=[{"field": "Owner", "operator": "contains", "value": "emp_42"}])
    assert await q.set_descriptor(d) is True
    assert [r["id"] for r in q.records] == ["rec7"]
    assert "offset" not in http.calls[1][2]["params"]
    assert http.calls[1][2]["params"]["filterByFormula"] == "AND(FIND('emp_42', {Owner}))"


@pytest.mark.asyncio
async def test_query_load_more_and_reset():
    b, http = binding_for(
        [
            (200, {}, {"records": [raw("rec1")], "offset": "c1"}),
            (200, {}, {"records": [raw("rec2")]}),
        ]
    )
    q = await b.query()
    assert await q.load_more() is True
    assert http.calls[1][2]["params"]["offset"] == "c1"
    assert [r["id"] for r in q.records] == ["rec1", "rec2"]
    assert q.has_more is False

    q.reset_records()
    assert q.records == []
    assert q.controller.state.status is PaginationStatus.IDLE


@pytest.mark.asyncio
async def test_query_refetch():
    b, http = binding_for(
        [
            (200, {}, {"records": [raw("rec1")]}),
            (200, {}, {"records": [raw("rec1"), raw("rec9")]}),
        ]
    )
    q = await b.query()
    assert await q.refetch() is True
    assert [r["id"] for r in q.records] == ["rec1", "rec9"]
    assert len(http.calls) == 2


@pytest.mark.asyncio
async def test_schema_checks_query_fields():
    b, http = binding_for([], schema=ACCOUNTS)
    with pytest.raises(SchemaError) as ei:
        await b.query(filters=[{"field": "Ownr", "operator": "eq", "value": "x"}])
    assert ei.value.details["fields"] == ["Ownr"]
    assert http.calls == []


# ---------------------------------------------------------------- list_all


@pytest.mark.asyncio
async def test_list_all_loads_every_page():
    b, http = binding_for(
        [
            (200, {}, {"records": [raw("rec1"), raw("rec2")], "offset": "c1"}),
            (200, {}, {"records": [raw("rec3"), raw("rec4")]}),
        ]
    )

    records = await b.list_all()

    assert [r["id"] for r in records] == ["rec1", "rec2", "rec3", "rec4"]
    assert [c[2]["params"]["pageSize"] for c in http.calls] == [100, 100]
    assert http.calls[1][2]["params"]["offset"] == "c1"


@pytest.mark.asyncio
async def test_list_all_batch_size_and_options():
    b, http = binding_for([(200, {}, {"records": []})])

    records = await b.list_all(batch_size=25, view="Active")

    assert records == []
    params = http.calls[0][2]["params"]
    assert params["pageSize"] == 25
    assert params["view"] == "Active"


@pytest.mark.asyncio
async def test_list_all_raises_on_page_failure():
    b, _ = binding_for(
        [
            (200, {}, {"records": [raw("rec1")], "offset": "c1"}),
            (500, {}, {"error": {"type": "SERVER_ERROR"}}),
        ]
    )
    with pytest.raises(TransportError) as ei:
        await b.list_all()
    assert ei.value.status_code == 500


@pytest.mark.asyncio
async def test_list_all_rejects_bad_batch_size():
    b, _ = binding_for([])
    with pytest.raises(ValueError):
        await b.list_all(batch_size=0)


@pytest.mark.asyncio
async def test_list_all_dataframe():
    b, _ = binding_for([(200, {}, {"records": [raw("rec1", Name="Acme", Stage="Won")]})])

    df = await b.list_all_dataframe()

    assert list(df.columns) == ["id", "createdTime", "Name", "Stage"]
    assert df.loc[0, "Name"] == "Acme"


# ------------------------------------------------------------ record calls


@pytest.mark.asyncio
async def test_get_by_id_skips_blank_id():
    b, http = binding_for([])
    assert await b.get_by_id("") is None
    assert await b.get_by_id(None) is None
    assert http.calls == []


@pytest.mark.asyncio
async def test_get_by_id_returns_typed_record():
    b, _ = binding_for([(200, {}, raw("rec1", Name="Acme"))])
    rec = await b.get_by_id("rec1")
    assert rec == {"Name": "Acme", "id": "rec1", "createdTime": "2024-01-01T00:00:00.000Z"}


@pytest.mark.asyncio
async def test_get_by_id_missing_is_none():
    b, _ = binding_for([(404, {}, {"error": "NOT_FOUND"})])
    assert await b.get_by_id("recX") is None


@pytest.mark.asyncio
async def test_create_returns_server_record():
    b, http = binding_for([(200, {}, raw("recNEW", Name="Acme"))])

    rec = await b.create({"Name": "Acme"})

    method, url, kwargs = http.calls[0]
    assert (method, url) == ("post", f"{BASE_URL}/Accounts")
    assert kwargs["json"] == {"fields": {"Name": "Acme"}}
    assert rec["id"] == "recNEW"
    assert rec["Name"] == "Acme"


@pytest.mark.asyncio
async def test_create_failure_is_logged_and_raised(caplog):
    b, _ = binding_for([(422, {}, {"error": {"type": "INVALID_VALUE_FOR_COLUMN"}})])

    with caplog.at_level(logging.ERROR, logger="crm_tables.operations.binding"):
        with pytest.raises(TransportError):
            await b.create({"Deal Value": "lots"})

    assert any("Failed to create Accounts record" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_create_schema_rejects_unknown_field_before_request():
    b, http = binding_for([], schema=ACCOUNTS)
    with pytest.raises(SchemaError):
        await b.create({"Nmae": "Acme"})
    assert http.calls == []


@pytest.mark.asyncio
async def test_update():
    b, http = binding_for([(200, {}, raw("rec1", Name="Acme", Stage="Won"))], schema=ACCOUNTS)

    rec = await b.update("rec1", {"Stage": "Won"})

    assert http.calls[0][0] == "patch"
    assert http.calls[0][1] == f"{BASE_URL}/Accounts/rec1"
    assert rec["Stage"] == "Won"


@pytest.mark.asyncio
async def test_update_requires_record_id():
    b, _ = binding_for([])
    with pytest.raises(ValueError):
        await b.update("", {"Stage": "Won"})


@pytest.mark.asyncio
async def test_update_failure_is_logged_and_raised(caplog):
    b, _ = binding_for([(404, {}, {"error": "NOT_FOUND"})])
    with caplog.at_level(logging.ERROR, logger="crm_tables.operations.binding"):
        with pytest.raises(TransportError):
            await b.update("recX", {"Stage": "Won"})
    assert any("Failed to update Accounts record recX" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_delete():
    b, http = binding_for([(200, {}, {"id": "rec1", "deleted": True})])
    assert await b.delete("rec1") is True
    assert http.calls[0][:2] == ("delete", f"{BASE_URL}/Accounts/rec1")


@pytest.mark.asyncio
async def test_delete_failure_is_logged_and_raised(caplog):
    b, _ = binding_for([(403, {}, {"error": {"type": "NOT_AUTHORIZED"}})])
    with caplog.at_level(logging.ERROR, logger="crm_tables.operations.binding"):
        with pytest.raises(TransportError) as ei:
            await b.delete("rec1")
    assert ei.value.subcode == "http_403"
    assert any("Failed to delete" in r.getMessage() for r in caplog.records)
