import asyncio

import httpx
import pytest

from conftest import CSV_MAPPING, FakeFetcher, make_lead

from leadhub.adapters.clients.http import HttpxGet
from leadhub.adapters.ingestion.dispatch import SourceFetcher
from leadhub.adapters.repos.store import InMemoryStore
from leadhub.config import settings
from leadhub.domain.errors import TransportError
from leadhub.entrypoints.fastapi_app import create_app
from leadhub.service_layer.bootstrap import build_services

CONNECTOR = {
    "name": "County Feed",
    "type": "csv_url",
    "config": {"url": "https://feeds.example.com/leads.csv"},
    "mapping": CSV_MAPPING,
    "scheduleMinutes": 60,
}

ROW = {"Name": "Ann Lee", "Address": "12 Oak St", "City": "Elyria", "State": "OH", "Zip": "44035", "DOB": "3/4/1958"}


@pytest.fixture
def api_fetcher():
    return FakeFetcher()


@pytest.fixture
def api_store():
    return InMemoryStore()


@pytest.fixture
async def client(api_store, api_fetcher):
    services = build_services(store=api_store, fetcher=api_fetcher)
    app = create_app(services, start_scheduler=False, create_tables=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["scheduler"] == "stopped"


@pytest.mark.asyncio
async def test_api_key_required_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")

    assert (await client.get("/api/connectors")).status_code == 401
    ok = await client.get("/api/connectors", headers={"X-API-Key": "secret"})
    assert ok.status_code == 200


@pytest.mark.asyncio
async def test_connector_crud(client):
    r = await client.post("/api/connectors", json=CONNECTOR)
    assert r.status_code == 201
    created = r.json()
    cid = created["id"]
    assert created["scheduleMinutes"] == 60
    assert created["lastRunStatus"] == "none"
    assert created["mapping"]["fullName"] == "Name"

    r = await client.get("/api/connectors")
    assert [c["id"] for c in r.json()["items"]] == [cid]

    r = await client.patch(f"/api/connectors/{cid}", json={"enabled": False})
    assert r.status_code == 200
    assert r.json()["enabled"] is False
    assert r.json()["name"] == "County Feed"

    assert (await client.get(f"/api/connectors/{cid}")).json()["enabled"] is False

    r = await client.delete(f"/api/connectors/{cid}")
    assert r.json() == {"ok": True}
    assert (await client.get(f"/api/connectors/{cid}")).status_code == 404


@pytest.mark.asyncio
async def test_invalid_connector_is_400_with_kind(client):
    r = await client.post("/api/connectors", json={**CONNECTOR, "type": "ftp"})
    assert r.status_code == 400
    assert r.json()["ok"] is False
    assert r.json()["kind"] == "configuration"

    r = await client.post("/api/connectors", json={k: v for k, v in CONNECTOR.items() if k != "mapping"})
    assert r.status_code == 400
    assert r.json()["error"] == "mapping object is required"


@pytest.mark.asyncio
async def test_run_then_query_export_and_mark_mailed(client, api_fetcher):
    cid = (await client.post("/api/connectors", json=CONNECTOR)).json()["id"]
    api_fetcher.records[cid] = [ROW, {**ROW, "Name": ""}]

    r = await client.post(f"/api/connectors/{cid}/run")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "connectorId": cid, "fetched": 2, "imported": 1, "duplicates": 0, "invalid": 1}

    connector = (await client.get(f"/api/connectors/{cid}")).json()
    assert connector["lastRunStatus"] == "ok"
    assert connector["lastRunSummary"]["trigger"] == "manual"

    r = await client.get("/api/leads", params={"state": "oh", "minAge": 60})
    body = r.json()
    assert (body["totalStored"], body["totalFiltered"], body["batchNumber"]) == (1, 1, 1)
    lead = body["items"][0]
    assert lead["fullName"] == "Ann Lee"
    assert lead["dob"] == "1958-03-04"
    assert lead["connectorId"] == cid

    r = await client.get("/api/leads/export.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    header, row = r.text.split("\n")
    assert header.startswith("Full Name,Street,")
    assert row.startswith("Ann Lee,12 Oak St,")

    r = await client.post("/api/leads/mark-mailed", json={"leadIds": [lead["id"], "unknown"]})
    assert r.json() == {"ok": True, "updated": 1}

    r = await client.get("/api/leads", params={"stage": "READY"})
    assert r.json()["totalFiltered"] == 0


@pytest.mark.asyncio
async def test_run_failures_map_to_status_codes(client, api_fetcher):
    cid = (await client.post("/api/connectors", json=CONNECTOR)).json()["id"]

    assert (await client.post("/api/connectors/nope/run")).status_code == 404

    api_fetcher.errors[cid] = TransportError("HTTP 503")
    r = await client.post(f"/api/connectors/{cid}/run")
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "HTTP 503", "kind": "transport"}

    connector = (await client.get(f"/api/connectors/{cid}")).json()
    assert connector["lastRunStatus"] == "error"
    assert connector["lastRunError"] == "HTTP 503"


@pytest.mark.asyncio
async def test_overlapping_manual_run_is_409(client, api_fetcher):
    cid = (await client.post("/api/connectors", json=CONNECTOR)).json()["id"]
    api_fetcher.gate = asyncio.Event()

    first = asyncio.create_task(client.post(f"/api/connectors/{cid}/run"))
    await api_fetcher.entered.wait()

    r = await client.post(f"/api/connectors/{cid}/run")
    assert r.status_code == 409
    assert r.json()["kind"] == "already_running"

    api_fetcher.gate.set()
    assert (await first).status_code == 200


@pytest.mark.asyncio
async def test_import_csv(client, api_store):
    await api_store.save_leads([make_lead(full_name="Ann Lee", street="12 Oak St", city="Elyria", zip="44035")])
    csv_text = "Name,Address,City,State,Zip\nAnn Lee,12 Oak St,Elyria,OH,44035\nBob Ray,9 Elm,Lorain,OH,44052\n"

    r = await client.post(
        "/api/leads/import-csv",
        json={"csvText": csv_text, "mapping": CSV_MAPPING, "providerName": "Walk-ins"},
    )
    assert r.json() == {"ok": True, "fetched": 2, "imported": 1, "duplicates": 1, "invalid": 0}

    leads = await api_store.load_leads()
    assert leads[0].full_name == "Bob Ray"
    assert leads[0].provider == "Walk-ins"
    assert leads[0].connector_id == "manual-import"


@pytest.mark.asyncio
async def test_bad_lead_requests_are_400(client):
    r = await client.post("/api/leads/mark-mailed", json={"leadIds": []})
    assert r.status_code == 400
    assert r.json()["error"] == "leadIds array is required"

    r = await client.post("/api/leads/import-csv", json={"csvText": "a,b\n1,2", "mapping": {"fullName": "a"}})
    assert r.status_code == 400
    assert r.json()["error"] == "missing mapping for street"

    r = await client.post("/api/leads/import-csv", json={"mapping": CSV_MAPPING})
    assert r.json()["error"] == "csvText is required"


@pytest.mark.asyncio
async def test_malformed_connector_url_is_400_with_kind(api_store):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    fetcher = SourceFetcher(http_get=HttpxGet(transport=httpx.MockTransport(handler)))
    app = create_app(build_services(store=api_store, fetcher=fetcher), start_scheduler=False, create_tables=False)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        body = {**CONNECTOR, "config": {"url": "https://[::1/leads.csv"}}
        cid = (await c.post("/api/connectors", json=body)).json()["id"]

        r = await c.post(f"/api/connectors/{cid}/run")

        assert r.status_code == 400
        assert r.json()["ok"] is False
        assert r.json()["kind"] == "transport"
        assert (await c.get(f"/api/connectors/{cid}")).json()["lastRunStatus"] == "error"


@pytest.mark.asyncio
async def test_lead_query_echoes_effective_batch(client, api_store):
    await api_store.save_leads([make_lead(id="1"), make_lead(id="2", full_name="C D")])

    body = (await client.get("/api/leads", params={"batchSize": 0, "batchNumber": -3})).json()

    assert (body["batchSize"], body["batchNumber"]) == (1, 1)
    assert [lead["id"] for lead in body["items"]] == ["1"]
