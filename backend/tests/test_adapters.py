import json

import httpx
import pytest

from conftest import make_connector

from leadhub.adapters.clients.http import HttpxGet
from leadhub.adapters.ingestion.api_json import extract_records
from leadhub.adapters.ingestion.dispatch import SourceFetcher
from leadhub.domain.errors import ConfigurationError, TransportError

CSV_BODY = "Name,Address,City,State,Zip\nAnn Lee,12 Oak St,Elyria,OH,44035\nBob Ray,9 Elm,Lorain,OH,44052\n"


def _http(handler) -> HttpxGet:
    return HttpxGet(transport=httpx.MockTransport(handler))


class FakeSftpClient:
    def __init__(self, payload: bytes = b"", fail_on: str | None = None) -> None:
        self.payload = payload
        self.fail_on = fail_on
        self.connected_with: dict | None = None
        self.requested: list[str] = []
        self.closed = False

    async def connect(self, **kwargs) -> None:
        if self.fail_on == "connect":
            raise TransportError("sftp connect failed")
        self.connected_with = kwargs

    async def get(self, remote_path: str) -> bytes:
        self.requested.append(remote_path)
        if self.fail_on == "get":
            raise TransportError("sftp get failed")
        return self.payload

    async def close(self) -> None:
        self.closed = True


class ExplodingFactory:
    def __call__(self):
        raise AssertionError("sftp client must not be created")


@pytest.mark.asyncio
async def test_csv_url_fetches_with_headers_and_parses():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, text=CSV_BODY)

    connector = make_connector(
        config={"url": "https://feeds.example.com/leads.csv", "headers": {"Authorization": "Bearer t"}}
    )
    records = await SourceFetcher(http_get=_http(handler)).fetch(connector)

    assert seen == {"url": "https://feeds.example.com/leads.csv", "auth": "Bearer t"}
    assert [r["Name"] for r in records] == ["Ann Lee", "Bob Ray"]


@pytest.mark.asyncio
async def test_csv_url_non_2xx_is_transport_error():
    fetcher = SourceFetcher(http_get=_http(lambda request: httpx.Response(503, text="down")))
    with pytest.raises(TransportError, match="HTTP 503"):
        await fetcher.fetch(make_connector())


@pytest.mark.asyncio
async def test_network_failure_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError):
        await SourceFetcher(http_get=_http(handler)).fetch(make_connector())


@pytest.mark.asyncio
async def test_api_json_records_path_then_top_level_then_empty():
    bodies = {
        "/nested": {"data": {"items": [{"n": 1}, {"n": 2}]}},
        "/list": [{"n": 3}],
        "/other": {"data": {"items": "nope"}},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps(bodies[request.url.path]).encode())

    fetcher = SourceFetcher(http_get=_http(handler))

    def api(path: str, records_path: str | None = "data.items"):
        return make_connector(type="api_json", config={"url": f"https://api.example.com{path}", "recordsPath": records_path})

    assert await fetcher.fetch(api("/nested")) == [{"n": 1}, {"n": 2}]
    assert await fetcher.fetch(api("/list")) == [{"n": 3}]
    assert await fetcher.fetch(api("/other")) == []
    assert await fetcher.fetch(api("/list", records_path=None)) == [{"n": 3}]


@pytest.mark.asyncio
async def test_api_json_invalid_body_is_transport_error():
    fetcher = SourceFetcher(http_get=_http(lambda request: httpx.Response(200, text="<html>")))
    connector = make_connector(type="api_json", config={"url": "https://api.example.com/x"})
    with pytest.raises(TransportError):
        await fetcher.fetch(connector)


def test_extract_records_wrong_path_degrades_to_empty():
    assert extract_records({"a": {"b": 1}}, "a.b.c") == []
    assert extract_records({"a": []}, "a") == []
    assert extract_records([1, 2], "missing") == [1, 2]


@pytest.mark.asyncio
async def test_sftp_local_mock_path_wins_over_remote(tmp_path):
    path = tmp_path / "drop.csv"
    path.write_text(CSV_BODY, encoding="utf-8")
    connector = make_connector(
        type="sftp_csv",
        config={"host": "sftp.example.com", "remotePath": "/out/leads.csv", "localMockPath": str(path)},
    )

    records = await SourceFetcher(sftp_client_factory=ExplodingFactory()).fetch(connector)
    assert len(records) == 2


@pytest.mark.asyncio
async def test_sftp_local_mock_missing_file_is_transport_error(tmp_path):
    connector = make_connector(type="sftp_csv", config={"localMockPath": str(tmp_path / "nope.csv")})
    with pytest.raises(TransportError):
        await SourceFetcher(sftp_client_factory=ExplodingFactory()).fetch(connector)


@pytest.mark.asyncio
async def test_sftp_remote_download_closes_session():
    client = FakeSftpClient(payload=CSV_BODY.encode("utf-8"))
    connector = make_connector(
        type="sftp_csv",
        config={
            "host": "sftp.example.com",
            "port": "2222",
            "username": "feed",
            "password": "pw",
            "remotePath": "/out/leads.csv",
        },
    )

    records = await SourceFetcher(sftp_client_factory=lambda: client).fetch(connector)

    assert len(records) == 2
    assert client.requested == ["/out/leads.csv"]
    assert client.connected_with == {
        "host": "sftp.example.com",
        "port": 2222,
        "username": "feed",
        "password": "pw",
        "private_key": None,
    }
    assert client.closed is True


@pytest.mark.asyncio
@pytest.mark.parametrize("fail_on", ["connect", "get"])
async def test_sftp_session_closed_on_failure(fail_on):
    client = FakeSftpClient(fail_on=fail_on)
    connector = make_connector(type="sftp_csv", config={"host": "h", "remotePath": "/f.csv"})

    with pytest.raises(TransportError):
        await SourceFetcher(sftp_client_factory=lambda: client).fetch(connector)
    assert client.closed is True


@pytest.mark.asyncio
async def test_unsupported_type_fails_before_any_io():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    fetcher = SourceFetcher(http_get=_http(handler), sftp_client_factory=ExplodingFactory())
    with pytest.raises(ConfigurationError, match="Unsupported connector type: ftp"):
        await fetcher.fetch(make_connector(type="ftp"))


@pytest.mark.asyncio
async def test_missing_url_fails_before_any_io():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ConfigurationError):
        await SourceFetcher(http_get=_http(handler)).fetch(make_connector(config={}))


@pytest.mark.asyncio
async def test_malformed_url_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    connector = make_connector(config={"url": "https://[::1/leads.csv"})
    with pytest.raises(TransportError, match="request failed"):
        await SourceFetcher(http_get=_http(handler)).fetch(connector)
