"""Tests for the Syncthing REST client."""

import base64
import json

import httpx
import pytest

from syncwatch.client import SyncthingClient, create_client
from syncwatch.config import WatcherConfig
from syncwatch.exceptions import ConfigurationError, SyncthingAPIError

CONFIG = {
    "Version": 2,
    "Repositories": [
        {"ID": "default", "Directory": "~/Sync", "ReadOnly": False, "RescanIntervalS": 60},
        {"ID": "photos", "Directory": "/data/photos", "ReadOnly": True, "RescanIntervalS": 3600},
    ],
    "GUI": {"Address": "127.0.0.1:8080"},
}


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=200, payload=None, content=None):
        self.requests = []
        self.status_code = status_code
        self.payload = payload
        self.content = content

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.mark.asyncio
async def test_get_config():
    handler = Recorder(payload=CONFIG)
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        configuration = await client.get_config()

    assert configuration.version == 2
    assert [repo.id for repo in configuration.repositories] == ["default", "photos"]
    assert configuration.repositories[1].read_only is True
    assert configuration.repositories[1].rescan_interval_s == 3600

    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/config"


@pytest.mark.asyncio
async def test_rescan_sends_repo_and_sub():
    handler = Recorder()
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        await client.rescan("photos", "2024/summer")
        await client.rescan("photos")

    first, second = handler.requests
    assert first.method == "POST"
    assert first.url.path == "/rest/scan"
    assert first.url.params["repo"] == "photos"
    assert first.url.params["sub"] == "2024/summer"
    assert second.url.params["sub"] == ""


@pytest.mark.asyncio
async def test_auth_applied_to_every_request():
    handler = Recorder(payload=CONFIG)
    client = SyncthingClient(
        "http://localhost:8080",
        user="admin",
        password="secret",
        api_key="abc123",
        csrf_token="token",
        transport=httpx.MockTransport(handler),
    )
    async with client:
        await client.get_config()
        await client.rescan("default", "")

    expected_auth = "Basic " + base64.b64encode(b"admin:secret").decode()
    for request in handler.requests:
        assert request.headers["X-API-Key"] == "abc123"
        assert request.headers["X-CSRF-Token"] == "token"
        assert request.headers["Authorization"] == expected_auth


@pytest.mark.asyncio
async def test_no_auth_headers_by_default():
    handler = Recorder()
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        await client.rescan("default")

    headers = handler.requests[0].headers
    assert "X-API-Key" not in headers
    assert "X-CSRF-Token" not in headers
    assert "Authorization" not in headers


@pytest.mark.asyncio
async def test_non_success_status_raises():
    handler = Recorder(status_code=403)
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SyncthingAPIError, match="403"):
            await client.rescan("default", "a")


@pytest.mark.asyncio
async def test_any_2xx_is_success():
    handler = Recorder(status_code=204, content=b"")
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        await client.rescan("default", "a")


@pytest.mark.asyncio
async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SyncthingAPIError, match="connection refused"):
            await client.rescan("default", "a")


@pytest.mark.asyncio
async def test_invalid_config_payload_raises():
    handler = Recorder(content=b"<html>not json</html>")
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ConfigurationError):
            await client.get_config()


@pytest.mark.asyncio
async def test_config_missing_fields_raises():
    handler = Recorder(payload={"Repositories": [{"ID": "default"}]})
    async with SyncthingClient("http://localhost:8080", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ConfigurationError):
            await client.get_config()


@pytest.mark.asyncio
async def test_create_client_from_config(tmp_path):
    csrf_file = tmp_path / "csrftokens.txt"
    csrf_file.write_text("old\nnewest\n")
    config = WatcherConfig(target="syncthing:8384", api_key="key", csrf_file=csrf_file)

    handler = Recorder(content=json.dumps(CONFIG).encode())
    async with create_client(config, transport=httpx.MockTransport(handler)) as client:
        await client.get_config()

    request = handler.requests[0]
    assert str(request.url) == "http://syncthing:8384/rest/config"
    assert request.headers["X-CSRF-Token"] == "newest"
    assert request.headers["X-API-Key"] == "key"
