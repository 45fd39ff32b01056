"""Tests for the platform HTTP client."""

import httpx
import pytest

from dochub.lib.http_client import TIMEOUT_PRESETS, APIError, PlatformClient


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestPlatformClient:
    """Tests for PlatformClient request and error handling."""

    @pytest.mark.asyncio
    async def test_sends_api_key_and_parses_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers.get("X-API-Key")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"locked": False})

        async with PlatformClient("http://hub", api_key="secret", transport=_transport(handler)) as client:
            status = await client.get_status("p1")

        assert status == {"locked": False}
        assert seen == {"key": "secret", "path": "/api/hook/status/p1"}

    @pytest.mark.asyncio
    async def test_error_payload_becomes_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={
                    "error": {
                        "code": "PROJECT_LOCKED",
                        "message": "Project is already locked",
                        "context": {"lockedBy": "alice"},
                    }
                },
            )

        async with PlatformClient("http://hub", transport=_transport(handler)) as client:
            with pytest.raises(APIError) as exc_info:
                await client.acquire_lock("p1", "bob")

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Project is already locked"
        assert exc_info.value.details["lockedBy"] == "alice"

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        async with PlatformClient("http://hub", transport=_transport(handler)) as client:
            with pytest.raises(APIError) as exc_info:
                await client.get_fingerprint("p1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_extend_body(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(200, json={})

        async with PlatformClient("http://hub", transport=_transport(handler)) as client:
            await client.extend_lock("p1", 15)

        assert bodies == [b'{"minutes":15}'] or bodies == [b'{"minutes": 15}']

    def test_unknown_timeout_preset_falls_back(self):
        client = PlatformClient(timeout="nope")
        assert client._timeout is TIMEOUT_PRESETS["default"]
