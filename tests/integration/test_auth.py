"""Integration tests for API key authentication."""

from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def api_key_required():
    """Enable authentication with a known key for one test."""
    with patch("dochub.api.middleware.auth.settings", MagicMock(api_key="s3cret")):
        yield "s3cret"


@pytest.mark.integration
class TestApiKeyAuth:
    """Tests for the X-API-Key check."""

    @pytest.mark.asyncio
    async def test_open_when_no_key_configured(self, client, project):
        response = await client.get(f"/api/hook/status/{project.id}")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_key_rejected(self, client, project, api_key_required):
        response = await client.get(f"/api/hook/status/{project.id}")

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "UNAUTHORIZED"
        assert error["message"] == "Missing API key"
        assert response.json()["path"] == f"/api/hook/status/{project.id}"

    @pytest.mark.asyncio
    async def test_wrong_key_rejected(self, client, project, api_key_required):
        response = await client.get(
            f"/api/hook/status/{project.id}", headers={"X-API-Key": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.json()["error"]["message"] == "Invalid API key"
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_valid_key_accepted(self, client, project, api_key_required):
        response = await client.get(
            f"/api/hook/status/{project.id}", headers={"X-API-Key": api_key_required}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_bypasses_auth(self, client, api_key_required):
        response = await client.get("/health")
        assert response.status_code == 200
