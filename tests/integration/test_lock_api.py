"""Integration tests for the project lock endpoints."""

from datetime import datetime

import pytest

from dochub.api.dependencies import get_lock_manager
from dochub.api.main import app


@pytest.mark.integration
class TestAcquireLockEndpoint:
    """Tests for POST /api/projects/{id}/lock."""

    @pytest.mark.asyncio
    async def test_acquire_returns_201(self, client, project):
        response = await client.post(
            f"/api/projects/{project.id}/lock",
            json={"lockedBy": "alice", "reason": "Restructuring the guide"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["lockedBy"] == "alice"
        assert data["projectId"] == project.id
        assert data["reason"] == "Restructuring the guide"
        locked_at = datetime.fromisoformat(data["lockedAt"])
        expires_at = datetime.fromisoformat(data["expiresAt"])
        assert (expires_at - locked_at).total_seconds() == pytest.approx(30 * 60, abs=1)

    @pytest.mark.asyncio
    async def test_conflict_returns_409_with_holder(self, client, project):
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})

        response = await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "bob"})

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "PROJECT_LOCKED"
        assert error["message"] == "Project is already locked"
        assert error["context"]["lockedBy"] == "alice"
        assert error["context"]["lockedAt"]

    @pytest.mark.asyncio
    async def test_unknown_project_returns_404(self, client):
        response = await client.post("/api/projects/missing/lock", json={"lockedBy": "alice"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"lockedBy": ""}, {"lockedBy": "x" * 101}, {"lockedBy": 42}])
    async def test_invalid_locked_by_returns_400(self, client, project, body):
        response = await client.post(f"/api/projects/{project.id}/lock", json=body)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client, project):
        response = await client.post(
            f"/api/projects/{project.id}/lock",
            json={"lockedBy": "alice"},
            headers={"X-Request-ID": "req-42"},
        )

        assert response.headers["X-Request-ID"] == "req-42"


@pytest.mark.integration
class TestGetLockEndpoint:
    """Tests for GET /api/projects/{id}/lock."""

    @pytest.mark.asyncio
    async def test_unlocked_returns_null(self, client, project):
        response = await client.get(f"/api/projects/{project.id}/lock")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_locked_returns_lock(self, client, project):
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})

        response = await client.get(f"/api/projects/{project.id}/lock")

        assert response.json()["lockedBy"] == "alice"

    @pytest.mark.asyncio
    async def test_expired_lock_returns_null(self, client, project, lock_manager, clock):
        app.dependency_overrides[get_lock_manager] = lambda: lock_manager
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})
        clock.advance(minutes=31)

        response = await client.get(f"/api/projects/{project.id}/lock")

        assert response.json() is None


@pytest.mark.integration
class TestReleaseLockEndpoint:
    """Tests for DELETE /api/projects/{id}/lock."""

    @pytest.mark.asyncio
    async def test_release_twice(self, client, project):
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})

        first = await client.delete(f"/api/projects/{project.id}/lock")
        second = await client.delete(f"/api/projects/{project.id}/lock")

        assert first.status_code == 200
        assert first.json() == {"released": True}
        assert second.status_code == 200
        assert second.json() == {"released": False, "message": "No lock exists"}


@pytest.mark.integration
class TestExtendLockEndpoint:
    """Tests for POST /api/projects/{id}/lock/extend."""

    @pytest.mark.asyncio
    async def test_extend(self, client, project, lock_manager, clock):
        app.dependency_overrides[get_lock_manager] = lambda: lock_manager
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})
        clock.advance(minutes=10)

        response = await client.post(f"/api/projects/{project.id}/lock/extend", json={"minutes": 60})

        assert response.status_code == 200
        expires_at = datetime.fromisoformat(response.json()["expiresAt"])
        assert (expires_at - clock.now).total_seconds() == 60 * 60

    @pytest.mark.asyncio
    async def test_extend_without_body_uses_default(self, client, project, lock_manager, clock):
        app.dependency_overrides[get_lock_manager] = lambda: lock_manager
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})
        clock.advance(minutes=25)

        response = await client.post(f"/api/projects/{project.id}/lock/extend")

        assert response.status_code == 200
        expires_at = datetime.fromisoformat(response.json()["expiresAt"])
        assert (expires_at - clock.now).total_seconds() == 30 * 60

    @pytest.mark.asyncio
    @pytest.mark.parametrize("minutes", [0, 121])
    async def test_extend_out_of_bounds(self, client, project, minutes):
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})

        response = await client.post(
            f"/api/projects/{project.id}/lock/extend", json={"minutes": minutes}
        )

        assert response.status_code == 400
        assert response.json()["error"]["context"]["field"] == "minutes"

    @pytest.mark.asyncio
    async def test_extend_without_lock_returns_404(self, client, project):
        response = await client.post(f"/api/projects/{project.id}/lock/extend", json={"minutes": 10})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "No active lock found"

    @pytest.mark.asyncio
    async def test_extend_after_expiry_returns_404(self, client, project, lock_manager, clock):
        app.dependency_overrides[get_lock_manager] = lambda: lock_manager
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})
        clock.advance(hours=1)

        response = await client.post(f"/api/projects/{project.id}/lock/extend", json={"minutes": 10})

        assert response.status_code == 404
