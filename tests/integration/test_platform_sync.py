"""End-to-end reconciliation through PlatformClient against the application."""

import httpx
import pytest

from dochub.api.main import app
from dochub.core.reconciliation import Reconciler
from dochub.lib.http_client import APIError, PlatformClient


@pytest.fixture
async def platform(db_tables):
    async with PlatformClient("http://test", transport=httpx.ASGITransport(app=app)) as client:
        yield client


@pytest.mark.integration
class TestPlatformSync:
    """A local copy follows the platform's documents."""

    @pytest.mark.asyncio
    async def test_pull_only_when_fingerprint_changes(self, platform, project, tmp_path):
        await platform._request("PUT", f"/api/projects/{project.id}/docs/intro.md", json={"content": "v1"})
        reconciler = Reconciler(platform, tmp_path)

        first = await reconciler.check(project.id)
        second = await reconciler.check(project.id)

        assert first.pulled is True
        assert (tmp_path / "intro.md").read_text(encoding="utf-8") == "v1"
        assert second.pulled is False

        await platform._request("PUT", f"/api/projects/{project.id}/docs/intro.md", json={"content": "v2"})
        third = await reconciler.check(project.id)

        assert third.pulled is True
        assert (tmp_path / "intro.md").read_text(encoding="utf-8") == "v2"

    @pytest.mark.asyncio
    async def test_lock_visible_but_not_blocking(self, platform, project, tmp_path):
        await platform.acquire_lock(project.id, "alice", reason="Reorganizing")

        result = await Reconciler(platform, tmp_path).check(project.id)

        assert result.decision.lock.locked_by == "alice"
        assert result.decision.safe_to_edit is False
        assert result.pulled is True

    @pytest.mark.asyncio
    async def test_lock_lifecycle(self, platform, project):
        lock = await platform.acquire_lock(project.id, "alice")

        with pytest.raises(APIError) as exc_info:
            await platform.acquire_lock(project.id, "bob")

        extended = await platform.extend_lock(project.id, 45)
        released = await platform.release_lock(project.id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["lockedBy"] == "alice"
        assert extended["id"] == lock["id"]
        assert released == {"released": True}
