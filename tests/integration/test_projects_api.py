"""Integration tests for the project endpoints."""

import pytest


@pytest.mark.integration
class TestProjectEndpoints:
    """Tests for /api/projects."""

    @pytest.mark.asyncio
    async def test_create_project(self, client):
        response = await client.post(
            "/api/projects",
            json={"name": "Handbook", "repoUrl": "https://git.example.com/handbook.git"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Handbook"
        assert data["repoUrl"] == "https://git.example.com/handbook.git"
        assert data["branch"] == "main"
        assert data["docsPath"] == "docs"
        assert data["id"].startswith("c")

    @pytest.mark.asyncio
    async def test_create_requires_name(self, client):
        response = await client.post("/api/projects", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_project(self, client, project):
        response = await client.get(f"/api/projects/{project.id}")

        assert response.status_code == 200
        assert response.json()["id"] == project.id

    @pytest.mark.asyncio
    async def test_get_missing_project(self, client):
        response = await client.get("/api/projects/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_paginates(self, client, make_project):
        for n in range(3):
            await make_project(f"p-{n}", name=f"Project {n}")

        data = (await client.get("/api/projects", params={"page": 2, "perPage": 2})).json()

        assert len(data["items"]) == 1
        assert data["pagination"]["total"] == 3

    @pytest.mark.asyncio
    async def test_delete_removes_lock_and_docs(self, client, project):
        await client.put(f"/api/projects/{project.id}/docs/a.md", json={"content": "a"})
        await client.post(f"/api/projects/{project.id}/lock", json={"lockedBy": "alice"})

        response = await client.delete(f"/api/projects/{project.id}")

        assert response.status_code == 204
        assert (await client.get(f"/api/projects/{project.id}")).status_code == 404
        assert (await client.get(f"/api/projects/{project.id}/lock")).json() is None
