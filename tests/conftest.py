"""Pytest configuration and fixtures."""

import asyncio
import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Point the application at a throwaway SQLite database before anything imports it
_test_dir = Path(tempfile.mkdtemp(prefix="dochub-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir / 'dochub-test.db'}"
os.environ.setdefault("LOG_DIR", str(_test_dir / "logs"))
os.environ.pop("API_KEY", None)
os.environ.pop("LOCK_SWEEP_INTERVAL_SECONDS", None)


class FakeClock:
    """Controllable UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


async def _create_tables() -> None:
    from dochub.db import init_models

    await init_models()


async def _drop_tables() -> None:
    from dochub.db import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def fresh_services():
    """Give every test its own broadcaster and lock manager."""
    from dochub.api.dependencies import reset_services
    from dochub.api.main import app

    reset_services()
    yield
    app.dependency_overrides.clear()
    reset_services()


@pytest.fixture
async def db_tables():
    """Create all tables for one test and drop them afterwards."""
    await _create_tables()
    yield
    await _drop_tables()


@pytest.fixture
def sync_db_tables():
    """Table setup for synchronous tests driving the app through TestClient."""
    asyncio.run(_create_tables())
    yield
    asyncio.run(_drop_tables())


@pytest.fixture
async def client(db_tables):
    """Async HTTP client bound to the application."""
    from httpx import ASGITransport, AsyncClient

    from dochub.api.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_project(db_tables) -> Callable:
    """Factory persisting a project and returning it."""
    from dochub.core.projects import ProjectService
    from dochub.db import SessionLocal

    async def _make(project_id: str | None = None, name: str = "Engineering Handbook", **fields):
        async with SessionLocal() as session:
            project = await ProjectService(session).create_project(
                name=name, project_id=project_id, **fields
            )
            await session.commit()
        return project

    return _make


@pytest.fixture
async def project(make_project):
    """A persisted project."""
    return await make_project("proj-1")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lock_store(db_tables, clock):
    """Lock store on the test database driven by the fake clock."""
    from dochub.core.lock_store import LockStore
    from dochub.db import SessionLocal

    return LockStore(SessionLocal, clock=clock)


@pytest.fixture
def broadcaster():
    from dochub.core.notifications import EventBroadcaster

    return EventBroadcaster(queue_size=10)


@pytest.fixture
def lock_manager(lock_store, broadcaster):
    """Lock manager wired to the fake clock and a private broadcaster."""
    from dochub.core.locking import LockManager

    return LockManager(store=lock_store, notifier=broadcaster)
