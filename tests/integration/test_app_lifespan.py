"""Tests for application startup and shutdown."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from dochub.api.main import app


@pytest.mark.integration
class TestLifespan:
    """Tests for the lifespan hooks."""

    def test_sweep_job_started_when_configured(self, sync_db_tables):
        mock_settings = MagicMock(auto_create_tables=True, lock_sweep_interval_seconds=3600)

        with (
            patch("dochub.api.main.settings", mock_settings),
            patch("dochub.api.main.LockSweepJob") as sweep_cls,
        ):
            sweep_cls.return_value.execute = AsyncMock(return_value={"locks_removed": 0})
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200

        sweep_cls.return_value.execute.assert_awaited()

    def test_no_sweep_by_default(self, sync_db_tables):
        with patch("dochub.api.main.JobScheduler") as scheduler_cls:
            scheduler_cls.return_value.stop = AsyncMock()
            with TestClient(app):
                pass

        scheduler_cls.return_value.register_job.assert_not_called()
