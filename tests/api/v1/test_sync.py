# tests/api/v1/test_sync.py
from unittest.mock import MagicMock

import pytest

from eventvax.api import deps
from eventvax.core.exceptions import SyncInProgressError
from eventvax.main import app
from eventvax.schemas.sync import SyncReport, SyncState, SyncStatus


@pytest.fixture
def sync_task():
    task = MagicMock()
    app.dependency_overrides[deps.get_sync_task] = lambda: task
    yield task
    app.dependency_overrides.pop(deps.get_sync_task, None)


def test_trigger_sync_starts_background_pass(test_client, sync_task):
    response = test_client.post("/api/v1/sync")

    assert response.status_code == 202
    assert response.json()["status"] == "started"
    sync_task.start.assert_called_once_with()


def test_trigger_sync_while_running_is_conflict(test_client, sync_task):
    sync_task.start.side_effect = SyncInProgressError()

    response = test_client.post("/api/v1/sync")

    assert response.status_code == 409
    assert response.json()["detail"] == "A blockchain sync pass is already in progress"


def test_sync_status_reports_last_pass(test_client, sync_task):
    report = SyncReport(strategy="explorer", seen=3, inserted=2, skipped_existing=1)
    sync_task.state.return_value = SyncState(
        running=False, last_report=report.finish(SyncStatus.completed)
    )

    response = test_client.get("/api/v1/sync/status")

    assert response.status_code == 200
    body = response.json()
    assert body["running"] is False
    assert body["last_report"]["status"] == "completed"
    assert body["last_report"]["inserted"] == 2
    assert body["scheduler"] == {"status": "not_initialized", "jobs": []}


def test_sync_status_uses_application_task(test_client):
    response = test_client.get("/api/v1/sync/status")

    assert response.status_code == 200
    assert response.json()["running"] is False
    assert response.json()["last_report"] is None
