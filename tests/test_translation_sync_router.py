"""
tests/test_translation_sync_router.py

HTTP contract of the translation sync endpoints, with the service replaced
through FastAPI dependency overrides.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import translation_sync_router
from app.connectors.base import AuthError, TransportError
from app.domain.translation_sync import RemoteProject
from app.services.translation_sync_service import (
    SyncAlreadyRunningError,
    get_translation_sync_service,
)
from db.models.sync_run import SyncRunStatus, SyncRunTrigger, TranslationSyncRun
from translation_sync.errors import MissingConfigurationError

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def _run(**overrides: Any) -> TranslationSyncRun:
    values = {
        "id": uuid.uuid4(),
        "status": SyncRunStatus.RUNNING,
        "trigger": SyncRunTrigger.API,
        "request_payload": {"locales": None},
        "result_payload": None,
        "error_message": None,
        "started_at": NOW,
        "completed_at": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    values.update(overrides)
    return TranslationSyncRun(**values)


class _StubService:
    def __init__(
        self,
        *,
        runs: list[TranslationSyncRun] | None = None,
        configured: bool = True,
        busy: bool = False,
        projects: list[RemoteProject] | None = None,
        project_error: Exception | None = None,
    ) -> None:
        self.runs = runs or []
        self.configured = configured
        self.busy = busy
        self.projects = projects or []
        self.project_error = project_error
        self.started: list[dict[str, Any]] = []

    async def list_projects(self) -> list[RemoteProject]:
        if self.project_error is not None:
            raise self.project_error
        return self.projects

    def ensure_configured(self) -> None:
        if not self.configured:
            raise MissingConfigurationError("Missing required configuration: api_key.")

    def start_in_host_loop(self, *, trigger: str, locale_filter=None) -> TranslationSyncRun:
        if self.busy:
            raise SyncAlreadyRunningError("A translation sync is already running.")
        self.started.append({"trigger": trigger, "locale_filter": locale_filter})
        run = _run()
        self.runs.append(run)
        return run

    def list_runs(self, *, limit: int = 100, status: str | None = None) -> list[TranslationSyncRun]:
        runs = [run for run in self.runs if status is None or run.status == status]
        return runs[:limit]

    def get_run(self, run_id: uuid.UUID) -> TranslationSyncRun | None:
        return next((run for run in self.runs if run.id == run_id), None)


def _client(service: _StubService) -> TestClient:
    application = FastAPI()
    application.include_router(translation_sync_router)
    application.dependency_overrides[get_translation_sync_service] = lambda: service
    return TestClient(application)


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


class TestStartRun:
    def test_returns_202_with_run_id(self) -> None:
        service = _StubService()

        response = _client(service).post("/translation-sync/runs", json={"locales": ["fr", "de"]})

        assert response.status_code == 202
        body = response.json()
        assert body["status"] == SyncRunStatus.RUNNING
        assert uuid.UUID(body["run_id"]) == service.runs[0].id
        assert service.started == [{"trigger": SyncRunTrigger.API, "locale_filter": ["fr", "de"]}]

    def test_body_is_optional(self) -> None:
        service = _StubService()

        response = _client(service).post("/translation-sync/runs")

        assert response.status_code == 202
        assert service.started[0]["locale_filter"] is None

    def test_missing_configuration_returns_400(self) -> None:
        response = _client(_StubService(configured=False)).post("/translation-sync/runs")

        assert response.status_code == 400
        assert "api_key" in response.json()["detail"]

    def test_concurrent_run_returns_409(self) -> None:
        response = _client(_StubService(busy=True)).post("/translation-sync/runs")
        assert response.status_code == 409


class TestRunStatus:
    def test_get_run_returns_summary_payload(self) -> None:
        run = _run(
            status=SyncRunStatus.COMPLETED,
            completed_at=NOW,
            result_payload={"state": "done", "failed": 1, "locales": []},
        )

        response = _client(_StubService(runs=[run])).get(f"/translation-sync/runs/{run.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == SyncRunStatus.COMPLETED
        assert body["result_payload"]["failed"] == 1

    def test_unknown_run_returns_404(self) -> None:
        response = _client(_StubService()).get(f"/translation-sync/runs/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_invalid_run_id_returns_422(self) -> None:
        response = _client(_StubService()).get("/translation-sync/runs/not-a-uuid")
        assert response.status_code == 422

    def test_list_runs_filters_by_status(self) -> None:
        service = _StubService(
            runs=[_run(status=SyncRunStatus.FAILED), _run(status=SyncRunStatus.COMPLETED)]
        )

        response = _client(service).get("/translation-sync/runs", params={"status": "failed"})

        assert response.status_code == 200
        assert [run["status"] for run in response.json()["runs"]] == ["failed"]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class TestProjects:
    def test_lists_remote_projects(self) -> None:
        service = _StubService(projects=[RemoteProject(id="42", name="Game")])

        response = _client(service).get("/translation-sync/projects")

        assert response.json() == [{"id": "42", "name": "Game"}]

    @pytest.mark.parametrize(
        "error, status_code",
        [(AuthError("Invalid API Token"), 400), (TransportError("timeout"), 502)],
    )
    def test_remote_errors_are_mapped(self, error: Exception, status_code: int) -> None:
        response = _client(_StubService(project_error=error)).get("/translation-sync/projects")
        assert response.status_code == status_code
