"""
Repository for translation sync run lifecycle persistence and status lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.sync_run import SyncRunStatus, TranslationSyncRun


class SyncRunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_run(
        self,
        *,
        trigger: str,
        request_payload: dict[str, Any] | None = None,
    ) -> TranslationSyncRun:
        run = TranslationSyncRun(
            trigger=trigger,
            status=SyncRunStatus.PENDING,
            request_payload=request_payload,
        )
        self._session.add(run)
        self._session.flush()
        self._session.refresh(run)
        return run

    def get_run(self, run_id: uuid.UUID) -> TranslationSyncRun | None:
        return self._session.get(TranslationSyncRun, run_id)

    def list_runs(
        self,
        *,
        limit: int = 100,
        status: str | None = None,
    ) -> list[TranslationSyncRun]:
        stmt: Select[tuple[TranslationSyncRun]] = select(TranslationSyncRun)
        if status:
            stmt = stmt.where(TranslationSyncRun.status == status)

        stmt = stmt.order_by(TranslationSyncRun.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def mark_running(self, *, run_id: uuid.UUID) -> TranslationSyncRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = SyncRunStatus.RUNNING
        run.started_at = datetime.now(timezone.utc)
        run.completed_at = None
        run.error_message = None
        return run

    def mark_completed(
        self,
        *,
        run_id: uuid.UUID,
        result_payload: dict[str, Any] | None = None,
    ) -> TranslationSyncRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = SyncRunStatus.COMPLETED
        run.completed_at = datetime.now(timezone.utc)
        run.result_payload = result_payload
        run.error_message = None
        return run

    def mark_failed(
        self,
        *,
        run_id: uuid.UUID,
        error_message: str,
        result_payload: dict[str, Any] | None = None,
    ) -> TranslationSyncRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = SyncRunStatus.FAILED
        run.completed_at = datetime.now(timezone.utc)
        run.error_message = error_message
        run.result_payload = result_payload
        return run
