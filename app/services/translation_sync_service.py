"""
app/services/translation_sync_service.py

Composition and run bookkeeping for the translation sync pipeline.

Each run is audited in ``translation_sync_runs`` through its own session, so
a run whose string-table changes were rolled back still leaves a record.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from app.config import (
    ExternalHTTPSettings,
    PoEditorSettings,
    TranslationSyncSettings,
    get_external_http_settings,
    get_poeditor_settings,
    get_translation_sync_settings,
)
from app.connectors.poeditor_connector import PoEditorClient
from app.domain.translation_sync import RemoteProject, SyncState, SyncSummary
from db.models.sync_run import TranslationSyncRun
from db.repositories.sync_run_repository import SyncRunRepository
from translation_sync.catalog import DatabaseLocaleCatalog, LocaleCatalog, StaticLocaleCatalog
from translation_sync.driver import HostLoopDriver, PollingDriver
from translation_sync.errors import MissingConfigurationError
from translation_sync.orchestrator import SyncRunConfig, TranslationSyncOrchestrator
from translation_sync.retry import ExportRetryPolicy
from translation_sync.sink import SQLAlchemyTableMergeSink

logger = logging.getLogger(__name__)


class SyncAlreadyRunningError(RuntimeError):
    """Raised when a run is requested while another one is still active."""


class TranslationSyncService:
    """
    Builds orchestrators from settings and records every run they perform.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] | None = None,
        poeditor_settings: PoEditorSettings | None = None,
        http_settings: ExternalHTTPSettings | None = None,
        sync_settings: TranslationSyncSettings | None = None,
        client_factory: Callable[[], PoEditorClient] | None = None,
        catalog_factory: Callable[[Session], LocaleCatalog] | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

        self._poeditor_settings = poeditor_settings or get_poeditor_settings()
        self._http_settings = http_settings or get_external_http_settings()
        self._sync_settings = sync_settings or get_translation_sync_settings()
        self._client_factory = client_factory or self._build_client
        self._catalog_factory = catalog_factory or self._build_catalog
        self._active: dict[uuid.UUID, asyncio.Task] = {}
        self._run_slot = threading.Lock()

    @property
    def settings(self) -> TranslationSyncSettings:
        return self._sync_settings

    def ensure_configured(self) -> None:
        """
        Raise MissingConfigurationError before a run is created without credentials.
        """

        missing = self._run_config().missing_fields()
        if missing:
            raise MissingConfigurationError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set POEDITOR_API_KEY and POEDITOR_PROJECT_ID."
            )

    async def list_projects(self) -> list[RemoteProject]:
        client = self._client_factory()
        async with client:
            return await client.list_projects()

    def create_orchestrator(
        self,
        *,
        client: PoEditorClient,
        store_session: Session,
        locale_filter: Sequence[str] | None = None,
        run_id: str | None = None,
    ) -> TranslationSyncOrchestrator:
        settings = self._sync_settings
        return TranslationSyncOrchestrator(
            client=client,
            catalog=self._catalog_factory(store_session),
            sink=SQLAlchemyTableMergeSink(
                session=store_session,
                collection_name=settings.table_collection,
                batch_size=settings.storage_batch_size,
            ),
            config=self._run_config(),
            locale_filter=locale_filter,
            retry_policy=ExportRetryPolicy(
                max_retries=settings.export_max_retries,
                backoff_initial_seconds=settings.export_backoff_initial_seconds,
                backoff_multiplier=settings.export_backoff_multiplier,
            ),
            temp_dir=settings.temp_dir,
            run_id=run_id,
        )

    def run_blocking(
        self,
        *,
        trigger: str,
        locale_filter: Sequence[str] | None = None,
    ) -> SyncSummary:
        """
        Run one sync to completion on a fresh event loop with the polling driver.
        """

        return asyncio.run(self.run_async(trigger=trigger, locale_filter=locale_filter))

    async def run_async(
        self,
        *,
        trigger: str,
        locale_filter: Sequence[str] | None = None,
    ) -> SyncSummary:
        """
        Run one sync to completion on the current loop with the polling driver.

        Raises SyncAlreadyRunningError while another run of this process is active.
        """

        self._claim_run_slot()
        try:
            return await self._run_polling(trigger=trigger, locale_filter=locale_filter)
        finally:
            self._release_run_slot()

    def start_in_host_loop(
        self,
        *,
        trigger: str,
        locale_filter: Sequence[str] | None = None,
    ) -> TranslationSyncRun:
        """
        Start a run on the running event loop and return its audit record.

        Must be called from a coroutine executing on the host loop. Raises
        SyncAlreadyRunningError while another run of this process is active.
        """

        loop = asyncio.get_running_loop()
        self._forget_finished()
        self._claim_run_slot()
        try:
            run = self._create_run_record(trigger=trigger, locale_filter=locale_filter)
        except BaseException:
            self._release_run_slot()
            raise

        store_session: Session | None = None
        try:
            store_session = self._session_factory()
            # The client opens its HTTP session lazily, so there is nothing to close yet.
            client = self._client_factory()
            orchestrator = self.create_orchestrator(
                client=client,
                store_session=store_session,
                locale_filter=locale_filter,
                run_id=str(run.id),
            )
            driver = HostLoopDriver(orchestrator, loop=loop)
            driver.attach(self._sync_settings.tick_interval_seconds)
            task = loop.create_task(self._finish_host_run(run.id, driver, client, store_session))
            task.add_done_callback(lambda _: self._release_run_slot())
        except BaseException as exc:
            if store_session is not None:
                store_session.close()
            self._record_crash(run.id, exc)
            self._release_run_slot()
            raise

        self._active[run.id] = task
        logger.info("Translation sync started in host loop run_id=%s trigger=%s", run.id, trigger)
        return run

    async def wait_for_run(self, run_id: uuid.UUID) -> None:
        task = self._active.get(run_id)
        if task is not None:
            await task

    def get_run(self, run_id: uuid.UUID) -> TranslationSyncRun | None:
        with self._session_factory() as db:
            return SyncRunRepository(db).get_run(run_id)

    def list_runs(self, *, limit: int = 100, status: str | None = None) -> list[TranslationSyncRun]:
        with self._session_factory() as db:
            return SyncRunRepository(db).list_runs(limit=limit, status=status)

    async def _run_polling(
        self,
        *,
        trigger: str,
        locale_filter: Sequence[str] | None,
    ) -> SyncSummary:
        run = self._create_run_record(trigger=trigger, locale_filter=locale_filter)
        store_session: Session | None = None
        try:
            store_session = self._session_factory()
            client = self._client_factory()
            async with client:
                orchestrator = self.create_orchestrator(
                    client=client,
                    store_session=store_session,
                    locale_filter=locale_filter,
                    run_id=str(run.id),
                )
                driver = PollingDriver(
                    orchestrator,
                    poll_interval_seconds=self._sync_settings.poll_interval_seconds,
                )
                summary = await driver.run_async()
        except BaseException as exc:
            self._record_crash(run.id, exc)
            raise
        finally:
            if store_session is not None:
                store_session.close()

        self._record_summary(run.id, summary)
        return summary

    async def _finish_host_run(
        self,
        run_id: uuid.UUID,
        driver: HostLoopDriver,
        client: PoEditorClient,
        store_session: Session,
    ) -> None:
        try:
            try:
                summary = await driver.wait()
            except BaseException as exc:
                driver.orchestrator.fault(exc)
                raise
            finally:
                driver.detach()
                await client.close()
                store_session.close()
        except BaseException as exc:
            self._record_crash(run_id, exc)
            raise

        if summary is None:
            self._record_crash(run_id, RuntimeError("Run finished without a summary."))
            return
        self._record_summary(run_id, summary)

    def _claim_run_slot(self) -> None:
        # The scheduler runs on its own thread and loop; the lock spans both.
        if not self._run_slot.acquire(blocking=False):
            raise SyncAlreadyRunningError("A translation sync is already running in this process.")

    def _release_run_slot(self) -> None:
        self._run_slot.release()

    def _forget_finished(self) -> None:
        for run_id in [run_id for run_id, task in self._active.items() if task.done()]:
            task = self._active.pop(run_id)
            if not task.cancelled() and task.exception() is not None:
                logger.error(
                    "Translation sync bookkeeping failed run_id=%s",
                    run_id,
                    exc_info=task.exception(),
                )

    # ------------------------------------------------------------------
    # Run records
    # ------------------------------------------------------------------

    def _create_run_record(
        self,
        *,
        trigger: str,
        locale_filter: Sequence[str] | None,
    ) -> TranslationSyncRun:
        request_payload: dict[str, Any] = {
            "project_id": self._poeditor_settings.project_id,
            "table_collection": self._sync_settings.table_collection,
            "locales": list(locale_filter) if locale_filter else None,
        }
        with self._session_factory() as db:
            repository = SyncRunRepository(db)
            run = repository.create_run(trigger=trigger, request_payload=request_payload)
            repository.mark_running(run_id=run.id)
            db.commit()
            db.refresh(run)
            return run

    def _record_summary(self, run_id: uuid.UUID, summary: SyncSummary) -> None:
        with self._session_factory() as db:
            repository = SyncRunRepository(db)
            if summary.state is SyncState.DONE:
                repository.mark_completed(run_id=run_id, result_payload=summary.as_dict())
            else:
                repository.mark_failed(
                    run_id=run_id,
                    error_message=summary.error or "Translation sync faulted.",
                    result_payload=summary.as_dict(),
                )
            db.commit()

    def _record_crash(self, run_id: uuid.UUID, exc: BaseException) -> None:
        message = str(exc) or type(exc).__name__
        logger.error("Translation sync run crashed run_id=%s error=%s", run_id, message)
        with self._session_factory() as db:
            SyncRunRepository(db).mark_failed(run_id=run_id, error_message=message)
            db.commit()

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    def _run_config(self) -> SyncRunConfig:
        return SyncRunConfig(
            api_key=self._poeditor_settings.api_key,
            project_id=self._poeditor_settings.project_id,
            table_collection=self._sync_settings.table_collection,
        )

    def _build_client(self) -> PoEditorClient:
        return PoEditorClient(
            settings=self._poeditor_settings,
            http_settings=self._http_settings,
        )

    def _build_catalog(self, store_session: Session) -> LocaleCatalog:
        if self._sync_settings.locales:
            return StaticLocaleCatalog(self._sync_settings.locales)
        return DatabaseLocaleCatalog(store_session)


@lru_cache(maxsize=1)
def get_translation_sync_service() -> TranslationSyncService:
    """
    Build and cache the translation sync service.
    """

    return TranslationSyncService()
