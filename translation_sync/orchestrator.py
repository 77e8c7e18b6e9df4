"""
translation_sync/orchestrator.py

Bulk synchronization of remote translations into local string tables.

The orchestrator is an explicit state machine:

    IDLE -> INITIALIZING -> PER_LOCALE(0..N-1) -> COMMITTING -> DONE
                 any non-terminal state -> FAULTED

Each call to ``advance()`` performs exactly one transition and suspends only
on the remote calls of that transition, so any driver that awaits
``advance()`` repeatedly (a host event loop tick or a polling loop) runs the
same pipeline. Locales are processed strictly one at a time in catalog
order. Remote and per-file failures become failed outcomes; only a missing
configuration, an unavailable catalog or an unavailable string store fault
the run, in which case nothing is committed.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from app.connectors.base import RemoteServiceError
from app.domain.translation_sync import (
    ExportJob,
    LocaleDownloadOutcome,
    SyncState,
    SyncSummary,
    TranslationEntry,
)
from app.logging_utils import log_event
from translation_sync.catalog import LocaleCatalog
from translation_sync.errors import (
    InterchangeFormatError,
    LocaleCatalogUnavailableError,
    MergeSinkUnavailableError,
    MissingConfigurationError,
    SyncFaultedError,
    TranslationSyncError,
)
from translation_sync.retry import ExportRetryPolicy, export_with_retry
from translation_sync.sink import TableMergeSink
from translation_sync.xliff import parse_xliff_file

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class RemoteTranslationClient(Protocol):
    async def export_locale(self, locale: str, project_id: str) -> ExportJob:
        ...

    async def download_file(self, url: str, destination_path: str) -> None:
        ...


@dataclass(frozen=True)
class SyncRunConfig:
    """
    Explicit configuration of one run, passed in at construction.
    """

    api_key: str | None
    project_id: str | None
    table_collection: str

    def missing_fields(self) -> list[str]:
        missing: list[str] = []
        if not (self.api_key or "").strip():
            missing.append("api_key")
        if not (self.project_id or "").strip():
            missing.append("project_id")
        if not (self.table_collection or "").strip():
            missing.append("table_collection")
        return missing


class TranslationSyncOrchestrator:
    """
    Drives export -> download -> parse -> merge for every catalog locale.

    Owns the per-locale outcomes of one run; is not reusable across runs.
    """

    def __init__(
        self,
        *,
        client: RemoteTranslationClient,
        catalog: LocaleCatalog,
        sink: TableMergeSink,
        config: SyncRunConfig,
        locale_filter: Iterable[str] | None = None,
        retry_policy: ExportRetryPolicy | None = None,
        temp_dir: str | None = None,
        run_id: str | None = None,
    ) -> None:
        self._client = client
        self._catalog = catalog
        self._sink = sink
        self._config = config
        self._locale_filter = list(dict.fromkeys(locale_filter)) if locale_filter else None
        self._retry_policy = retry_policy or ExportRetryPolicy()
        self._temp_dir = temp_dir
        self.run_id = run_id or uuid.uuid4().hex

        self._state = SyncState.IDLE
        self._locales: list[str] = []
        self._index = 0
        self._outcomes: list[LocaleDownloadOutcome] = []
        self._skipped: set[str] = set()
        self._imported: dict[str, int] = {}
        self._committed = False
        self._error: BaseException | None = None
        self._work_dir: str | None = None
        self._summary: SyncSummary | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def summary(self) -> SyncSummary | None:
        """
        The run summary, available once the run reached DONE or FAULTED.
        """

        return self._summary

    async def advance(self) -> SyncState:
        """
        Perform one state transition and return the new state.

        Raises SyncFaultedError (chained to the cause) when the transition
        faulted the run. Advancing a finished run is a no-op.
        """

        if self._state.is_terminal:
            return self._state

        try:
            if self._state is SyncState.IDLE:
                self._check_configuration()
            elif self._state is SyncState.INITIALIZING:
                await self._initialize()
            elif self._state is SyncState.PER_LOCALE:
                await self._process_locale(self._locales[self._index])
                self._index += 1
                if self._index >= len(self._locales):
                    self._state = SyncState.COMMITTING
            elif self._state is SyncState.COMMITTING:
                self._commit()
        except TranslationSyncError as exc:
            self.fault(exc)
            raise SyncFaultedError(str(exc)) from exc

        return self._state

    def fault(self, exc: BaseException) -> None:
        """
        Move the run to FAULTED, discarding every uncommitted replacement.
        """

        if self._state.is_terminal:
            return

        failed_state = self._state
        self._error = exc
        self._state = SyncState.FAULTED
        try:
            self._sink.rollback()
        except MergeSinkUnavailableError as rollback_exc:
            logger.warning("Rollback after fault failed run_id=%s error=%s", self.run_id, rollback_exc)
        self._remove_work_dir()
        self._summary = self._build_summary()
        log_event(
            logger,
            logging.ERROR,
            "translation_sync_faulted",
            run_id=self.run_id,
            state=failed_state.value,
            locales_processed=len(self._outcomes),
            error=str(exc),
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _check_configuration(self) -> None:
        missing = self._config.missing_fields()
        if missing:
            raise MissingConfigurationError(
                f"Missing required configuration: {', '.join(missing)}."
            )
        logger.info(
            "Translation sync starting run_id=%s project_id=%s collection=%s",
            self.run_id,
            self._config.project_id,
            self._config.table_collection,
        )
        self._state = SyncState.INITIALIZING

    async def _initialize(self) -> None:
        try:
            catalog = await self._catalog.available_locales()
        except LocaleCatalogUnavailableError:
            raise
        except Exception as exc:
            raise LocaleCatalogUnavailableError(f"Locale catalog unavailable: {exc}") from exc

        self._sink.ensure_available()

        self._locales = self._select_locales(_dedupe(catalog))
        logger.info(
            "Translation sync catalog resolved run_id=%s locales=%s",
            self.run_id,
            ",".join(self._locales),
        )
        self._state = SyncState.PER_LOCALE if self._locales else SyncState.COMMITTING

    async def _process_locale(self, locale: str) -> None:
        outcome, entries = await self._fetch_locale(locale)
        self._outcomes.append(outcome)

        if not outcome.success:
            return

        try:
            if not self._sink.has_table(locale):
                self._skipped.add(locale)
                log_event(
                    logger,
                    logging.WARNING,
                    "translation_sync_locale_skipped",
                    run_id=self.run_id,
                    locale=locale,
                    reason=(
                        f"String table for '{locale}' not found in "
                        f"'{self._config.table_collection}'."
                    ),
                )
                return

            imported = self._sink.replace_entries(locale, entries)
            self._imported[locale] = imported
            log_event(
                logger,
                logging.INFO,
                "translation_sync_locale_completed",
                run_id=self.run_id,
                locale=locale,
                entries_imported=imported,
            )
        finally:
            self._delete_temp_file(outcome.temp_path)

    def _commit(self) -> None:
        self._sink.commit()
        self._committed = True
        self._state = SyncState.DONE
        self._remove_work_dir()
        self._summary = self._build_summary()
        log_event(
            logger,
            logging.INFO,
            "translation_sync_committed",
            run_id=self.run_id,
            succeeded=len(self._summary.succeeded),
            failed=len(self._summary.failed),
            skipped=len(self._summary.skipped),
        )

    # ------------------------------------------------------------------
    # Per-locale helpers
    # ------------------------------------------------------------------

    async def _fetch_locale(
        self, locale: str
    ) -> tuple[LocaleDownloadOutcome, list[TranslationEntry]]:
        """
        Export, download and parse one locale; never raises for remote or file errors.
        """

        project_id = self._config.project_id or ""
        try:
            job = await export_with_retry(self._client, locale, project_id, self._retry_policy)
        except RemoteServiceError as exc:
            return self._locale_failed(locale, "export", _error_text(exc))
        except Exception as exc:
            logger.exception("Unhandled export failure locale=%s", locale)
            return self._locale_failed(locale, "export", _error_text(exc))

        if not job.ok or not job.download_url:
            return self._locale_failed(
                locale, "export", job.message or "export returned no download url"
            )

        destination: str | None = None
        try:
            destination = self._destination_for(locale)
            await self._client.download_file(job.download_url, destination)
            entries = parse_xliff_file(destination)
        except (RemoteServiceError, InterchangeFormatError, OSError) as exc:
            self._delete_temp_file(destination)
            return self._locale_failed(locale, "download", _error_text(exc))
        except Exception as exc:
            logger.exception("Unhandled download failure locale=%s", locale)
            self._delete_temp_file(destination)
            return self._locale_failed(locale, "download", _error_text(exc))

        return LocaleDownloadOutcome.succeeded(locale, destination), entries

    def _locale_failed(
        self, locale: str, stage: str, message: str
    ) -> tuple[LocaleDownloadOutcome, list[TranslationEntry]]:
        log_event(
            logger,
            logging.ERROR,
            "translation_sync_locale_failed",
            run_id=self.run_id,
            locale=locale,
            stage=stage,
            error=f"Failed to {stage} '{locale}': {message}",
        )
        return LocaleDownloadOutcome.failed(locale, message), []

    def _destination_for(self, locale: str) -> str:
        if self._work_dir is None:
            self._work_dir = tempfile.mkdtemp(prefix="translation-sync-", dir=self._temp_dir)
        # Locales run one at a time and each file is removed before the next step.
        safe_code = _UNSAFE_FILENAME_CHARS.sub("_", locale)
        return os.path.join(self._work_dir, f"file-{safe_code}.xliff")

    def _delete_temp_file(self, path: str | None) -> None:
        if not path:
            return
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Could not delete temp file %s: %s", path, exc)

    def _remove_work_dir(self) -> None:
        if self._work_dir is None:
            return
        try:
            shutil.rmtree(self._work_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove temp directory %s: %s", self._work_dir, exc)
        self._work_dir = None

    # ------------------------------------------------------------------
    # Catalog helpers
    # ------------------------------------------------------------------

    def _select_locales(self, catalog: list[str]) -> list[str]:
        if self._locale_filter is None:
            return catalog

        unknown = [code for code in self._locale_filter if code not in catalog]
        if unknown:
            raise LocaleCatalogUnavailableError(
                f"Requested locales not in catalog: {', '.join(unknown)}."
            )
        requested = set(self._locale_filter)
        return [code for code in catalog if code in requested]

    def _build_summary(self) -> SyncSummary:
        return SyncSummary(
            run_id=self.run_id,
            state=self._state,
            outcomes=tuple(self._outcomes),
            skipped_locales=frozenset(self._skipped),
            imported_entries=dict(self._imported),
            committed=self._committed,
            error=str(self._error) if self._error is not None else None,
        )


def _dedupe(codes: list[str]) -> list[str]:
    unique = list(dict.fromkeys(codes))
    if len(unique) != len(codes):
        logger.warning("Locale catalog returned duplicate codes; keeping first occurrences.")
    return unique


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__
