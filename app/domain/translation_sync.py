"""
app/domain/translation_sync.py

Domain models for translation table synchronization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


class SyncState(str, Enum):
    """
    Lifecycle of one synchronization run.
    """

    IDLE = "idle"
    INITIALIZING = "initializing"
    PER_LOCALE = "per_locale"
    COMMITTING = "committing"
    DONE = "done"
    FAULTED = "faulted"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncState.DONE, SyncState.FAULTED)


class LocaleSyncStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class RemoteProject:
    """
    One project visible to the configured credential.
    """

    id: str
    name: str


@dataclass(frozen=True)
class ExportJob:
    """
    Result of requesting a server-side export for one (locale, project) pair.
    """

    locale: str
    project_id: str
    status: Literal["ok", "fail"]
    download_url: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass(frozen=True)
class TranslationEntry:
    """
    One translated unit parsed from an interchange file.
    """

    key: str
    value: str
    note: str | None = None


@dataclass(frozen=True)
class LocaleDownloadOutcome:
    """
    Per-locale export/download result; path only on success, message only on failure.
    """

    locale: str
    success: bool
    temp_path: str | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        if self.success and (self.temp_path is None or self.error_message is not None):
            raise ValueError("A successful outcome carries a temp path and no error message.")
        if not self.success and (self.temp_path is not None or not self.error_message):
            raise ValueError("A failed outcome carries an error message and no temp path.")

    @classmethod
    def succeeded(cls, locale: str, temp_path: str) -> "LocaleDownloadOutcome":
        return cls(locale=locale, success=True, temp_path=temp_path)

    @classmethod
    def failed(cls, locale: str, error_message: str) -> "LocaleDownloadOutcome":
        return cls(locale=locale, success=False, error_message=error_message)


@dataclass(frozen=True)
class SyncSummary:
    """
    Aggregate of every locale outcome of one run, in catalog order.

    A locale whose download succeeded but whose local table does not exist is
    reported as skipped: it is neither a success nor a failure.
    """

    run_id: str
    state: SyncState
    outcomes: tuple[LocaleDownloadOutcome, ...] = ()
    skipped_locales: frozenset[str] = frozenset()
    imported_entries: dict[str, int] = field(default_factory=dict)
    committed: bool = False
    error: str | None = None

    def status_for(self, locale: str) -> LocaleSyncStatus:
        for outcome in self.outcomes:
            if outcome.locale != locale:
                continue
            if not outcome.success:
                return LocaleSyncStatus.FAILURE
            if locale in self.skipped_locales:
                return LocaleSyncStatus.SKIPPED
            return LocaleSyncStatus.SUCCESS
        raise KeyError(locale)

    @property
    def locales(self) -> list[str]:
        return [outcome.locale for outcome in self.outcomes]

    @property
    def succeeded(self) -> list[str]:
        return [
            code for code in self.locales if self.status_for(code) is LocaleSyncStatus.SUCCESS
        ]

    @property
    def failed(self) -> list[str]:
        return [outcome.locale for outcome in self.outcomes if not outcome.success]

    @property
    def skipped(self) -> list[str]:
        return [
            code for code in self.locales if self.status_for(code) is LocaleSyncStatus.SKIPPED
        ]

    def as_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "committed": self.committed,
            "error": self.error,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "locales": [
                {
                    "locale": outcome.locale,
                    "status": self.status_for(outcome.locale).value,
                    "message": outcome.error_message,
                    "entries_imported": self.imported_entries.get(outcome.locale, 0),
                }
                for outcome in self.outcomes
            ],
        }
