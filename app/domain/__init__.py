"""
app/domain package marker.
"""

from app.domain.translation_sync import (
    ExportJob,
    LocaleDownloadOutcome,
    LocaleSyncStatus,
    RemoteProject,
    SyncState,
    SyncSummary,
    TranslationEntry,
)

__all__ = [
    "ExportJob",
    "LocaleDownloadOutcome",
    "LocaleSyncStatus",
    "RemoteProject",
    "SyncState",
    "SyncSummary",
    "TranslationEntry",
]
