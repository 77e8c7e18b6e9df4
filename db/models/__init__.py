"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.app_locale import AppLocale
from db.models.string_table import StringTable, StringTableCollection, StringTableEntry
from db.models.sync_run import SyncRunStatus, SyncRunTrigger, TranslationSyncRun

__all__ = [
    "AppLocale",
    "StringTable",
    "StringTableCollection",
    "StringTableEntry",
    "SyncRunStatus",
    "SyncRunTrigger",
    "TranslationSyncRun",
]
