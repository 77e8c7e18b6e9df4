"""
app/services package marker.
"""

from app.services.translation_sync_service import (
    SyncAlreadyRunningError,
    TranslationSyncService,
    get_translation_sync_service,
)

__all__ = [
    "SyncAlreadyRunningError",
    "TranslationSyncService",
    "get_translation_sync_service",
]
