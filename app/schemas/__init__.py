"""
app/schemas package marker.
"""

from app.schemas.poeditor import (
    PoEditorExportEnvelope,
    PoEditorProjectListEnvelope,
    PoEditorResponseStatus,
)
from app.schemas.translation_sync import (
    RemoteProjectResponse,
    SyncRunAcceptedResponse,
    SyncRunListResponse,
    SyncRunRequest,
    SyncRunStatusResponse,
)

__all__ = [
    "PoEditorExportEnvelope",
    "PoEditorProjectListEnvelope",
    "PoEditorResponseStatus",
    "RemoteProjectResponse",
    "SyncRunAcceptedResponse",
    "SyncRunListResponse",
    "SyncRunRequest",
    "SyncRunStatusResponse",
]
