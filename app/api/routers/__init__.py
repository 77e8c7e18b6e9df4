"""
app/api/routers package marker.
"""

from app.api.routers.translation_sync import router as translation_sync_router

__all__ = [
    "translation_sync_router",
]
