"""
app/connectors package marker.
"""

from app.connectors.base import (
    AuthError,
    BaseAsyncConnector,
    DataError,
    RemoteServiceError,
    TransportError,
)
from app.connectors.poeditor_connector import PoEditorClient

__all__ = [
    "AuthError",
    "BaseAsyncConnector",
    "DataError",
    "PoEditorClient",
    "RemoteServiceError",
    "TransportError",
]
