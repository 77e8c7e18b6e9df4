"""
Repository layer exports.
"""

from db.repositories.string_table_repository import StringTableRepository
from db.repositories.sync_run_repository import SyncRunRepository

__all__ = [
    "StringTableRepository",
    "SyncRunRepository",
]
