"""
Repository for per-locale string table lookup, clearing and bulk import.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from app.domain.translation_sync import TranslationEntry
from db.models.app_locale import AppLocale
from db.models.string_table import StringTable, StringTableCollection, StringTableEntry


class StringTableRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_collection(self, name: str) -> StringTableCollection | None:
        stmt = select(StringTableCollection).where(StringTableCollection.name == name)
        return self._session.scalars(stmt).first()

    def get_table(self, *, collection_name: str, locale_code: str) -> StringTable | None:
        stmt = (
            select(StringTable)
            .join(StringTableCollection, StringTable.collection_id == StringTableCollection.id)
            .where(
                StringTableCollection.name == collection_name,
                StringTable.locale_code == locale_code,
            )
        )
        return self._session.scalars(stmt).first()

    def create_collection(self, name: str) -> StringTableCollection:
        collection = StringTableCollection(name=name)
        self._session.add(collection)
        self._session.flush()
        return collection

    def create_table(self, *, collection: StringTableCollection, locale_code: str) -> StringTable:
        table = StringTable(collection_id=collection.id, locale_code=locale_code)
        self._session.add(table)
        self._session.flush()
        return table

    def clear_table(self, table: StringTable) -> int:
        result = self._session.execute(
            delete(StringTableEntry).where(StringTableEntry.table_id == table.id)
        )
        self._session.expire(table, ["entries"])
        return result.rowcount or 0

    def bulk_insert_entries(
        self,
        table: StringTable,
        entries: Sequence[TranslationEntry],
        *,
        batch_size: int = 1000,
    ) -> int:
        if not entries:
            return 0

        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(entries), size):
            chunk = entries[start : start + size]
            self._session.execute(
                insert(StringTableEntry),
                [
                    {
                        "table_id": table.id,
                        "key": entry.key,
                        "value": entry.value,
                        "note": entry.note,
                    }
                    for entry in chunk
                ],
            )
            inserted += len(chunk)
        self._session.expire(table, ["entries"])
        return inserted

    def list_entries(self, table: StringTable) -> list[StringTableEntry]:
        stmt = (
            select(StringTableEntry)
            .where(StringTableEntry.table_id == table.id)
            .order_by(StringTableEntry.key)
        )
        return list(self._session.scalars(stmt).all())

    def list_active_locale_codes(self) -> list[str]:
        stmt = (
            select(AppLocale.code)
            .where(AppLocale.is_active.is_(True))
            .order_by(AppLocale.position, AppLocale.id)
        )
        return list(self._session.scalars(stmt).all())
