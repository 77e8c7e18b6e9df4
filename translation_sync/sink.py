"""
translation_sync/sink.py

Table merge sinks: replace one locale's entries in local string storage.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.translation_sync import TranslationEntry
from db.repositories.string_table_repository import StringTableRepository
from translation_sync.errors import MergeSinkUnavailableError

logger = logging.getLogger(__name__)


class TableMergeSink(ABC):
    """
    Storage abstraction for the per-locale merge and the once-per-run commit.
    """

    @abstractmethod
    def ensure_available(self) -> None:
        """
        Raise MergeSinkUnavailableError when the target collection cannot be used.
        """

    @abstractmethod
    def has_table(self, locale: str) -> bool:
        """
        Return whether the collection holds a table for ``locale``.
        """

    @abstractmethod
    def replace_entries(self, locale: str, entries: Sequence[TranslationEntry]) -> int:
        """
        Clear the locale's table, import ``entries`` and return the imported count.
        """

    @abstractmethod
    def commit(self) -> None:
        """
        Persist every replacement made during the run.
        """

    @abstractmethod
    def rollback(self) -> None:
        """
        Discard every uncommitted replacement.
        """


class SQLAlchemyTableMergeSink(TableMergeSink):
    """
    Merge sink over the string table repository and one DB session.

    Replacements are flushed per locale and committed once per run.
    """

    def __init__(self, *, session: Session, collection_name: str, batch_size: int = 1000) -> None:
        self._session = session
        self._collection_name = collection_name
        self._batch_size = max(1, batch_size)
        self._repository = StringTableRepository(session)

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def ensure_available(self) -> None:
        try:
            collection = self._repository.get_collection(self._collection_name)
        except SQLAlchemyError as exc:
            raise MergeSinkUnavailableError(f"String store unavailable: {exc}") from exc
        if collection is None:
            raise MergeSinkUnavailableError(
                f"String table collection '{self._collection_name}' not found."
            )

    def has_table(self, locale: str) -> bool:
        try:
            table = self._repository.get_table(
                collection_name=self._collection_name,
                locale_code=locale,
            )
        except SQLAlchemyError as exc:
            raise MergeSinkUnavailableError(f"String store unavailable: {exc}") from exc
        return table is not None

    def replace_entries(self, locale: str, entries: Sequence[TranslationEntry]) -> int:
        try:
            table = self._repository.get_table(
                collection_name=self._collection_name,
                locale_code=locale,
            )
            if table is None:
                raise MergeSinkUnavailableError(
                    f"String table for '{locale}' not found in '{self._collection_name}'."
                )
            removed = self._repository.clear_table(table)
            inserted = self._repository.bulk_insert_entries(
                table,
                entries,
                batch_size=self._batch_size,
            )
            self._session.flush()
        except SQLAlchemyError as exc:
            raise MergeSinkUnavailableError(
                f"Failed to import strings for '{locale}': {exc}"
            ) from exc

        logger.debug(
            "Replaced string table entries collection=%s locale=%s removed=%s inserted=%s",
            self._collection_name,
            locale,
            removed,
            inserted,
        )
        return inserted

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise MergeSinkUnavailableError(f"Failed to commit string tables: {exc}") from exc

    def rollback(self) -> None:
        try:
            self._session.rollback()
        except SQLAlchemyError as exc:
            raise MergeSinkUnavailableError(f"Failed to roll back string tables: {exc}") from exc
