"""
tests/test_sink.py

SQLAlchemyTableMergeSink and StringTableRepository against a SQLite store.
"""

from __future__ import annotations

import pytest

from app.domain.translation_sync import TranslationEntry
from translation_sync.errors import MergeSinkUnavailableError
from translation_sync.sink import SQLAlchemyTableMergeSink

from tests.support import read_table, seed_string_tables


def _entries(**pairs: str) -> list[TranslationEntry]:
    return [TranslationEntry(key=key, value=value) for key, value in pairs.items()]


class TestSQLAlchemyTableMergeSink:
    def test_ensure_available_requires_collection(self, db_session) -> None:
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")

        with pytest.raises(MergeSinkUnavailableError, match="'Strings' not found"):
            sink.ensure_available()

    def test_has_table_is_scoped_to_collection(self, db_session) -> None:
        seed_string_tables(db_session, tables={"en": {}})
        seed_string_tables(db_session, collection_name="Glossary", tables={"fr": {}})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")

        sink.ensure_available()
        assert sink.has_table("en") is True
        assert sink.has_table("fr") is False
        assert sink.has_table("EN") is False

    def test_replace_entries_clears_then_imports(self, db_session) -> None:
        seed_string_tables(db_session, tables={"fr": {"old": "vieux", "hello": "salut"}})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings", batch_size=2)

        imported = sink.replace_entries("fr", _entries(hello="Bonjour", bye="Au revoir", yes="Oui"))
        sink.commit()

        assert imported == 3
        assert read_table(db_session, "fr") == {"hello": "Bonjour", "bye": "Au revoir", "yes": "Oui"}

    def test_replace_with_no_entries_empties_table(self, db_session) -> None:
        seed_string_tables(db_session, tables={"fr": {"old": "vieux"}})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")

        assert sink.replace_entries("fr", []) == 0
        sink.commit()

        assert read_table(db_session, "fr") == {}

    def test_rollback_discards_every_replacement(self, db_session) -> None:
        seed_string_tables(db_session, tables={"en": {"a": "A"}, "fr": {"a": "Á"}})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")

        sink.replace_entries("en", _entries(a="changed"))
        sink.replace_entries("fr", _entries(b="nouveau"))
        sink.rollback()

        assert read_table(db_session, "en") == {"a": "A"}
        assert read_table(db_session, "fr") == {"a": "Á"}

    def test_committed_changes_are_visible_to_other_sessions(
        self, db_session, session_factory
    ) -> None:
        seed_string_tables(db_session, tables={"en": {"a": "A"}})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")
        sink.replace_entries("en", _entries(a="B"))
        sink.commit()

        with session_factory() as other:
            assert read_table(other, "en") == {"a": "B"}

    def test_replace_on_missing_table_raises(self, db_session) -> None:
        seed_string_tables(db_session, tables={})
        sink = SQLAlchemyTableMergeSink(session=db_session, collection_name="Strings")

        with pytest.raises(MergeSinkUnavailableError):
            sink.replace_entries("xx", _entries(a="A"))
