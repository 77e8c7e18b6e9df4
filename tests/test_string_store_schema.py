"""
tests/test_string_store_schema.py

The ORM schema of the local string store: constraint names follow the
naming convention and UUID / JSON annotations map to dialect-neutral types.
"""

from __future__ import annotations

from sqlalchemy import JSON, UniqueConstraint, Uuid, inspect

from db.base import Base


class TestConstraintNames:
    def test_single_column_unique_constraints_are_named(self) -> None:
        names = {
            table.name: sorted(
                constraint.name
                for constraint in table.constraints
                if isinstance(constraint, UniqueConstraint)
            )
            for table in Base.metadata.sorted_tables
        }

        assert names["string_table_collections"] == ["uq_string_table_collections_name"]
        assert names["app_locales"] == ["uq_app_locales_code"]
        assert names["string_tables"] == ["uq_string_tables_collection_locale"]

    def test_foreign_keys_and_primary_keys_are_named(self) -> None:
        entries = Base.metadata.tables["string_table_entries"]
        tables = Base.metadata.tables["string_tables"]

        assert [fk.name for fk in entries.foreign_key_constraints] == [
            "fk_string_table_entries_table_id_string_tables"
        ]
        assert [fk.name for fk in tables.foreign_key_constraints] == [
            "fk_string_tables_collection_id_string_table_collections"
        ]
        assert entries.primary_key.name == "pk_string_table_entries"

    def test_created_schema_carries_the_names(self, engine) -> None:
        inspector = inspect(engine)

        unique_names = {uc["name"] for uc in inspector.get_unique_constraints("app_locales")}
        assert "uq_app_locales_code" in unique_names


class TestColumnTypes:
    def test_ids_use_uuid_type(self) -> None:
        for name in ("string_table_collections", "string_tables", "string_table_entries", "translation_sync_runs"):
            assert isinstance(Base.metadata.tables[name].c.id.type, Uuid)

        assert isinstance(Base.metadata.tables["string_table_entries"].c.table_id.type, Uuid)

    def test_run_payloads_are_json(self) -> None:
        runs = Base.metadata.tables["translation_sync_runs"]

        assert isinstance(runs.c.request_payload.type, JSON)
        assert isinstance(runs.c.result_payload.type, JSON)
        assert runs.c.request_payload.nullable is True
