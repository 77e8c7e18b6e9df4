"""create string table collections, tables, entries and app_locales

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "string_table_collections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_string_table_collections"),
        sa.UniqueConstraint("name", name="uq_string_table_collections_name"),
    )

    op.create_table(
        "string_tables",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("collection_id", sa.Uuid(), nullable=False),
        sa.Column(
            "locale_code",
            sa.String(length=35),
            nullable=False,
            comment="Case-sensitive locale identifier, e.g. en, fr, zh-Hans",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["collection_id"],
            ["string_table_collections.id"],
            name="fk_string_tables_collection_id_string_table_collections",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_string_tables"),
        sa.UniqueConstraint("collection_id", "locale_code", name="uq_string_tables_collection_locale"),
    )

    op.create_table(
        "string_table_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("table_id", sa.Uuid(), nullable=False),
        sa.Column("key", sa.String(length=512), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["table_id"],
            ["string_tables.id"],
            name="fk_string_table_entries_table_id_string_tables",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_string_table_entries"),
        sa.UniqueConstraint("table_id", "key", name="uq_string_table_entries_table_key"),
    )
    op.create_index("ix_string_table_entries_table_id", "string_table_entries", ["table_id"], unique=False)

    op.create_table(
        "app_locales",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=35), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_app_locales"),
        sa.UniqueConstraint("code", name="uq_app_locales_code"),
    )


def downgrade() -> None:
    op.drop_table("app_locales")
    op.drop_index("ix_string_table_entries_table_id", table_name="string_table_entries")
    op.drop_table("string_table_entries")
    op.drop_table("string_tables")
    op.drop_table("string_table_collections")
