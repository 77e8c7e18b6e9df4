"""create translation_sync_runs table

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "translation_sync_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("trigger", sa.String(length=32), nullable=False, comment="cli, api, scheduler"),
        sa.Column(
            "request_payload",
            sa.JSON(),
            nullable=True,
            comment="Project, collection and locale filter of the run",
        ),
        sa.Column("result_payload", sa.JSON(), nullable=True, comment="Serialized SyncSummary"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_translation_sync_runs"),
    )
    op.create_index("ix_translation_sync_runs_created_at", "translation_sync_runs", ["created_at"], unique=False)
    op.create_index("ix_translation_sync_runs_status", "translation_sync_runs", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_translation_sync_runs_status", table_name="translation_sync_runs")
    op.drop_index("ix_translation_sync_runs_created_at", table_name="translation_sync_runs")
    op.drop_table("translation_sync_runs")
