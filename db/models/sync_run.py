"""
db/models/sync_run.py

Audit record for one translation sync run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UuidPrimaryKeyMixin


class SyncRunTrigger:
    CLI = "cli"
    API = "api"
    SCHEDULER = "scheduler"


class SyncRunStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TranslationSyncRun(UuidPrimaryKeyMixin, Base, TimestampMixin):
    __tablename__ = "translation_sync_runs"
    __table_args__ = (
        Index("ix_translation_sync_runs_status", "status"),
        Index("ix_translation_sync_runs_created_at", "created_at"),
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=SyncRunStatus.PENDING,
    )
    trigger: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="cli, api, scheduler",
    )
    request_payload: Mapped[dict[str, Any] | None] = mapped_column(
        nullable=True,
        comment="Project, collection and locale filter of the run",
    )
    result_payload: Mapped[dict[str, Any] | None] = mapped_column(
        nullable=True,
        comment="Serialized SyncSummary",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
