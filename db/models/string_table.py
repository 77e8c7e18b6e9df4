"""
db/models/string_table.py

Per-locale string tables grouped into named collections.

A collection (e.g. "Strings") owns one table per locale code; each table owns
its key/value entries. The translation sync replaces the entries of one table
at a time and never touches the collection or table rows themselves.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UuidPrimaryKeyMixin


class StringTableCollection(UuidPrimaryKeyMixin, Base, TimestampMixin):
    __tablename__ = "string_table_collections"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    tables: Mapped[list["StringTable"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
    )


class StringTable(UuidPrimaryKeyMixin, Base, TimestampMixin):
    __tablename__ = "string_tables"
    __table_args__ = (
        UniqueConstraint("collection_id", "locale_code", name="uq_string_tables_collection_locale"),
    )

    collection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("string_table_collections.id", ondelete="CASCADE"),
        nullable=False,
    )
    locale_code: Mapped[str] = mapped_column(
        String(35),
        nullable=False,
        comment="Case-sensitive locale identifier, e.g. en, fr, zh-Hans",
    )

    collection: Mapped[StringTableCollection] = relationship(back_populates="tables")
    entries: Mapped[list["StringTableEntry"]] = relationship(
        back_populates="table",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class StringTableEntry(UuidPrimaryKeyMixin, Base):
    __tablename__ = "string_table_entries"
    __table_args__ = (
        UniqueConstraint("table_id", "key", name="uq_string_table_entries_table_key"),
        Index("ix_string_table_entries_table_id", "table_id"),
    )

    table_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("string_tables.id", ondelete="CASCADE"),
        nullable=False,
    )
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    table: Mapped[StringTable] = relationship(back_populates="entries")
