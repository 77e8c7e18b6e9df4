"""
tests/support.py

In-memory fakes for the translation client, locale catalog and merge sink,
plus small builders for XLIFF payloads and seeded string tables.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from sqlalchemy.orm import Session

from app.connectors.base import DataError
from app.domain.translation_sync import ExportJob, RemoteProject, TranslationEntry
from db.models.app_locale import AppLocale
from db.repositories.string_table_repository import StringTableRepository
from translation_sync.catalog import LocaleCatalog
from translation_sync.errors import LocaleCatalogUnavailableError, MergeSinkUnavailableError
from translation_sync.sink import TableMergeSink


def xliff_document(units: Mapping[str, str], *, language: str = "fr") -> bytes:
    body = "".join(
        f'<trans-unit id="{escape(key)}" resname="{escape(key)}">'
        f"<source>{escape(key)}</source><target>{escape(value)}</target></trans-unit>"
        for key, value in units.items()
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">'
        f'<file original="Strings" source-language="en" target-language="{language}" datatype="plaintext">'
        f"<body>{body}</body></file></xliff>"
    ).encode("utf-8")


def ok_export(locale: str, project_id: str = "42") -> ExportJob:
    return ExportJob(
        locale=locale,
        project_id=project_id,
        status="ok",
        download_url=f"https://files.example.test/{locale}.xliff",
    )


def failed_export(locale: str, message: str, project_id: str = "42") -> DataError:
    return DataError(
        message,
        export_job=ExportJob(locale=locale, project_id=project_id, status="fail", message=message),
    )


class FakeTranslationClient:
    """
    Scripted stand-in for PoEditorClient.

    ``exports`` maps a locale to an ExportJob, an exception, or a list of those
    consumed one per call. ``files`` maps a download url to bytes or an exception.
    """

    def __init__(
        self,
        *,
        exports: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        projects: Sequence[RemoteProject] = (),
    ) -> None:
        self._exports = {key: copy.copy(value) for key, value in (exports or {}).items()}
        self._files = dict(files or {})
        self._projects = list(projects)
        self.export_calls: list[tuple[str, str]] = []
        self.download_calls: list[tuple[str, str]] = []
        self.closed = False

    async def __aenter__(self) -> "FakeTranslationClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        self.closed = True

    async def list_projects(self) -> list[RemoteProject]:
        return list(self._projects)

    async def export_locale(self, locale: str, project_id: str) -> ExportJob:
        self.export_calls.append((locale, project_id))
        result = self._exports.get(locale)
        if isinstance(result, list):
            result = result.pop(0)
        if result is None:
            raise DataError(f"No export scripted for '{locale}'.")
        if isinstance(result, Exception):
            raise result
        return result

    async def download_file(self, url: str, destination_path: str) -> None:
        self.download_calls.append((url, destination_path))
        content = self._files.get(url)
        if isinstance(content, Exception):
            raise content
        if content is None:
            raise DataError(f"No file scripted for '{url}'.")
        Path(destination_path).write_bytes(content)


class GatedTranslationClient(FakeTranslationClient):
    """
    Holds every export until ``release`` is set; ``export_started`` is set once
    the first export call is waiting.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.export_started = asyncio.Event()
        self.release = asyncio.Event()

    async def export_locale(self, locale: str, project_id: str) -> ExportJob:
        self.export_started.set()
        await self.release.wait()
        return await super().export_locale(locale, project_id)


class FakeLocaleCatalog(LocaleCatalog):
    def __init__(self, codes: Sequence[str] = (), *, error: Exception | None = None) -> None:
        self._codes = list(codes)
        self._error = error
        self.calls = 0

    async def available_locales(self) -> list[str]:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return list(self._codes)


class FakeTableMergeSink(TableMergeSink):
    """
    Dict-backed sink with separate committed and pending views.
    """

    def __init__(
        self,
        tables: Mapping[str, Mapping[str, str]] | None = None,
        *,
        available: bool = True,
        fail_on: Sequence[str] = (),
    ) -> None:
        self.committed: dict[str, dict[str, str]] = {
            locale: dict(entries) for locale, entries in (tables or {}).items()
        }
        self.pending = copy.deepcopy(self.committed)
        self._available = available
        self._fail_on = set(fail_on)
        self.replaced: list[str] = []
        self.commit_count = 0
        self.rollback_count = 0

    def ensure_available(self) -> None:
        if not self._available:
            raise MergeSinkUnavailableError("String table collection 'Strings' not found.")

    def has_table(self, locale: str) -> bool:
        return locale in self.pending

    def replace_entries(self, locale: str, entries: Sequence[TranslationEntry]) -> int:
        if locale in self._fail_on:
            raise MergeSinkUnavailableError(f"Failed to import strings for '{locale}': disk full")
        self.pending[locale] = {entry.key: entry.value for entry in entries}
        self.replaced.append(locale)
        return len(entries)

    def commit(self) -> None:
        self.commit_count += 1
        self.committed = copy.deepcopy(self.pending)

    def rollback(self) -> None:
        self.rollback_count += 1
        self.pending = copy.deepcopy(self.committed)


def unavailable_catalog() -> FakeLocaleCatalog:
    return FakeLocaleCatalog(error=LocaleCatalogUnavailableError("Locale catalog query failed"))


def seed_string_tables(
    session: Session,
    *,
    collection_name: str = "Strings",
    tables: Mapping[str, Mapping[str, str]] | None = None,
    app_locales: Sequence[str] = (),
) -> None:
    repository = StringTableRepository(session)
    collection = repository.create_collection(collection_name)
    for locale, entries in (tables or {}).items():
        table = repository.create_table(collection=collection, locale_code=locale)
        repository.bulk_insert_entries(
            table,
            [TranslationEntry(key=key, value=value) for key, value in entries.items()],
        )
    for position, code in enumerate(app_locales):
        session.add(AppLocale(code=code, name=code, position=position, is_active=True))
    session.commit()


def read_table(session: Session, locale: str, *, collection_name: str = "Strings") -> dict[str, str] | None:
    repository = StringTableRepository(session)
    table = repository.get_table(collection_name=collection_name, locale_code=locale)
    if table is None:
        return None
    return {entry.key: entry.value for entry in repository.list_entries(table)}
