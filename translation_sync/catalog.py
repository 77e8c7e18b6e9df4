"""
translation_sync/catalog.py

Locale catalog providers: the ordered set of locales the host application
declares as available. The pipeline only reads them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.repositories.string_table_repository import StringTableRepository
from translation_sync.errors import LocaleCatalogUnavailableError

logger = logging.getLogger(__name__)


class LocaleCatalog(ABC):
    """
    Source of the locale codes a sync run must mirror, in catalog order.
    """

    @abstractmethod
    async def available_locales(self) -> list[str]:
        """
        Return the catalog, suspending until the provider is ready.

        Raises LocaleCatalogUnavailableError when the catalog cannot be obtained.
        """


class StaticLocaleCatalog(LocaleCatalog):
    """
    Catalog fixed at construction, e.g. from TRANSLATION_SYNC_LOCALES.
    """

    def __init__(self, codes: Sequence[str]) -> None:
        self._codes = [code for code in codes if code]

    async def available_locales(self) -> list[str]:
        return list(self._codes)


class DeferredLocaleCatalog(LocaleCatalog):
    """
    Catalog produced by the host's own async initialization.
    """

    def __init__(self, loader: Callable[[], Awaitable[Sequence[str]]]) -> None:
        self._loader = loader

    async def available_locales(self) -> list[str]:
        try:
            codes = await self._loader()
        except LocaleCatalogUnavailableError:
            raise
        except Exception as exc:
            raise LocaleCatalogUnavailableError(f"Locale catalog initialization failed: {exc}") from exc
        return [code for code in codes if code]


class DatabaseLocaleCatalog(LocaleCatalog):
    """
    Active rows of the ``app_locales`` table ordered by position.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    async def available_locales(self) -> list[str]:
        try:
            codes = StringTableRepository(self._session).list_active_locale_codes()
        except SQLAlchemyError as exc:
            logger.error("Locale catalog query failed error=%s", exc)
            raise LocaleCatalogUnavailableError(f"Locale catalog query failed: {exc}") from exc

        if not codes:
            logger.warning("Locale catalog table is empty; nothing will be synchronized.")
        return codes
