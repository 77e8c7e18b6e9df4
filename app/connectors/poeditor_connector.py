"""
app/connectors/poeditor_connector.py

Client for the POEditor translation management API.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from app.config import ExternalHTTPSettings, PoEditorSettings
from app.connectors.base import AuthError, BaseAsyncConnector, DataError
from app.domain.translation_sync import ExportJob, RemoteProject
from app.schemas.poeditor import (
    PoEditorExportEnvelope,
    PoEditorProjectListEnvelope,
    PoEditorResponseStatus,
)

logger = logging.getLogger(__name__)

_EnvelopeT = TypeVar("_EnvelopeT", bound=BaseModel)

_AUTH_CODE_PREFIXES = ("401", "403")


class PoEditorClient(BaseAsyncConnector):
    """
    Stateless wrapper over the three remote operations the sync pipeline needs:
    list projects, export a locale, download the exported file.
    """

    def __init__(
        self,
        *,
        settings: PoEditorSettings,
        http_settings: ExternalHTTPSettings,
        session: aiohttp.ClientSession | None = None,
        api_key: str | None = None,
    ) -> None:
        super().__init__(source="poeditor", http_settings=http_settings, session=session)
        self._api_key = api_key if api_key is not None else settings.api_key
        self._base_url = settings.base_url.rstrip("/")
        self._export_type = settings.export_type

    async def list_projects(self) -> list[RemoteProject]:
        payload = await self._post_form_json(
            url=f"{self._base_url}/projects/list",
            data={"api_token": self._require_api_key()},
        )
        envelope = self._parse(PoEditorProjectListEnvelope, payload)
        self._raise_for_status(envelope.response)
        if envelope.result is None:
            raise DataError(f"{self.source}: project list response has no result.")

        return [RemoteProject(id=item.id, name=item.name) for item in envelope.result.projects]

    async def export_locale(self, locale: str, project_id: str) -> ExportJob:
        """
        Request a server-side export of one locale in the configured interchange format.

        Raises DataError, carrying the failed ExportJob, when the service answers
        with ``status == "fail"``; the server message is kept verbatim.
        """

        payload = await self._post_form_json(
            url=f"{self._base_url}/projects/export",
            data={
                "api_token": self._require_api_key(),
                "id": project_id,
                "language": locale,
                "type": self._export_type,
            },
        )
        envelope = self._parse(PoEditorExportEnvelope, payload)

        if envelope.response.failed:
            message = envelope.response.message
            if _is_auth_code(envelope.response.code):
                raise AuthError(message)
            raise DataError(
                message,
                export_job=ExportJob(
                    locale=locale,
                    project_id=project_id,
                    status="fail",
                    message=message,
                ),
            )
        if envelope.result is None:
            raise DataError(f"{self.source}: export response for '{locale}' has no download url.")

        return ExportJob(
            locale=locale,
            project_id=project_id,
            status="ok",
            download_url=envelope.result.url,
        )

    async def download_file(self, url: str, destination_path: str) -> None:
        written = await self._download_to_path(url=url, destination=destination_path)
        logger.debug("Downloaded export path=%s bytes=%s", destination_path, written)

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise AuthError(f"{self.source}: no API key configured.")
        return self._api_key

    def _parse(self, model: type[_EnvelopeT], payload: Any) -> _EnvelopeT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DataError(f"{self.source}: unexpected response shape: {exc}") from exc

    def _raise_for_status(self, response: PoEditorResponseStatus) -> None:
        if not response.failed:
            return
        if _is_auth_code(response.code):
            raise AuthError(response.message)
        raise DataError(response.message)


def _is_auth_code(code: str) -> bool:
    return code.startswith(_AUTH_CODE_PREFIXES)
