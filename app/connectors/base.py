"""
app/connectors/base.py

Base async connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any

import aiofiles
import aiohttp

from app.config import ExternalHTTPSettings

logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = {401, 403}
_DOWNLOAD_CHUNK_SIZE = 64 * 1024


class RemoteServiceError(RuntimeError):
    """
    Base class for every failure reported by a remote connector.
    """


class TransportError(RemoteServiceError):
    """
    Raised when the remote service cannot be reached or answers with an HTTP error.
    """


class AuthError(RemoteServiceError):
    """
    Raised when the remote service rejects the configured credential.
    """


class DataError(RemoteServiceError):
    """
    Raised when the call succeeded at the HTTP level but the service reports a
    logical failure or returns a payload that does not match the envelope.
    """

    def __init__(self, message: str, *, export_job: Any | None = None) -> None:
        super().__init__(message)
        self.export_job = export_job


class BaseAsyncConnector:
    """
    Holds one aiohttp session and maps transport failures onto the connector
    error hierarchy. Performs no retries.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.source = source
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=http_settings.timeout_seconds)

    async def __aenter__(self) -> "BaseAsyncConnector":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        # Created lazily so the session binds to the loop that drives the run.
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _post_form_json(self, *, url: str, data: dict[str, str]) -> Any:
        """
        POST a form-encoded body and return the parsed JSON response.
        """

        session = self._get_session()
        try:
            async with session.post(url, data=data, timeout=self._timeout) as response:
                if response.status in AUTH_STATUS_CODES:
                    raise AuthError(
                        f"{self.source}: request rejected with HTTP {response.status}."
                    )
                if response.status >= 400:
                    raise TransportError(
                        f"{self.source}: request failed with HTTP {response.status}."
                    )
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Connector request failed source=%s url=%s error=%s", self.source, url, exc)
            raise TransportError(f"{self.source}: request failed: {exc}") from exc

        try:
            return json.loads(body)
        except ValueError as exc:
            raise TransportError(f"{self.source}: response was not valid JSON.") from exc

    async def _download_to_path(self, *, url: str, destination: str) -> int:
        """
        Stream a remote file to ``destination`` and return the number of bytes written.

        A partially written destination is removed before the error propagates.
        """

        session = self._get_session()
        written = 0
        try:
            async with session.get(url, timeout=self._timeout) as response:
                if response.status >= 400:
                    raise TransportError(
                        f"{self.source}: download failed with HTTP {response.status}."
                    )
                async with aiofiles.open(destination, "wb") as handle:
                    async for chunk in response.content.iter_chunked(_DOWNLOAD_CHUNK_SIZE):
                        await handle.write(chunk)
                        written += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _remove_partial_file(destination)
            raise TransportError(f"{self.source}: download failed: {exc}") from exc
        except OSError:
            _remove_partial_file(destination)
            raise
        return written


def _remove_partial_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not remove partial download path=%s error=%s", path, exc)
