"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_csv_env(name: str) -> tuple[str, ...]:
    """
    Read a comma-separated list, keeping order and dropping empty items.
    """

    raw = _get_optional_str_env(name)
    if raw is None:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PoEditorSettings:
    """
    Translation management service connector settings.
    """

    api_key: str | None = None
    project_id: str | None = None
    base_url: str = "https://api.poeditor.com/v2"
    export_type: str = "xliff_1_2"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.project_id)


@dataclass(frozen=True)
class TranslationSyncSettings:
    """
    Runtime settings for the bulk synchronization pipeline.
    """

    table_collection: str = "Strings"
    locales: tuple[str, ...] = ()
    poll_interval_seconds: float = 0.1
    tick_interval_seconds: float = 0.05
    temp_dir: str | None = None
    export_max_retries: int = 0
    export_backoff_initial_seconds: float = 1.0
    export_backoff_multiplier: float = 2.0
    storage_batch_size: int = 1000


@dataclass(frozen=True)
class SyncScheduleSettings:
    """
    Unattended nightly sync schedule (UTC).
    """

    enabled: bool = False
    hour: int = 4
    minute: int = 0


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_poeditor_settings() -> PoEditorSettings:
    """
    Return translation service connector settings from environment variables.
    """

    return PoEditorSettings(
        api_key=_get_optional_str_env("POEDITOR_API_KEY"),
        project_id=_get_optional_str_env("POEDITOR_PROJECT_ID"),
        base_url=_get_str_env("POEDITOR_BASE_URL", "https://api.poeditor.com/v2"),
        export_type=_get_str_env("POEDITOR_EXPORT_TYPE", "xliff_1_2"),
    )


@lru_cache(maxsize=1)
def get_translation_sync_settings() -> TranslationSyncSettings:
    """
    Return synchronization pipeline settings from environment variables.
    """

    return TranslationSyncSettings(
        table_collection=_get_str_env("TRANSLATION_SYNC_TABLE_COLLECTION", "Strings"),
        locales=_get_csv_env("TRANSLATION_SYNC_LOCALES"),
        poll_interval_seconds=max(
            0.01, _get_float_env("TRANSLATION_SYNC_POLL_INTERVAL_SECONDS", 0.1)
        ),
        tick_interval_seconds=max(
            0.01, _get_float_env("TRANSLATION_SYNC_TICK_INTERVAL_SECONDS", 0.05)
        ),
        temp_dir=_get_optional_str_env("TRANSLATION_SYNC_TEMP_DIR"),
        export_max_retries=max(0, _get_int_env("TRANSLATION_SYNC_EXPORT_MAX_RETRIES", 0)),
        export_backoff_initial_seconds=max(
            0.0, _get_float_env("TRANSLATION_SYNC_EXPORT_BACKOFF_INITIAL_SECONDS", 1.0)
        ),
        export_backoff_multiplier=max(
            1.0, _get_float_env("TRANSLATION_SYNC_EXPORT_BACKOFF_MULTIPLIER", 2.0)
        ),
        storage_batch_size=max(1, _get_int_env("TRANSLATION_SYNC_STORAGE_BATCH_SIZE", 1000)),
    )


@lru_cache(maxsize=1)
def get_sync_schedule_settings() -> SyncScheduleSettings:
    """
    Return nightly sync schedule settings from environment variables.
    """

    return SyncScheduleSettings(
        enabled=_get_bool_env("TRANSLATION_SYNC_SCHEDULE_ENABLED", False),
        hour=min(23, max(0, _get_int_env("TRANSLATION_SYNC_SCHEDULE_HOUR", 4))),
        minute=min(59, max(0, _get_int_env("TRANSLATION_SYNC_SCHEDULE_MINUTE", 0))),
    )
