"""
translation_sync/errors.py

Exceptions raised by the synchronization pipeline.
"""

from __future__ import annotations


class TranslationSyncError(Exception):
    """Base exception for synchronization pipeline failures."""


class MissingConfigurationError(TranslationSyncError):
    """Raised when the credential or project identifier is absent."""


class LocaleCatalogUnavailableError(TranslationSyncError):
    """Raised when the host's locale catalog cannot be obtained."""


class MergeSinkUnavailableError(TranslationSyncError):
    """Raised when the target table collection is missing or storage fails."""


class InterchangeFormatError(TranslationSyncError):
    """Raised when a downloaded translation file cannot be parsed."""


class SyncFaultedError(TranslationSyncError):
    """Raised out of an advance step when the run moved to the faulted state."""
