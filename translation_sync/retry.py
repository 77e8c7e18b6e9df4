"""Retry policy for locale export requests.

Retries only on transport failures. Logical export failures reported by the
service (quota, unknown language) and credential rejections are returned to
the caller on the first attempt. The default policy performs no retry.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from app.connectors.base import TransportError
from app.domain.translation_sync import ExportJob

logger = logging.getLogger(__name__)


class LocaleExporter(Protocol):
    async def export_locale(self, locale: str, project_id: str) -> ExportJob:
        ...


@dataclass(frozen=True)
class ExportRetryPolicy:
    """Attempts = 1 + max_retries; waits grow geometrically between attempts."""

    max_retries: int = 0
    backoff_initial_seconds: float = 1.0
    backoff_multiplier: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Delay after the failed ``attempt`` (1-based)."""
        return max(0.0, self.backoff_initial_seconds) * (
            max(1.0, self.backoff_multiplier) ** (attempt - 1)
        )


async def export_with_retry(
    client: LocaleExporter,
    locale: str,
    project_id: str,
    policy: ExportRetryPolicy,
) -> ExportJob:
    """Request an export, retrying transport failures as the policy allows.

    Raises:
        TransportError: When every attempt failed at the transport level.
        DataError / AuthError: Immediately, without retry.
    """
    total_attempts = 1 + max(0, policy.max_retries)
    attempt = 1

    while True:
        try:
            return await client.export_locale(locale, project_id)
        except TransportError as exc:
            if attempt >= total_attempts:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "Export attempt %d/%d failed locale=%s wait_seconds=%.2f error=%s",
                attempt,
                total_attempts,
                locale,
                delay,
                exc,
            )
            await asyncio.sleep(delay)
            attempt += 1
