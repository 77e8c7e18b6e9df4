from __future__ import annotations

import pytest

from app.connectors.base import AuthError, DataError, TransportError
from translation_sync import retry as retry_module
from translation_sync.retry import ExportRetryPolicy, export_with_retry

from tests.support import FakeTranslationClient, failed_export, ok_export


@pytest.fixture()
def sleeps(monkeypatch) -> list[float]:
    recorded: list[float] = []

    async def fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


class TestExportRetryPolicy:
    def test_default_policy_does_not_retry(self) -> None:
        assert ExportRetryPolicy().max_retries == 0

    def test_delays_grow_geometrically(self) -> None:
        policy = ExportRetryPolicy(max_retries=3, backoff_initial_seconds=0.5, backoff_multiplier=3.0)
        assert [policy.delay_for(attempt) for attempt in (1, 2, 3)] == [0.5, 1.5, 4.5]


class TestExportWithRetry:
    @pytest.mark.asyncio
    async def test_default_policy_raises_first_transport_error(self, sleeps) -> None:
        client = FakeTranslationClient(exports={"en": [TransportError("timeout"), ok_export("en")]})

        with pytest.raises(TransportError):
            await export_with_retry(client, "en", "42", ExportRetryPolicy())

        assert len(client.export_calls) == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_retries_transport_errors_until_success(self, sleeps) -> None:
        client = FakeTranslationClient(
            exports={"en": [TransportError("timeout"), TransportError("reset"), ok_export("en")]}
        )
        policy = ExportRetryPolicy(max_retries=2, backoff_initial_seconds=1.0, backoff_multiplier=2.0)

        job = await export_with_retry(client, "en", "42", policy)

        assert job.ok
        assert sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, sleeps) -> None:
        client = FakeTranslationClient(exports={"en": [TransportError("down")] * 3})

        with pytest.raises(TransportError, match="down"):
            await export_with_retry(client, "en", "42", ExportRetryPolicy(max_retries=2))

        assert len(client.export_calls) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [failed_export("fr", "quota exceeded"), AuthError("Invalid API Token")],
    )
    async def test_logical_failures_are_never_retried(self, sleeps, error: Exception) -> None:
        client = FakeTranslationClient(exports={"fr": [error, ok_export("fr")]})

        with pytest.raises((DataError, AuthError)):
            await export_with_retry(client, "fr", "42", ExportRetryPolicy(max_retries=5))

        assert len(client.export_calls) == 1
        assert sleeps == []
