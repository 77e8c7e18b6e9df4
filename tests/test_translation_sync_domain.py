from __future__ import annotations

import pytest

from app.domain.translation_sync import (
    LocaleDownloadOutcome,
    LocaleSyncStatus,
    SyncState,
    SyncSummary,
)


class TestLocaleDownloadOutcome:
    def test_success_carries_path_only(self) -> None:
        outcome = LocaleDownloadOutcome.succeeded("en", "/tmp/file-en.xliff")
        assert outcome.success is True
        assert outcome.error_message is None

    def test_failure_carries_message_only(self) -> None:
        outcome = LocaleDownloadOutcome.failed("fr", "quota exceeded")
        assert outcome.temp_path is None
        assert outcome.error_message == "quota exceeded"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"success": True, "temp_path": None},
            {"success": True, "temp_path": "/tmp/x", "error_message": "oops"},
            {"success": False, "error_message": ""},
            {"success": False, "temp_path": "/tmp/x", "error_message": "oops"},
        ],
    )
    def test_inconsistent_outcomes_are_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError):
            LocaleDownloadOutcome(locale="en", **kwargs)

    def test_is_frozen(self) -> None:
        outcome = LocaleDownloadOutcome.failed("fr", "quota exceeded")
        with pytest.raises((AttributeError, TypeError)):
            outcome.success = True  # type: ignore[misc]


class TestSyncSummary:
    def test_status_for_distinguishes_skip_from_success(self) -> None:
        summary = SyncSummary(
            run_id="r",
            state=SyncState.DONE,
            outcomes=(
                LocaleDownloadOutcome.succeeded("en", "/tmp/a"),
                LocaleDownloadOutcome.succeeded("ja", "/tmp/b"),
                LocaleDownloadOutcome.failed("fr", "boom"),
            ),
            skipped_locales=frozenset({"ja"}),
        )

        assert summary.status_for("en") is LocaleSyncStatus.SUCCESS
        assert summary.status_for("ja") is LocaleSyncStatus.SKIPPED
        assert summary.status_for("fr") is LocaleSyncStatus.FAILURE

    def test_status_for_unknown_locale_raises(self) -> None:
        with pytest.raises(KeyError):
            SyncSummary(run_id="r", state=SyncState.DONE).status_for("de")

    def test_terminal_states(self) -> None:
        assert SyncState.DONE.is_terminal and SyncState.FAULTED.is_terminal
        assert not SyncState.PER_LOCALE.is_terminal
