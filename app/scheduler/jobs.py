"""
app/scheduler/jobs.py

APScheduler-based nightly translation sync.

Schedule (UTC)
--------------
  nightly_translation_sync: TRANSLATION_SYNC_SCHEDULE_HOUR:MINUTE every day,
  registered only when TRANSLATION_SYNC_SCHEDULE_ENABLED is true.

Lifecycle
---------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.

The job runs the polling driver on its own event loop inside the scheduler's
worker; it never shares the API server's loop.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_sync_schedule_settings
from app.services.translation_sync_service import (
    SyncAlreadyRunningError,
    get_translation_sync_service,
)
from db.models.sync_run import SyncRunTrigger
from translation_sync.errors import MissingConfigurationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: Nightly translation sync
# ---------------------------------------------------------------------------


def run_nightly_translation_sync() -> None:
    """
    Mirror every catalog locale from the remote project into the string tables.
    """
    logger.info("Scheduler: nightly_translation_sync starting")

    service = get_translation_sync_service()
    try:
        service.ensure_configured()
    except MissingConfigurationError as exc:
        logger.warning("Scheduler: nightly_translation_sync skipped: %s", exc)
        return

    try:
        summary = service.run_blocking(trigger=SyncRunTrigger.SCHEDULER)
    except SyncAlreadyRunningError as exc:
        logger.warning("Scheduler: nightly_translation_sync skipped: %s", exc)
        return
    except Exception as exc:  # noqa: BLE001
        logger.warning("Scheduler: nightly_translation_sync failed: %s", exc)
        return

    logger.info(
        "Scheduler: nightly_translation_sync complete state=%s succeeded=%s failed=%s skipped=%s",
        summary.state.value,
        len(summary.succeeded),
        len(summary.failed),
        len(summary.skipped),
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register the periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    scheduler = BackgroundScheduler(timezone="UTC")
    schedule = get_sync_schedule_settings()

    if not schedule.enabled:
        logger.info("Scheduler: nightly_translation_sync disabled")
        return scheduler

    scheduler.add_job(
        run_nightly_translation_sync,
        trigger="cron",
        hour=schedule.hour,
        minute=schedule.minute,
        id="nightly_translation_sync",
        name="Nightly translation sync",
        replace_existing=True,
        misfire_grace_time=3600,
        max_instances=1,
        coalesce=True,
    )

    return scheduler
