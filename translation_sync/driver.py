"""
translation_sync/driver.py

Cooperative execution drivers for TranslationSyncOrchestrator.

Both drivers advance the same state machine one transition at a time and
never create threads:

  HostLoopDriver: runs inside a host's existing asyncio loop. The host calls
      ``tick()`` once per frame, or ``attach()`` lets the loop schedule ticks
      itself (used by the API server).
  PollingDriver: for unattended hosts. Advances, sleeps a short interval and
      repeats until the run is terminal.

Any exception escaping a step, cancellation included, faults the run and stops
the driver; nothing is retried at this level.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from app.domain.translation_sync import SyncSummary
from translation_sync.errors import SyncFaultedError
from translation_sync.orchestrator import TranslationSyncOrchestrator

logger = logging.getLogger(__name__)

FinishedCallback = Callable[[SyncSummary], None]


class HostLoopDriver:
    """
    Advance an orchestrator from the host's event loop, one step per tick.
    """

    def __init__(
        self,
        orchestrator: TranslationSyncOrchestrator,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        on_finished: FinishedCallback | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._loop = loop
        self._on_finished = on_finished
        self._task: asyncio.Task | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._finished: asyncio.Event | None = None
        self._notified = False

    @property
    def orchestrator(self) -> TranslationSyncOrchestrator:
        return self._orchestrator

    @property
    def summary(self) -> SyncSummary | None:
        return self._orchestrator.summary

    @property
    def active(self) -> bool:
        return not self._orchestrator.state.is_terminal or self._task is not None

    def tick(self) -> bool:
        """
        Harvest the previous step and schedule the next one.

        Must be called from the thread running the host loop. Returns True
        while the run is still active.
        """

        loop = self._resolve_loop()
        if self._task is not None:
            if not self._task.done():
                return True
            self._harvest(self._task)
            self._task = None

        if self._orchestrator.state.is_terminal:
            self._notify_finished()
            return False

        self._task = loop.create_task(self._orchestrator.advance())
        return True

    def attach(self, interval_seconds: float = 0.05) -> None:
        """
        Let the host loop call ``tick()`` every ``interval_seconds`` until done.
        """

        loop = self._resolve_loop()
        interval = max(0.0, interval_seconds)

        def _scheduled_tick() -> None:
            self._timer = None
            if self.tick():
                self._timer = loop.call_later(interval, _scheduled_tick)

        self._timer = loop.call_soon(_scheduled_tick)

    def detach(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> SyncSummary | None:
        """
        Suspend until the run reaches a terminal state and return its summary.
        """

        await self._finished_event().wait()
        return self._orchestrator.summary

    def _harvest(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._orchestrator.fault(asyncio.CancelledError("advance step was cancelled"))
            return
        exc = task.exception()
        if exc is None:
            return
        if isinstance(exc, SyncFaultedError):
            logger.error("Translation sync faulted run_id=%s: %s", self._orchestrator.run_id, exc)
            return
        logger.error(
            "Unhandled error in translation sync step run_id=%s",
            self._orchestrator.run_id,
            exc_info=exc,
        )
        self._orchestrator.fault(exc)

    def _notify_finished(self) -> None:
        if self._notified:
            return
        self._notified = True
        self._finished_event().set()
        summary = self._orchestrator.summary
        if self._on_finished is not None and summary is not None:
            self._on_finished(summary)

    def _finished_event(self) -> asyncio.Event:
        if self._finished is None:
            self._finished = asyncio.Event()
        return self._finished

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop


class PollingDriver:
    """
    Drive an orchestrator to completion by advancing and sleeping in turn.
    """

    def __init__(
        self,
        orchestrator: TranslationSyncOrchestrator,
        *,
        poll_interval_seconds: float = 0.1,
        on_finished: FinishedCallback | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._poll_interval_seconds = max(0.0, poll_interval_seconds)
        self._on_finished = on_finished

    @property
    def orchestrator(self) -> TranslationSyncOrchestrator:
        return self._orchestrator

    def run(self) -> SyncSummary:
        """
        Run to completion on a fresh event loop. Not callable from inside a running loop.
        """

        return asyncio.run(self.run_async())

    async def run_async(self) -> SyncSummary:
        orchestrator = self._orchestrator
        while not orchestrator.state.is_terminal:
            try:
                await orchestrator.advance()
                if not orchestrator.state.is_terminal:
                    await asyncio.sleep(self._poll_interval_seconds)
            except SyncFaultedError as exc:
                logger.error("Translation sync faulted run_id=%s: %s", orchestrator.run_id, exc)
                break
            except asyncio.CancelledError as exc:
                orchestrator.fault(exc)
                raise
            except Exception as exc:
                logger.exception("Unhandled error in translation sync step run_id=%s", orchestrator.run_id)
                orchestrator.fault(exc)
                break

        summary = orchestrator.summary
        if summary is None:
            raise RuntimeError("Translation sync stopped without a summary.")
        if self._on_finished is not None:
            self._on_finished(summary)
        return summary
