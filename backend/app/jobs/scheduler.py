"""LifecycleScheduler: runs the completion and auto-reject sweeps in-process.

Runs as asyncio tasks alongside request handling (no worker pool). Each sweep
kind has its own lock: a trigger that finds a sweep of the same kind still
running is skipped, so overlapping ticks never stack up.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import structlog

from app.core.config import Settings, get_settings
from app.db.event_store import EventStore
from app.jobs.sweeps import SweepKind, SweepResult, run_auto_reject_sweep, run_completion_sweep
from app.services.transition_service import TransitionExecutor

logger = structlog.get_logger(__name__)

# Grace period for an in-flight sweep on shutdown before its task is cancelled
_STOP_TIMEOUT = 30


class LifecycleScheduler:
    """Owns the periodic sweep tasks.

    Usage:
        scheduler = LifecycleScheduler(executor, store)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        executor: TransitionExecutor,
        store: EventStore,
        settings: Settings | None = None,
    ) -> None:
        self.executor = executor
        self.store = store
        self.settings = settings or get_settings()
        self.last_results: dict[SweepKind, SweepResult] = {}
        self._locks = {kind: asyncio.Lock() for kind in SweepKind}
        self._stopping = asyncio.Event()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def interval(self, kind: SweepKind) -> int:
        if kind == SweepKind.COMPLETION:
            return self.settings.completion_sweep_interval_seconds
        return self.settings.auto_reject_sweep_interval_seconds

    def is_sweeping(self, kind: SweepKind) -> bool:
        return self._locks[kind].locked()

    async def trigger(self, kind: SweepKind, now: datetime | None = None) -> SweepResult | None:
        """Run one sweep of `kind` now.

        Returns:
            The SweepResult, or None if a sweep of the same kind was already running.
        """
        lock = self._locks[kind]
        if lock.locked():
            logger.info("sweep_already_running", sweep=kind.value)
            return None

        async with lock:
            if kind == SweepKind.COMPLETION:
                result = await run_completion_sweep(self.executor, self.store, now=now)
            else:
                window = timedelta(minutes=self.settings.auto_reject_window_minutes)
                result = await run_auto_reject_sweep(self.executor, self.store, now=now, window=window)

        self.last_results[kind] = result
        return result

    async def _run_periodically(self, kind: SweepKind) -> None:
        interval = self.interval(kind)
        log = logger.bind(sweep=kind.value, interval_seconds=interval)
        log.info("sweep_loop_started")

        run_now = self.settings.run_sweeps_on_startup
        while not self._stopping.is_set():
            if run_now:
                try:
                    await self.trigger(kind)
                except Exception as exc:
                    log.error("sweep_loop_iteration_failed", error=str(exc), error_type=type(exc).__name__, exc_info=True)
            run_now = True

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

        log.info("sweep_loop_stopped")

    def start(self) -> None:
        """Start one background task per sweep kind. No-op if already running."""
        if self.running:
            return
        self._stopping.clear()
        self._tasks = [
            asyncio.create_task(self._run_periodically(kind), name=f"lifecycle-sweep-{kind.value}")
            for kind in SweepKind
        ]
        logger.info("lifecycle_scheduler_started")

    async def stop(self) -> None:
        """Signal the loops to exit, letting an in-flight sweep finish."""
        if not self._tasks:
            return
        self._stopping.set()
        done, pending = await asyncio.wait(self._tasks, timeout=_STOP_TIMEOUT)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks = []
        logger.info("lifecycle_scheduler_stopped", cancelled=len(pending))
