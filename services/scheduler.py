"""Start-once periodic scheduling for ingestion cycles."""

from __future__ import annotations

import logging
import math
import threading
import time
from enum import Enum
from threading import Lock, RLock
from typing import Callable, Optional

logger = logging.getLogger(__name__)

STOP_JOIN_TIMEOUT = 5.0


class SchedulerState(str, Enum):
    """Lifecycle states of the scheduler."""

    stopped = "stopped"
    running = "running"


class PeriodicTask:
    """Runs ``callback`` every ``interval_ms`` on a dedicated worker thread.

    Cycles never overlap. When a cycle overruns its slot the missed ticks are
    skipped and the next cycle runs at the next slot of the unchanged schedule.
    """

    def __init__(self, callback: Callable[[], object], interval_ms: int, name: str = "periodic-task") -> None:
        self.callback = callback
        self.interval_ms = interval_ms
        self.ticks = 0
        self.skipped_ticks = 0
        self._cancel_event = threading.Event()
        self._cycle_lock = RLock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def start(self) -> None:
        """Fire once on the calling thread, then keep ticking in the background."""
        self._fire()
        self._thread.start()

    def cancel(self) -> None:
        self._cancel_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread and for any cycle still in flight."""
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)
        # the first cycle runs on the thread that called start, not the worker
        if self._cycle_lock.acquire(timeout=-1 if timeout is None else timeout):
            self._cycle_lock.release()

    def _fire(self) -> None:
        with self._cycle_lock:
            if self.cancelled:
                return
            self.ticks += 1
            try:
                self.callback()
            except Exception:
                logger.exception("Periodic cycle failed", extra={"interval_ms": self.interval_ms})

    def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        next_run = time.monotonic() + interval
        while not self._cancel_event.wait(max(0.0, next_run - time.monotonic())):
            self._fire()
            next_run += interval
            now = time.monotonic()
            if now > next_run:
                missed = math.floor((now - next_run) / interval) + 1
                next_run += missed * interval
                self.skipped_ticks += missed
                logger.warning(
                    "Cycle overran its interval, skipping ticks",
                    extra={"interval_ms": self.interval_ms, "skipped_ticks": missed},
                )


class Scheduler:
    """Two-state machine owning at most one active periodic task."""

    def __init__(self, cycle: Callable[[], object], name: str = "ingestion-scheduler") -> None:
        self._cycle = cycle
        self._name = name
        self._state = SchedulerState.stopped
        self._task: Optional[PeriodicTask] = None
        self._lock = Lock()

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return self._state

    @property
    def task(self) -> Optional[PeriodicTask]:
        with self._lock:
            return self._task

    def start(self, interval_ms: int) -> PeriodicTask:
        """Start ticking, or return the active task untouched when already running."""
        with self._lock:
            if self._state is SchedulerState.running and self._task is not None:
                logger.info(
                    "Scheduler already running, ignoring start",
                    extra={"interval_ms": self._task.interval_ms},
                )
                return self._task
            if isinstance(interval_ms, bool) or not isinstance(interval_ms, int) or interval_ms <= 0:
                raise ValueError(
                    f"Interval must be a positive integer of milliseconds, got {interval_ms!r}."
                )
            task = PeriodicTask(self._cycle, interval_ms, name=self._name)
            self._task = task
            self._state = SchedulerState.running

        logger.info("Starting scheduler", extra={"interval_ms": interval_ms})
        task.start()
        return task

    def stop(self) -> None:
        """Cancel future ticks and let an in-flight cycle finish."""
        with self._lock:
            if self._state is SchedulerState.stopped:
                return
            task = self._task
            self._task = None
            self._state = SchedulerState.stopped

        if task is not None:
            task.cancel()
            task.join(STOP_JOIN_TIMEOUT)
        logger.info("Scheduler stopped")
