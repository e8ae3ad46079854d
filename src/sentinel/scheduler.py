"""
Cycle Scheduler

Triggers orchestrator cycles on a fixed wall-clock period, gated by the
market-hours predicate. One ungated cycle runs immediately when monitoring
starts; afterwards a tick outside market hours is skipped.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .config import ScheduleConfig
from .orchestrator import CycleOrchestrator, CycleReport

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Background driver for periodic cycles.

    A cycle that is due while the previous one is still running is skipped
    rather than queued.
    """

    def __init__(
        self,
        orchestrator: CycleOrchestrator,
        schedule: Optional[ScheduleConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            orchestrator: Orchestrator whose ``run_cycle`` is called each tick.
            schedule: Period and market hours (defaults to the orchestrator's config).
            clock: Returns "now" for the market-hours check (default: exchange time).
        """
        self.orchestrator = orchestrator
        self.schedule = schedule or orchestrator.config.schedule
        self._clock = clock or self.schedule.market_hours.now

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self.cycles_run = 0
        self.ticks_skipped = 0
        self.last_cycle_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def market_open(self) -> bool:
        return self.schedule.market_hours.is_open(self._clock())

    def start(self) -> None:
        """Start monitoring on a daemon thread.

        Refused while a previous loop is still alive, including one that was
        stopped but has not yet finished its in-flight cycle.
        """
        if self.is_running:
            if self._stop_event.is_set():
                logger.warning("Scheduler still stopping; previous cycle in flight")
            else:
                logger.warning("Scheduler already running")
            return

        # Each loop owns its stop event so a restart cannot revive an old loop
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_event,), name="PnfScheduler")
        self._thread.daemon = True
        self._thread.start()
        logger.info(f"Scheduler started (period {self.schedule.period_seconds:.0f}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop monitoring; an in-flight cycle is allowed to finish.

        If the loop outlives ``timeout`` the thread is kept, so ``is_running``
        stays True until it exits.
        """
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"Scheduler loop still finishing a cycle after {timeout}s")
                return
        self._thread = None
        logger.info("Scheduler stopped")

    def run_forever(self) -> None:
        """Run the loop on the calling thread until ``stop()`` is called."""
        self._stop_event = threading.Event()
        self._loop(self._stop_event)

    def trigger(self) -> Optional[CycleReport]:
        """
        Run one cycle now, regardless of market hours.

        Returns:
            The cycle report, or None if a cycle was already running.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.info("Cycle already in progress, skipping trigger")
            return None
        try:
            report = self.orchestrator.run_cycle()
            self.cycles_run += 1
            self.last_cycle_at = report.finished_at
            return report
        finally:
            self._cycle_lock.release()

    def tick(self) -> Optional[CycleReport]:
        """One scheduled tick: run a cycle only while the market is open."""
        if not self.market_open():
            self.ticks_skipped += 1
            logger.debug("Market closed, skipping scheduled cycle")
            return None
        return self.trigger()

    def _loop(self, stop_event: threading.Event) -> None:
        if self.schedule.run_on_start:
            self._safe(self.trigger)

        while not stop_event.wait(self.schedule.period_seconds):
            self._safe(self.tick)

    def _safe(self, step: Callable[[], Optional[CycleReport]]) -> None:
        # The loop must survive a failed cycle; the next tick retries
        try:
            step()
        except Exception:
            logger.exception("Scheduled cycle failed")
