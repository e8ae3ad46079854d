"""
Cycle Orchestrator

Runs one recomputation cycle over the watchlist: fetch bars, build the P&F
chart, compare its signature with the one recorded last cycle, alert on
change, and record the new signature.

**Failure isolation:** an instrument whose fetch or chart build fails is
logged and reported, its signature is left untouched, and the remaining
instruments still run.

**Concurrency:** instruments may be processed on a thread pool. The
signature map is guarded by a lock, and each instrument has its own
non-blocking lock so at most one run per instrument is in flight. A request
that arrives while the instrument is still running is skipped rather than
queued; P&F state only needs the latest snapshot.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..point_figure.chart_builder import build_chart
from ..point_figure.events import ChangeEvent, format_alert_message
from ..point_figure.signature import Signature, detect_change
from ..point_figure.types import Chart
from .alert_log import AlertLog
from .config import Instrument, SentinelConfig
from .exceptions import DataUnavailableError, NotificationError
from .signature_store import SignatureStore

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    """Per-instrument result of one cycle."""
    FIRST_SEEN = "first_seen"      # Signature recorded, nothing to compare
    UNCHANGED = "unchanged"        # Same count and terminal type
    CHANGED = "changed"            # Structural change, alert dispatched
    SKIPPED = "skipped"            # Previous run still in flight
    UNAVAILABLE = "unavailable"    # Bar source failed or history too short
    ERROR = "error"                # Unexpected failure while processing

    @property
    def is_failure(self) -> bool:
        return self in (OutcomeStatus.UNAVAILABLE, OutcomeStatus.ERROR)


@dataclass
class InstrumentOutcome:
    """What happened to one instrument during a cycle."""
    symbol: str
    status: OutcomeStatus
    signature: Optional[Signature] = None
    event: Optional[ChangeEvent] = None
    notified: Optional[bool] = None
    error: Optional[str] = None


@dataclass
class CycleReport:
    """Summary of one cycle across the watchlist."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    outcomes: List[InstrumentOutcome] = field(default_factory=list)

    @property
    def events(self) -> List[ChangeEvent]:
        return [o.event for o in self.outcomes if o.event is not None]

    @property
    def failures(self) -> List[InstrumentOutcome]:
        return [o for o in self.outcomes if o.status.is_failure]

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and len(self.failures) == len(self.outcomes)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)


class CycleOrchestrator:
    """
    Drives chart building and change detection for a fixed watchlist.

    The orchestrator exclusively owns the signature map. It is seeded from
    ``signatures`` or, when a store is given, from the store.

    Example:
        >>> orchestrator = CycleOrchestrator(config, KiteBarSource(...), TelegramNotifier(...))
        >>> report = orchestrator.run_cycle()
        >>> [e.symbol for e in report.events]
        ['INFY']
    """

    def __init__(
        self,
        config: SentinelConfig,
        bar_source,
        notifier,
        signatures: Optional[Dict[str, Signature]] = None,
        store: Optional[SignatureStore] = None,
        alert_log: Optional[AlertLog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            config: Validated sentinel configuration.
            bar_source: Object with ``fetch_bars(instrument, interval)``.
            notifier: Object with ``notify(event, message) -> bool``.
            signatures: Initial signature map (overrides the store's contents).
            store: Optional persistence for the signature map.
            alert_log: Feed that receives every change event.
            clock: Returns "now" for event timestamps (default: exchange time).
        """
        self.config = config
        self.bar_source = bar_source
        self.notifier = notifier
        self.store = store
        self.alert_log = alert_log if alert_log is not None else AlertLog()
        self._clock = clock or config.schedule.market_hours.now

        if signatures is not None:
            initial = dict(signatures)
        elif store is not None:
            initial = store.load()
        else:
            initial = {}

        self._signatures: Dict[str, Signature] = initial
        self._charts: Dict[str, Chart] = {}
        self._state_lock = threading.Lock()
        self._instrument_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._last_report: Optional[CycleReport] = None

    @property
    def signatures(self) -> Dict[str, Signature]:
        """Snapshot of the signature map."""
        with self._state_lock:
            return dict(self._signatures)

    @property
    def charts(self) -> Dict[str, Chart]:
        """Latest successfully built chart per symbol."""
        with self._state_lock:
            return dict(self._charts)

    @property
    def last_report(self) -> Optional[CycleReport]:
        return self._last_report

    def get_signature(self, symbol: str) -> Optional[Signature]:
        with self._state_lock:
            return self._signatures.get(symbol)

    def get_chart(self, symbol: str) -> Optional[Chart]:
        with self._state_lock:
            return self._charts.get(symbol)

    def _instrument_lock(self, symbol: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._instrument_locks.get(symbol)
            if lock is None:
                lock = threading.Lock()
                self._instrument_locks[symbol] = lock
            return lock

    def run_cycle(self) -> CycleReport:
        """Process every watchlist instrument once and persist signatures."""
        report = CycleReport(started_at=self._clock())
        watchlist = list(self.config.watchlist)

        if self.config.max_workers > 1 and len(watchlist) > 1:
            workers = min(self.config.max_workers, len(watchlist))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pnf-cycle") as pool:
                report.outcomes = list(pool.map(self.process_instrument, watchlist))
        else:
            report.outcomes = [self.process_instrument(i) for i in watchlist]

        report.finished_at = self._clock()
        self._persist()
        self._last_report = report

        logger.info(
            f"Cycle finished: {len(report.outcomes)} instruments | "
            f"changed: {report.count(OutcomeStatus.CHANGED)}, "
            f"first: {report.count(OutcomeStatus.FIRST_SEEN)}, "
            f"unchanged: {report.count(OutcomeStatus.UNCHANGED)}, "
            f"skipped: {report.count(OutcomeStatus.SKIPPED)}, "
            f"failed: {len(report.failures)}"
        )
        return report

    def process_instrument(self, instrument: Instrument) -> InstrumentOutcome:
        """Run fetch → chart → detect → alert → record for one instrument."""
        symbol = instrument.symbol
        lock = self._instrument_lock(symbol)
        if not lock.acquire(blocking=False):
            logger.info(f"{symbol}: previous run still in flight, skipping")
            return InstrumentOutcome(symbol=symbol, status=OutcomeStatus.SKIPPED)

        try:
            return self._process_locked(instrument)
        finally:
            lock.release()

    def _process_locked(self, instrument: Instrument) -> InstrumentOutcome:
        symbol = instrument.symbol
        interval = self.config.chart.interval

        try:
            bars = self.bar_source.fetch_bars(instrument, interval)
            if len(bars) < self.config.chart.min_bars:
                raise DataUnavailableError(
                    symbol, f"only {len(bars)} bars, need {self.config.chart.min_bars}"
                )
        except DataUnavailableError as e:
            logger.warning(f"Data unavailable for {symbol}: {e.reason}")
            return InstrumentOutcome(symbol=symbol, status=OutcomeStatus.UNAVAILABLE, error=str(e))
        except Exception as e:
            logger.warning(f"Bar source failed for {symbol}: {e}")
            return InstrumentOutcome(symbol=symbol, status=OutcomeStatus.UNAVAILABLE, error=str(e))

        try:
            chart = build_chart(bars, self.config.chart)
            previous = self.get_signature(symbol)
            result = detect_change(previous, chart)
        except Exception as e:
            logger.exception(f"Error processing {symbol}")
            return InstrumentOutcome(symbol=symbol, status=OutcomeStatus.ERROR, error=str(e))

        event = None
        notified = None
        if result.changed:
            event = ChangeEvent.from_chart(symbol, chart, self._clock())
            notified = self._dispatch(event)

        # Recorded even when unchanged so the next cycle compares against the latest state
        with self._state_lock:
            self._signatures[symbol] = result.signature
            self._charts[symbol] = chart

        if previous is None:
            status = OutcomeStatus.FIRST_SEEN
            logger.info(
                f"{symbol}: first observation, {result.signature.count} columns, "
                f"terminal {result.signature.type.value}, box {chart.box_size:.2f}"
            )
        elif result.changed:
            status = OutcomeStatus.CHANGED
        else:
            status = OutcomeStatus.UNCHANGED
            logger.debug(f"{symbol}: unchanged ({result.signature.count} columns)")

        return InstrumentOutcome(
            symbol=symbol,
            status=status,
            signature=result.signature,
            event=event,
            notified=notified,
        )

    def _dispatch(self, event: ChangeEvent) -> bool:
        """Send one alert; delivery failures are logged and never propagate."""
        logger.info(
            f"{event.symbol}: new {event.column_type.value} column "
            f"(#{event.column_count}, box {event.box_size:.2f})"
        )
        message = format_alert_message(event, self.config.chart.interval)

        delivered = False
        try:
            delivered = bool(self.notifier.notify(event, message))
        except NotificationError as e:
            logger.error(f"Failed to deliver alert for {event.symbol}: {e}")
        except Exception:
            logger.exception(f"Notifier raised while alerting {event.symbol}")

        self.alert_log.record(event, delivered=delivered)
        return delivered

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.signatures)
        except OSError as e:
            logger.error(f"Could not save signatures to {self.store.path}: {e}")
