"""
Sentinel: scheduled P&F monitoring over a watchlist.

Wires bar sources, the chart core and notifiers into recomputation cycles.
The status API (``api``) and the command line (``main``) are imported
directly from their modules.
"""

from .exceptions import ConfigError, DataUnavailableError, NotificationError, SentinelError
from .market_hours import MarketHours
from .config import DEFAULT_WATCHLIST, Instrument, ScheduleConfig, SentinelConfig, load_watchlist
from .alert_log import AlertLog, AlertRecord
from .signature_store import SignatureStore
from .orchestrator import CycleOrchestrator, CycleReport, InstrumentOutcome, OutcomeStatus
from .scheduler import Scheduler
