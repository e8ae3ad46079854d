"""
Sentinel Configuration

Watchlist, schedule and credentials for the monitoring loop. Everything is
validated once at startup; an invalid value raises ConfigError and the
process exits instead of building corrupt charts.

Environment variables (all optional):
    KITE_API_KEY, KITE_ACCESS_TOKEN      bar source credentials
    TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID notifier credentials
    PNF_ATR_LENGTH, PNF_REVERSAL, PNF_INTERVAL
    PNF_PERIOD_SECONDS                   cycle period (default 1800)
    PNF_HISTORY_DAYS                     bar look-back window in days
    PNF_MAX_WORKERS                      instruments processed in parallel
    PNF_SIGNATURE_FILE                   JSON file for signature persistence
    PNF_MARKET_OPEN, PNF_MARKET_CLOSE    HH:MM, exchange time
    PNF_MARKET_TIMEZONE                  IANA name (default Asia/Kolkata)
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from ..point_figure.chart_config import ChartConfig
from .exceptions import ConfigError
from .market_hours import MarketHours, parse_time_of_day

logger = logging.getLogger(__name__)


DEFAULT_PERIOD_SECONDS = 30 * 60
DEFAULT_HISTORY_DAYS = 10
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class Instrument:
    """A watchlist entry: trading symbol plus exchange metadata."""
    symbol: str
    instrument_token: int
    exchange: str = "NSE"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Instrument":
        symbol = data.get("symbol") or data.get("tradingsymbol")
        if not symbol:
            raise ConfigError(f"Watchlist entry missing symbol: {dict(data)}")
        try:
            token = int(data["instrument_token"])
        except (KeyError, TypeError, ValueError):
            raise ConfigError(f"Watchlist entry '{symbol}' has no valid instrument_token")
        return cls(symbol=symbol, instrument_token=token, exchange=data.get("exchange", "NSE"))


DEFAULT_WATCHLIST: Tuple[Instrument, ...] = (
    Instrument("NIFTY 50", 256265, "NSE"),
    Instrument("NIFTY BANK", 260105, "NSE"),
    Instrument("RELIANCE", 738561, "NSE"),
    Instrument("HDFCBANK", 341249, "NSE"),
    Instrument("ICICIBANK", 1270529, "NSE"),
    Instrument("INFY", 408065, "NSE"),
    Instrument("TCS", 2953213, "NSE"),
    Instrument("ITC", 424961, "NSE"),
)


@dataclass(frozen=True)
class ScheduleConfig:
    """
    When cycles run.

    Attributes:
        period_seconds: Wall-clock period between scheduled cycles.
        market_hours: Session predicate gating scheduled cycles.
        run_on_start: Run one ungated cycle as soon as monitoring starts.
    """
    period_seconds: float = DEFAULT_PERIOD_SECONDS
    market_hours: MarketHours = field(default_factory=MarketHours)
    run_on_start: bool = True

    def validate(self) -> None:
        if self.period_seconds <= 0:
            raise ConfigError(f"period_seconds must be positive, got {self.period_seconds}")
        self.market_hours.validate()


@dataclass(frozen=True)
class SentinelConfig:
    """
    Complete runtime configuration.

    Example:
        >>> config = SentinelConfig.from_env()
        >>> config.validate()
        >>> config.chart.reversal
        3
    """
    chart: ChartConfig = field(default_factory=ChartConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    watchlist: Tuple[Instrument, ...] = DEFAULT_WATCHLIST
    kite_api_key: str = ""
    kite_access_token: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    history_days: int = DEFAULT_HISTORY_DAYS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_workers: int = 1
    signature_file: Optional[str] = None

    @classmethod
    def default(cls) -> "SentinelConfig":
        return cls()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SentinelConfig":
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        chart = ChartConfig(
            atr_length=_env_int(env, "PNF_ATR_LENGTH", ChartConfig.atr_length),
            reversal=_env_int(env, "PNF_REVERSAL", ChartConfig.reversal),
            interval=env.get("PNF_INTERVAL", ChartConfig.interval),
        )

        market_hours = MarketHours()
        if env.get("PNF_MARKET_OPEN"):
            market_hours = replace(market_hours, start=parse_time_of_day(env["PNF_MARKET_OPEN"]))
        if env.get("PNF_MARKET_CLOSE"):
            market_hours = replace(market_hours, end=parse_time_of_day(env["PNF_MARKET_CLOSE"]))
        if env.get("PNF_MARKET_TIMEZONE"):
            market_hours = replace(market_hours, timezone=env["PNF_MARKET_TIMEZONE"])

        schedule = ScheduleConfig(
            period_seconds=_env_float(env, "PNF_PERIOD_SECONDS", DEFAULT_PERIOD_SECONDS),
            market_hours=market_hours,
        )

        return cls(
            chart=chart,
            schedule=schedule,
            kite_api_key=env.get("KITE_API_KEY", ""),
            kite_access_token=env.get("KITE_ACCESS_TOKEN", ""),
            telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
            telegram_chat_id=env.get("TELEGRAM_CHAT_ID", ""),
            history_days=_env_int(env, "PNF_HISTORY_DAYS", DEFAULT_HISTORY_DAYS),
            max_workers=_env_int(env, "PNF_MAX_WORKERS", 1),
            signature_file=env.get("PNF_SIGNATURE_FILE") or None,
        )

    def with_watchlist(self, watchlist: Tuple[Instrument, ...]) -> "SentinelConfig":
        return replace(self, watchlist=tuple(watchlist))

    def with_signature_file(self, path: Optional[str]) -> "SentinelConfig":
        return replace(self, signature_file=path)

    def validate(self) -> None:
        """Raise ConfigError on the first invalid setting."""
        self.chart.validate()
        self.schedule.validate()
        if not self.watchlist:
            raise ConfigError("Watchlist is empty")
        symbols = [i.symbol for i in self.watchlist]
        duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
        if duplicates:
            raise ConfigError(f"Duplicate watchlist symbols: {duplicates}")
        if self.history_days < 1:
            raise ConfigError(f"history_days must be positive, got {self.history_days}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")


def load_watchlist(path: str) -> Tuple[Instrument, ...]:
    """
    Load a watchlist from a JSON file.

    The file holds a list of objects with ``tradingsymbol`` (or ``symbol``),
    ``instrument_token`` and optionally ``exchange``.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed.
    """
    watchlist_path = Path(path)
    try:
        with open(watchlist_path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Watchlist file not found: {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read watchlist {path}: {e}")

    if not isinstance(data, list):
        raise ConfigError(f"Watchlist {path} must contain a JSON list")

    if not all(isinstance(entry, dict) for entry in data):
        raise ConfigError(f"Watchlist {path} entries must be JSON objects")

    instruments = tuple(Instrument.from_dict(entry) for entry in data)
    logger.info(f"Loaded {len(instruments)} instruments from {watchlist_path}")
    return instruments


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'")
