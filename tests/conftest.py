"""
Shared test fixtures and helpers for P&F chart and sentinel tests.
"""

from datetime import datetime
from typing import Dict, List, Sequence, Union

import pytest

from src.point_figure.chart_config import ChartConfig
from src.point_figure.types import Bar
from src.sentinel.config import Instrument, ScheduleConfig, SentinelConfig
from src.sentinel.market_hours import MarketHours


def make_bar(
    index: int,
    open_: float,
    high: float,
    low: float,
    close: float,
    timestamp: int = None,
    volume: float = 0.0,
) -> Bar:
    """Helper to create Bar objects for testing.

    Args:
        index: Bar index in the sequence
        open_: Opening price
        high: High price
        low: Low price
        close: Closing price
        timestamp: Unix timestamp (defaults to 1700000000 + index * 1800)
        volume: Traded volume

    Returns:
        Bar object for use in chart tests
    """
    return Bar(
        index=index,
        timestamp=timestamp or 1700000000 + index * 1800,
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def bars_from_closes(closes: Sequence[float], spread: float = 0.5) -> List[Bar]:
    """Bars whose high/low sit ``spread`` above/below the close."""
    bars = []
    for i, close in enumerate(closes):
        open_ = closes[i - 1] if i > 0 else close
        bars.append(make_bar(
            i,
            open_,
            max(open_, close) + spread,
            min(open_, close) - spread,
            close,
        ))
    return bars


# Chart shapes used by orchestrator/API tests (ATR(2), 3-box reversal).
# RISING is a single X column; RISE_THEN_FALL reverses into an O column.
RISING_CLOSES = [100, 101, 102, 103, 104, 105, 106, 107, 108, 109, 110]
RISE_THEN_FALL_CLOSES = RISING_CLOSES + [100, 95, 90, 85, 80]


class StubBarSource:
    """Bar source serving canned histories; an exception value is raised instead."""

    name = "stub"

    def __init__(self, histories: Dict[str, Union[List[Bar], Exception]]):
        self.histories = dict(histories)
        self.calls: List[str] = []

    def fetch_bars(self, instrument, interval):
        self.calls.append(instrument.symbol)
        value = self.histories[instrument.symbol]
        if isinstance(value, Exception):
            raise value
        return list(value)

    def close(self):
        pass


class RecordingNotifier:
    """Notifier that remembers every alert; optionally raises instead."""

    name = "recording"

    def __init__(self, result: bool = True, error: Exception = None):
        self.result = result
        self.error = error
        self.sent = []

    def notify(self, event, message):
        if self.error is not None:
            raise self.error
        self.sent.append((event, message))
        return self.result

    def close(self):
        pass


@pytest.fixture
def chart_config():
    return ChartConfig(atr_length=2, reversal=3)


@pytest.fixture
def watchlist():
    return (
        Instrument("INFY", 408065, "NSE"),
        Instrument("TCS", 2953213, "NSE"),
        Instrument("ITC", 424961, "NSE"),
    )


@pytest.fixture
def market_hours():
    return MarketHours()


@pytest.fixture
def fixed_clock(market_hours):
    """Monday 2024-01-08 10:00 exchange time."""
    moment = datetime(2024, 1, 8, 10, 0, tzinfo=market_hours.tzinfo)
    return lambda: moment


@pytest.fixture
def sentinel_config(chart_config, watchlist):
    return SentinelConfig(
        chart=chart_config,
        schedule=ScheduleConfig(period_seconds=3600),
        watchlist=watchlist,
    )
