"""
Synthetic bar source for dry runs.

Generates a seeded random walk with a slight upward bias per instrument.
The first fetch produces a full window of history; every later fetch
appends fresh bars and returns the latest window, so charts evolve from
cycle to cycle the way a live feed would.
"""

import logging
import random
import re
import threading
import time
from typing import Dict, List, Optional

from ..point_figure.types import Bar
from ..sentinel.config import Instrument
from .base import BarSource

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 101
UPWARD_BIAS = 0.48   # P(down move) slightly below one half
MAX_STEP = 15.0
MAX_WICK = 5.0


def interval_minutes(interval: str) -> int:
    """Minutes per bar for a Kite-style interval name ("30minute", "day", ...)."""
    if interval == "day":
        return 24 * 60
    match = re.fullmatch(r"(\d*)minute", interval)
    if not match:
        raise ValueError(f"Unsupported interval '{interval}'")
    return int(match.group(1) or 1)


class SyntheticBarSource(BarSource):
    """Deterministic (per seed) random-walk bars."""

    name = "synthetic"

    def __init__(
        self,
        seed: int = 0,
        window: int = DEFAULT_WINDOW,
        bars_per_fetch: int = 1,
        end_timestamp: Optional[int] = None,
    ):
        """
        Args:
            seed: Base seed; each symbol gets its own stream derived from it.
            window: Bars returned per fetch.
            bars_per_fetch: New bars appended on every fetch after the first.
            end_timestamp: Unix time of the last bar of the first window
                (default: now).
        """
        self.seed = seed
        self.window = window
        self.bars_per_fetch = bars_per_fetch
        self.end_timestamp = end_timestamp if end_timestamp is not None else int(time.time())
        self._history: Dict[str, List[Bar]] = {}
        self._rngs: Dict[str, random.Random] = {}
        self._lock = threading.Lock()

    def fetch_bars(self, instrument: Instrument, interval: str) -> List[Bar]:
        step = interval_minutes(interval) * 60
        symbol = instrument.symbol

        with self._lock:
            history = self._history.get(symbol)
            if history is None:
                rng = random.Random(f"{self.seed}:{symbol}")
                self._rngs[symbol] = rng
                start = self.end_timestamp - (self.window - 1) * step
                history = []
                last_price = 1000 + rng.random() * 500
                for i in range(self.window):
                    history.append(self._next_bar(rng, i, start + i * step, last_price))
                    last_price = history[-1].close
                self._history[symbol] = history
            else:
                rng = self._rngs[symbol]
                for _ in range(self.bars_per_fetch):
                    prev = history[-1]
                    history.append(self._next_bar(rng, prev.index + 1, prev.timestamp + step, prev.close))
                del history[:-self.window]

            return list(history)

    @staticmethod
    def _next_bar(rng: random.Random, index: int, timestamp: int, last_price: float) -> Bar:
        change = (rng.random() - UPWARD_BIAS) * MAX_STEP
        open_ = last_price
        close = open_ + change
        return Bar(
            index=index,
            timestamp=timestamp,
            open=open_,
            high=max(open_, close) + rng.random() * MAX_WICK,
            low=min(open_, close) - rng.random() * MAX_WICK,
            close=close,
            volume=float(int(rng.random() * 100000)),
        )
