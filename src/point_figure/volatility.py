"""
Volatility-adaptive box sizing.

The box size is the arithmetic mean of the most recent N true-range values.
With too little history it falls back to 1% of the latest close (or 1.0 when
there are no bars at all). The result is always strictly positive.
"""

import math
from typing import Sequence

import numpy as np

from .chart_config import validate_atr_length
from .types import Bar


FALLBACK_CLOSE_FRACTION = 0.01
FALLBACK_BOX_SIZE = 1.0


def true_ranges(bars: Sequence[Bar]) -> np.ndarray:
    """
    True range for every bar after the first.

    TR[i] = max(high[i] - low[i], |high[i] - close[i-1]|, |low[i] - close[i-1]|)

    Returns:
        Array of length ``len(bars) - 1`` (empty for fewer than two bars).
    """
    if len(bars) < 2:
        return np.empty(0, dtype=float)

    highs = np.fromiter((b.high for b in bars), dtype=float, count=len(bars))
    lows = np.fromiter((b.low for b in bars), dtype=float, count=len(bars))
    closes = np.fromiter((b.close for b in bars), dtype=float, count=len(bars))

    prev_close = closes[:-1]
    high = highs[1:]
    low = lows[1:]

    return np.maximum.reduce([
        high - low,
        np.abs(high - prev_close),
        np.abs(low - prev_close),
    ])


def average_true_range(bars: Sequence[Bar], length: int) -> float:
    """
    Mean of the most recent ``length`` true ranges.

    Raises:
        ConfigError: If length is not a positive integer.
        ValueError: If fewer than ``length + 1`` bars are supplied.
    """
    validate_atr_length(length)
    if len(bars) < length + 1:
        raise ValueError(f"Need at least {length + 1} bars for ATR({length}), got {len(bars)}")

    latest = true_ranges(bars)[-length:]
    return float(latest.sum() / length)


def fallback_box_size(bars: Sequence[Bar]) -> float:
    """1% of the latest close, or 1.0 if there is no usable close."""
    if not bars:
        return FALLBACK_BOX_SIZE

    candidate = bars[-1].close * FALLBACK_CLOSE_FRACTION
    if not math.isfinite(candidate) or candidate <= 0:
        return FALLBACK_BOX_SIZE
    return candidate


def compute_box_size(bars: Sequence[Bar], length: int) -> float:
    """
    Box size for a chart build.

    Uses ATR(length) when at least ``length + 1`` bars are available and the
    average is positive; otherwise the close-based fallback.
    """
    validate_atr_length(length)
    if len(bars) < length + 1:
        return fallback_box_size(bars)

    atr = average_true_range(bars, length)
    if not math.isfinite(atr) or atr <= 0:
        # Flat history: every TR is zero
        return fallback_box_size(bars)
    return atr
