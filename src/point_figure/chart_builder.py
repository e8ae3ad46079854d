"""
Chart building functions.

Composes the volatility estimator and the column state machine over one
instrument's bar history, and provides DataFrame conversion utilities.
"""

import numbers
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd

from .chart_config import ChartConfig
from .column_builder import build_columns
from .types import Bar, Chart
from .volatility import compute_box_size


def build_chart(bars: Sequence[Bar], config: Optional[ChartConfig] = None) -> Chart:
    """
    Build a P&F chart from a bar history (oldest first).

    The builder holds no state: identical inputs always give identical
    charts. An empty history yields a chart with no columns, the fallback
    box size and a ``last_updated`` of now.

    Args:
        bars: Bar history, oldest first.
        config: Chart configuration (defaults to ChartConfig.default()).

    Returns:
        Chart with columns, box size and the last bar's timestamp.

    Example:
        >>> chart = build_chart(bars, ChartConfig(atr_length=14, reversal=3))
        >>> chart.terminal_type
        <ColumnType.X: 'X'>
    """
    config = config or ChartConfig.default()

    box_size = compute_box_size(bars, config.atr_length)
    if not bars:
        return Chart(columns=(), box_size=box_size, last_updated=datetime.now(timezone.utc))

    columns = build_columns(bars, box_size, config.reversal)
    return Chart(columns=columns, box_size=box_size, last_updated=bars[-1].date)


def dataframe_to_bars(df: pd.DataFrame) -> List[Bar]:
    """
    Convert DataFrame with OHLCV columns to Bar list.

    Handles various column naming conventions commonly used in market data.
    The timestamp may come from a timestamp/time/date/datetime column or from
    a DatetimeIndex.

    Args:
        df: DataFrame with OHLC columns (open/Open, high/High, ...). Volume
            is optional and defaults to 0.

    Returns:
        List of Bar objects in DataFrame row order.
    """
    bars = []

    # Normalize column names to lowercase for consistent access
    col_map = {str(c).lower(): c for c in df.columns}
    ts_col = next(
        (col_map[c] for c in ("timestamp", "time", "date", "datetime") if c in col_map),
        None,
    )
    volume_col = col_map.get("volume")
    use_index = ts_col is None and isinstance(df.index, pd.DatetimeIndex)

    for position, (idx, row) in enumerate(df.iterrows()):
        if ts_col is not None:
            ts_value = row[ts_col]
        else:
            ts_value = idx if use_index else None
        timestamp = _to_unix_seconds(ts_value)
        if timestamp is None:
            # Generate sequential timestamps
            timestamp = 1700000000 + position * 60

        bars.append(
            Bar(
                index=position,
                timestamp=timestamp,
                open=float(row[col_map.get("open", "open")]),
                high=float(row[col_map.get("high", "high")]),
                low=float(row[col_map.get("low", "low")]),
                close=float(row[col_map.get("close", "close")]),
                volume=float(row[volume_col]) if volume_col is not None else 0.0,
            )
        )

    return bars


def _to_unix_seconds(value) -> Optional[int]:
    """Unix seconds for a timestamp-like value; naive datetimes are taken as UTC."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return None if pd.isna(value) else int(value)
    if isinstance(value, str):
        try:
            value = pd.Timestamp(value)
        except ValueError:
            return None
    if isinstance(value, datetime):
        value = pd.Timestamp(value)
        if pd.isna(value):
            return None
        if value.tzinfo is None:
            value = value.tz_localize("UTC")
        return int(value.timestamp())
    return None


def build_chart_from_dataframe(df: pd.DataFrame, config: Optional[ChartConfig] = None) -> Chart:
    """
    Convenience wrapper for DataFrame input.

    Converts DataFrame to Bar list and builds the chart.

    Example:
        >>> df = pd.read_csv("RELIANCE-30m.csv")
        >>> chart = build_chart_from_dataframe(df)
    """
    return build_chart(dataframe_to_bars(df), config)
