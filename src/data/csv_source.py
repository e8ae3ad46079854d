"""
CSV bar source for offline replay.

Reads one OHLCV file per instrument from a directory. The file name is the
trading symbol with spaces replaced by underscores (``NIFTY_50.csv``).

Expected format (header required, column names case-insensitive)::

    timestamp,open,high,low,close,volume
    2024-01-02 09:15:00,1512.3,1518.0,1509.1,1516.4,120455

The timestamp column may also be called ``date``, ``time`` or ``datetime``
and may hold ISO strings or Unix seconds. Volume is optional.
"""

import logging
import os
from pathlib import Path
from typing import List

import pandas as pd

from ..point_figure.chart_builder import dataframe_to_bars
from ..point_figure.types import Bar
from ..sentinel.config import Instrument
from ..sentinel.exceptions import DataUnavailableError
from .base import BarSource

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = ("timestamp", "date", "time", "datetime")


def symbol_filename(symbol: str) -> str:
    return f"{symbol.replace(' ', '_')}.csv"


def load_ohlcv_csv(filepath: str) -> pd.DataFrame:
    """
    Load an OHLCV CSV into a DataFrame sorted by timestamp.

    Rows violating low <= open/close <= high are dropped with a warning;
    duplicate timestamps keep the last occurrence.

    Raises:
        FileNotFoundError, ValueError.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")

    if os.path.getsize(filepath) == 0:
        raise ValueError("File is empty")

    try:
        df = pd.read_csv(filepath, sep=",", engine="c")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValueError(f"Error parsing file: {e}")

    # Normalize column names to lowercase
    df.columns = df.columns.str.strip().str.lower()

    ts_col = next((c for c in TIMESTAMP_COLUMNS if c in df.columns), None)
    required = {"open", "high", "low", "close"}
    if ts_col is None or not required.issubset(df.columns):
        raise ValueError(f"Missing required columns. Found: {df.columns.tolist()}")

    if pd.api.types.is_numeric_dtype(df[ts_col]):
        df["timestamp"] = pd.to_datetime(df[ts_col], unit="s", utc=True)
    else:
        df["timestamp"] = pd.to_datetime(df[ts_col], utc=True, errors="coerce")

    if "volume" not in df.columns:
        df["volume"] = 0
    df["volume"] = df["volume"].fillna(0)

    for c in ["open", "high", "low", "close"]:
        df[c] = pd.to_numeric(df[c], errors="coerce")

    df = df[["timestamp", "open", "high", "low", "close", "volume"]].dropna()
    df = df.sort_values("timestamp", kind="stable")
    df = df.drop_duplicates(subset="timestamp", keep="last")

    valid_ohlc = (
        (df["low"] <= df["open"]) & (df["open"] <= df["high"]) &
        (df["low"] <= df["close"]) & (df["close"] <= df["high"])
    )
    if not valid_ohlc.all():
        invalid_count = int((~valid_ohlc).sum())
        logger.warning(f"Dropping {invalid_count} invalid OHLC row(s) from {filepath}")
        df = df[valid_ohlc]

    return df.reset_index(drop=True)


class CsvBarSource(BarSource):
    """Serves bars from ``<data_dir>/<SYMBOL>.csv`` files."""

    name = "csv"

    def __init__(self, data_dir: str, max_bars: int = 0):
        """
        Args:
            data_dir: Directory holding one CSV per symbol.
            max_bars: If positive, only the most recent ``max_bars`` are returned.
        """
        self.data_dir = Path(data_dir)
        self.max_bars = max_bars

    def fetch_bars(self, instrument: Instrument, interval: str) -> List[Bar]:
        path = self.data_dir / symbol_filename(instrument.symbol)
        try:
            df = load_ohlcv_csv(str(path))
        except (FileNotFoundError, ValueError) as e:
            raise DataUnavailableError(instrument.symbol, str(e))

        if self.max_bars > 0:
            df = df.tail(self.max_bars)
        return dataframe_to_bars(df)
