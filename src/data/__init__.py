# Bar Sources
#
# Adapters that supply bar history to the cycle orchestrator.

from .base import BarSource
from .csv_source import CsvBarSource, load_ohlcv_csv
from .kite_source import KiteBarSource, candles_to_bars
from .synthetic_source import SyntheticBarSource
