# Point-and-Figure Module
#
# Volatility-adaptive P&F chart generation and cross-cycle change detection.

from .types import Bar, Chart, Column, ColumnType
from .errors import ConfigError, PointFigureError
from .chart_config import ChartConfig
from .volatility import (
    average_true_range,
    compute_box_size,
    fallback_box_size,
    true_ranges,
)
from .column_builder import (
    ColumnBuilder,
    ColumnStateMachine,
    build_columns,
    quantize,
)
from .chart_builder import build_chart, build_chart_from_dataframe, dataframe_to_bars
from .signature import ChangeResult, Signature, detect_change
from .events import ChangeEvent, format_alert_message
