"""
Chart Change Events

Defines the event emitted when a chart's shape changes between cycles and
the human-readable alert text built from it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .types import Chart, ColumnType


INTERVAL_LABELS = {
    "minute": "1m",
    "3minute": "3m",
    "5minute": "5m",
    "10minute": "10m",
    "15minute": "15m",
    "30minute": "30m",
    "60minute": "60m",
    "day": "1D",
}


@dataclass(frozen=True)
class ChangeEvent:
    """
    Emitted when a signature comparison detects a structural change.

    Attributes:
        symbol: Instrument identifier (trading symbol).
        column_type: Type of the new terminal column.
        column_count: Number of columns in the new chart.
        box_size: Box size the chart was built with.
        timestamp: When the change was detected.
    """
    symbol: str
    column_type: ColumnType
    column_count: int
    box_size: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_chart(cls, symbol: str, chart: Chart, timestamp: Optional[datetime] = None) -> "ChangeEvent":
        return cls(
            symbol=symbol,
            column_type=chart.terminal_type,
            column_count=chart.column_count,
            box_size=chart.box_size,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    def get_explanation(self) -> str:
        """Short description used in the alert feed."""
        return f"New {self.column_type.value} column formed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "column_type": self.column_type.value,
            "column_count": self.column_count,
            "box_size": self.box_size,
            "timestamp": self.timestamp.isoformat(),
        }


def format_alert_message(event: ChangeEvent, interval: str = "30minute") -> str:
    """
    Markdown alert text for chat notifiers.

    Example:
        >>> print(format_alert_message(event))
        🚨 *P&F Alert: INFY*
        New Column Detected: *X*
        Interval: 30m | ATR Box Size: 4.25
        Time: 10:45:00
    """
    label = INTERVAL_LABELS.get(interval, interval)
    return (
        f"🚨 *P&F Alert: {event.symbol}*\n"
        f"New Column Detected: *{event.column_type.value}*\n"
        f"Interval: {label} | ATR Box Size: {event.box_size:.2f}\n"
        f"Time: {event.timestamp.strftime('%H:%M:%S')}"
    )
