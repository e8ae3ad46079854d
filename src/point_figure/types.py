"""Core data types for Point-and-Figure charting."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Bar:
    """Single OHLCV bar"""
    index: int
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


class ColumnType(str, Enum):
    """Direction of a P&F column: X for rising boxes, O for falling boxes."""
    X = "X"
    O = "O"

    @property
    def opposite(self) -> "ColumnType":
        return ColumnType.O if self is ColumnType.X else ColumnType.X


@dataclass(frozen=True)
class Column:
    """
    A finalized P&F column.

    Boxes are stored in the order they were appended: ascending for X,
    descending for O. For an X column ``high`` is the last box and ``low``
    the first; for an O column the reverse.

    Attributes:
        kind: ColumnType.X or ColumnType.O
        boxes: Box price levels in append order
        high: Top price level of the column
        low: Bottom price level of the column
    """
    kind: ColumnType
    boxes: Tuple[float, ...]
    high: float
    low: float

    @property
    def box_count(self) -> int:
        return len(self.boxes)


@dataclass(frozen=True)
class Chart:
    """
    Result of one chart build.

    ``columns`` holds every finalized column followed by the terminal
    (in-progress) column. It is empty only when no bars were supplied.
    """
    columns: Tuple[Column, ...]
    box_size: float
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def terminal_column(self) -> Optional[Column]:
        return self.columns[-1] if self.columns else None

    @property
    def terminal_type(self) -> Optional[ColumnType]:
        column = self.terminal_column
        return column.kind if column is not None else None
