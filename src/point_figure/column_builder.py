"""
Column State Machine (structural layer)

Consumes closing prices left to right and builds the ordered sequence of
Point-and-Figure columns for a fixed box size and reversal multiple.

Every box level is ``k * box_size`` for an integer box index
``k = floor(price / box_size)``. Levels are recomputed from the absolute
price on each bar and never summed incrementally, so no rounding drift
accumulates along a long column.

Boundary tests (continuation at ``high + box``, reversal at
``high - box * reversal`` and their O mirrors) are inclusive and are
evaluated on the raw close.

Example:
    >>> machine = ColumnStateMachine(box_size=2.0, reversal=3)
    >>> columns = build_columns(bars, box_size=2.0, reversal=3)
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from .chart_config import validate_reversal
from .errors import ConfigError
from .types import Bar, Column, ColumnType

logger = logging.getLogger(__name__)


def box_index(price: float, box_size: float) -> int:
    """Integer box index of a price (floor toward negative infinity)."""
    return math.floor(price / box_size)


def quantize(price: float, box_size: float) -> float:
    """Snap a price down to its box level."""
    return box_index(price, box_size) * box_size


def validate_box_size(box_size: float) -> None:
    if not isinstance(box_size, (int, float)) or isinstance(box_size, bool):
        raise ConfigError(f"box_size must be a number, got {box_size!r}")
    if not math.isfinite(box_size) or box_size <= 0:
        raise ConfigError(f"box_size must be positive and finite, got {box_size!r}")


class ColumnBuilder:
    """
    The single mutable in-progress column.

    Box indices are kept in append order (ascending for X, descending for O).
    ``freeze()`` produces an immutable Column snapshot; the builder itself is
    never placed in a finalized sequence.
    """

    def __init__(self, kind: ColumnType, box_size: float, indices: Sequence[int]):
        if not indices:
            raise ValueError("A column needs at least one box")
        self.kind = kind
        self.box_size = box_size
        self._indices: List[int] = list(indices)

    @classmethod
    def seed(cls, kind: ColumnType, price: float, box_size: float) -> "ColumnBuilder":
        """Start a one-box column at the quantized price."""
        return cls(kind, box_size, [box_index(price, box_size)])

    @property
    def top_index(self) -> int:
        return self._indices[-1] if self.kind is ColumnType.X else self._indices[0]

    @property
    def bottom_index(self) -> int:
        return self._indices[0] if self.kind is ColumnType.X else self._indices[-1]

    @property
    def high(self) -> float:
        return self.top_index * self.box_size

    @property
    def low(self) -> float:
        return self.bottom_index * self.box_size

    @property
    def boxes(self) -> Tuple[float, ...]:
        return tuple(k * self.box_size for k in self._indices)

    def extend_to(self, target_index: int) -> int:
        """
        Append boxes in the column's direction up to ``target_index``.

        Returns:
            Number of boxes appended (0 if the target is not beyond the
            current extreme).
        """
        if self.kind is ColumnType.X:
            new = range(self.top_index + 1, target_index + 1)
        else:
            new = range(self.bottom_index - 1, target_index - 1, -1)
        self._indices.extend(new)
        return len(new)

    def reverse_to(self, target_index: int) -> "ColumnBuilder":
        """
        Start the opposite column one box away from this column's extreme.

        An X column reverses into an O column that starts at ``high - box``
        and descends to ``target_index``; an O column mirrors this.
        """
        if self.kind is ColumnType.X:
            start = self.top_index - 1
            end = min(target_index, start)
            indices = range(start, end - 1, -1)
        else:
            start = self.bottom_index + 1
            end = max(target_index, start)
            indices = range(start, end + 1)
        return ColumnBuilder(self.kind.opposite, self.box_size, indices)

    def freeze(self) -> Column:
        """Immutable snapshot of the current state."""
        return Column(kind=self.kind, boxes=self.boxes, high=self.high, low=self.low)


class ColumnStateMachine:
    """
    Incremental P&F column construction.

    Call ``seed()`` with the first close and the initial column kind, then
    ``process_close()`` for every subsequent close. ``columns()`` returns the
    finalized columns followed by the current one.
    """

    def __init__(self, box_size: float, reversal: int):
        validate_box_size(box_size)
        validate_reversal(reversal)
        self.box_size = float(box_size)
        self.reversal = reversal
        self._finalized: List[Column] = []
        self._current: Optional[ColumnBuilder] = None

    @property
    def current(self) -> Optional[ColumnBuilder]:
        return self._current

    @property
    def finalized(self) -> Tuple[Column, ...]:
        return tuple(self._finalized)

    def seed(self, price: float, kind: ColumnType) -> None:
        if self._current is not None:
            raise RuntimeError("State machine already seeded")
        self._current = ColumnBuilder.seed(kind, price, self.box_size)

    def process_close(self, price: float) -> Optional[Column]:
        """
        Advance the chart by one closing price.

        Returns:
            The column finalized by a reversal on this close, or None if the
            current column was extended or left unchanged.
        """
        current = self._current
        if current is None:
            raise RuntimeError("State machine must be seeded before processing closes")

        box = self.box_size
        high = current.high
        low = current.low

        if current.kind is ColumnType.X:
            if price >= high + box:
                current.extend_to(box_index(price, box))
                return None
            if price <= high - box * self.reversal:
                return self._reverse(price)
        else:
            if price <= low - box:
                current.extend_to(box_index(price, box))
                return None
            if price >= low + box * self.reversal:
                return self._reverse(price)
        return None

    def _reverse(self, price: float) -> Column:
        finished = self._current.freeze()
        self._finalized.append(finished)
        self._current = self._current.reverse_to(box_index(price, self.box_size))
        logger.debug(
            f"Reversal {finished.kind.value}->{self._current.kind.value} at {price} "
            f"(column {len(self._finalized)} closed with {finished.box_count} boxes)"
        )
        return finished

    def columns(self) -> Tuple[Column, ...]:
        """Finalized columns plus the in-progress column as the terminal entry."""
        if self._current is None:
            return ()
        return tuple(self._finalized) + (self._current.freeze(),)


def initial_column_type(bars: Sequence[Bar]) -> ColumnType:
    """
    X when the second close is above the first, otherwise O.

    A single-bar history has no second close and starts as O.
    """
    if len(bars) >= 2 and bars[1].close > bars[0].close:
        return ColumnType.X
    return ColumnType.O


def build_columns(bars: Sequence[Bar], box_size: float, reversal: int) -> Tuple[Column, ...]:
    """
    Run the state machine over a full bar history in one pass.

    Returns:
        Finalized columns followed by the terminal column; empty for no bars.
    """
    machine = ColumnStateMachine(box_size, reversal)
    if not bars:
        return ()

    machine.seed(bars[0].close, initial_column_type(bars))
    for bar in bars[1:]:
        machine.process_close(bar.close)
    return machine.columns()
