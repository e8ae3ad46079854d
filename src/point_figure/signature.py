"""
Change detection between recomputation cycles.

A Signature is the minimal snapshot of a chart's shape: the number of
columns and the type of the terminal column. Comparing the signature of a
freshly built chart with the one recorded on the previous cycle tells
whether a new column appeared or the terminal column flipped.
"""

from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional

from .types import Chart, ColumnType


@dataclass(frozen=True)
class Signature:
    """
    Column count and terminal column type of a chart.

    Serializes as ``{"count": n, "type": "X"|"O"}``.
    """
    count: int
    type: ColumnType

    @classmethod
    def from_chart(cls, chart: Chart) -> "Signature":
        """
        Raises:
            ValueError: If the chart has no columns.
        """
        if not chart.columns:
            raise ValueError("Cannot take the signature of a chart with no columns")
        return cls(count=chart.column_count, type=chart.terminal_type)

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "type": self.type.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Signature":
        count = data["count"]
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"Invalid signature count: {count!r}")
        return cls(count=count, type=ColumnType(data["type"]))


class ChangeResult(NamedTuple):
    """Outcome of one signature comparison."""
    changed: bool
    signature: Signature


def detect_change(previous: Optional[Signature], chart: Chart) -> ChangeResult:
    """
    Compare a new chart against the previously recorded signature.

    A change is reported only when a previous signature exists and either
    the column count or the terminal type differs. The first observation of
    an instrument never reports a change, and feeding the same chart twice
    never reports it again.

    Args:
        previous: Signature recorded on the last cycle, or None if unseen.
        chart: Newly built chart (must have at least one column).

    Returns:
        ChangeResult with the change flag and the signature to record.

    Example:
        >>> detect_change(Signature(3, ColumnType.O), chart_with_3_O).changed
        False
    """
    signature = Signature.from_chart(chart)
    if previous is None:
        return ChangeResult(changed=False, signature=signature)

    changed = previous.count != signature.count or previous.type != signature.type
    return ChangeResult(changed=changed, signature=signature)
