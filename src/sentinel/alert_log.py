"""
Alert feed.

Keeps the most recent alerts, newest first, for the status API. The
orchestrator appends from worker threads, so access is serialized.
"""

import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, List, Optional

from ..point_figure.events import ChangeEvent
from ..point_figure.types import ColumnType


MAX_ALERTS = 50


@dataclass(frozen=True)
class AlertRecord:
    """One entry in the alert feed."""
    id: str
    timestamp: datetime
    symbol: str
    message: str
    type: ColumnType
    delivered: bool = False


class AlertLog:
    """Bounded, thread-safe, newest-first alert feed."""

    def __init__(self, max_entries: int = MAX_ALERTS):
        self._entries: Deque[AlertRecord] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def record(self, event: ChangeEvent, delivered: bool = False) -> AlertRecord:
        entry = AlertRecord(
            id=uuid.uuid4().hex[:9],
            timestamp=event.timestamp,
            symbol=event.symbol,
            message=event.get_explanation(),
            type=event.column_type,
            delivered=delivered,
        )
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def entries(self, limit: Optional[int] = None) -> List[AlertRecord]:
        with self._lock:
            items = list(self._entries)
        return items if limit is None else items[:limit]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
