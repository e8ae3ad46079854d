"""Bar source interface consumed by the cycle orchestrator."""

from typing import List

from ..point_figure.types import Bar
from ..sentinel.config import Instrument


class BarSource:
    """
    Supplies bar history for one instrument.

    Implementations return bars oldest first and raise DataUnavailableError
    when the history cannot be obtained.
    """

    name = "base"

    def fetch_bars(self, instrument: Instrument, interval: str) -> List[Bar]:
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources (HTTP clients, file handles)."""
