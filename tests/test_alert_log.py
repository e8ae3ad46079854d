"""
Tests for the alert feed.
"""

import threading
from datetime import datetime, timezone

from src.point_figure.events import ChangeEvent
from src.point_figure.types import ColumnType
from src.sentinel.alert_log import MAX_ALERTS, AlertLog


def make_event(symbol="INFY", column_type=ColumnType.X):
    return ChangeEvent(
        symbol=symbol,
        column_type=column_type,
        column_count=3,
        box_size=2.0,
        timestamp=datetime(2024, 1, 8, 5, 0, tzinfo=timezone.utc),
    )


class TestAlertLog:
    """Tests for AlertLog."""

    def test_record_fields(self):
        log = AlertLog()
        record = log.record(make_event("TCS", ColumnType.O), delivered=True)

        assert len(record.id) == 9
        assert record.symbol == "TCS"
        assert record.type is ColumnType.O
        assert record.message == "New O column formed"
        assert record.delivered is True
        assert record.timestamp == datetime(2024, 1, 8, 5, 0, tzinfo=timezone.utc)

    def test_newest_first(self):
        log = AlertLog()
        for symbol in ["A", "B", "C"]:
            log.record(make_event(symbol))
        assert [r.symbol for r in log.entries()] == ["C", "B", "A"]
        assert [r.symbol for r in log.entries(limit=2)] == ["C", "B"]

    def test_bounded(self):
        log = AlertLog()
        for i in range(MAX_ALERTS + 10):
            log.record(make_event(f"S{i}"))
        assert len(log) == MAX_ALERTS == 50
        assert log.entries()[0].symbol == f"S{MAX_ALERTS + 9}"
        assert log.entries()[-1].symbol == "S10"

    def test_clear(self):
        log = AlertLog()
        log.record(make_event())
        log.clear()
        assert log.entries() == []

    def test_concurrent_records(self):
        log = AlertLog(max_entries=1000)

        def worker(n):
            for i in range(100):
                log.record(make_event(f"{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(log) == 400
        assert len({r.id for r in log.entries()}) == 400
