"""
Tests for the synthetic random-walk bar source.
"""

import pytest

from src.data.synthetic_source import SyntheticBarSource, interval_minutes
from src.point_figure.chart_builder import build_chart
from src.point_figure.chart_config import ChartConfig
from src.sentinel.config import Instrument


INFY = Instrument("INFY", 408065)
TCS = Instrument("TCS", 2953213)


class TestIntervalMinutes:
    """Tests for interval_minutes."""

    @pytest.mark.parametrize("interval, minutes", [
        ("minute", 1),
        ("5minute", 5),
        ("30minute", 30),
        ("60minute", 60),
        ("day", 1440),
    ])
    def test_known_intervals(self, interval, minutes):
        assert interval_minutes(interval) == minutes

    def test_unknown_interval(self):
        with pytest.raises(ValueError):
            interval_minutes("week")


class TestSyntheticBarSource:
    """Tests for SyntheticBarSource."""

    def test_first_fetch_is_full_window(self):
        source = SyntheticBarSource(seed=1, window=50, end_timestamp=1704700000)
        bars = source.fetch_bars(INFY, "30minute")

        assert len(bars) == 50
        assert bars[-1].timestamp == 1704700000
        assert all(b.timestamp - a.timestamp == 1800 for a, b in zip(bars, bars[1:]))

    def test_bars_are_consistent(self):
        bars = SyntheticBarSource(seed=3).fetch_bars(INFY, "30minute")
        for prev, bar in zip(bars, bars[1:]):
            assert bar.open == prev.close
        for bar in bars:
            assert bar.low <= min(bar.open, bar.close)
            assert bar.high >= max(bar.open, bar.close)

    def test_deterministic_per_seed_and_symbol(self):
        a = SyntheticBarSource(seed=5, end_timestamp=1704700000).fetch_bars(INFY, "30minute")
        b = SyntheticBarSource(seed=5, end_timestamp=1704700000).fetch_bars(INFY, "30minute")
        c = SyntheticBarSource(seed=5, end_timestamp=1704700000).fetch_bars(TCS, "30minute")
        assert a == b
        assert a != c

    def test_later_fetches_advance(self):
        source = SyntheticBarSource(seed=2, window=20, bars_per_fetch=2, end_timestamp=1704700000)
        first = source.fetch_bars(INFY, "30minute")
        second = source.fetch_bars(INFY, "30minute")

        assert len(second) == 20
        assert second[:-2] == first[2:]
        assert second[-1].timestamp == first[-1].timestamp + 2 * 1800

    def test_history_stays_bounded(self):
        source = SyntheticBarSource(seed=4, window=20, bars_per_fetch=3, end_timestamp=1704700000)
        for _ in range(50):
            bars = source.fetch_bars(INFY, "30minute")

        assert len(source._history["INFY"]) == 20
        assert len(bars) == 20
        assert bars[-1].index == 19 + 49 * 3

    def test_history_builds_chart(self):
        bars = SyntheticBarSource(seed=11).fetch_bars(INFY, "30minute")
        chart = build_chart(bars, ChartConfig.default())
        assert chart.column_count >= 1
        assert chart.box_size > 0
