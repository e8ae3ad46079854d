"""
Tests for the market-hours predicate.
"""

from datetime import datetime, time, timezone

import pytest

from src.sentinel.exceptions import ConfigError
from src.sentinel.market_hours import MarketHours, parse_time_of_day


@pytest.fixture
def hours():
    return MarketHours()


def ist(year, month, day, hour, minute, second=0):
    return datetime(year, month, day, hour, minute, second, tzinfo=MarketHours().tzinfo)


class TestIsOpen:
    """Tests for MarketHours.is_open."""

    def test_open_mid_session(self, hours):
        assert hours.is_open(ist(2024, 1, 8, 12, 0))

    def test_boundaries_inclusive(self, hours):
        assert hours.is_open(ist(2024, 1, 8, 9, 15))
        assert hours.is_open(ist(2024, 1, 8, 15, 30))

    def test_closed_outside_session(self, hours):
        assert not hours.is_open(ist(2024, 1, 8, 9, 14, 59))
        assert not hours.is_open(ist(2024, 1, 8, 15, 31))

    def test_closed_on_weekend(self, hours):
        assert not hours.is_open(ist(2024, 1, 6, 12, 0))  # Saturday
        assert not hours.is_open(ist(2024, 1, 7, 12, 0))  # Sunday

    def test_converts_other_timezones(self, hours):
        # 04:00 UTC is 09:30 IST
        assert hours.is_open(datetime(2024, 1, 8, 4, 0, tzinfo=timezone.utc))
        # 03:00 UTC is 08:30 IST
        assert not hours.is_open(datetime(2024, 1, 8, 3, 0, tzinfo=timezone.utc))

    def test_naive_datetime_is_exchange_time(self, hours):
        assert hours.is_open(datetime(2024, 1, 8, 10, 0))

    def test_custom_session(self):
        hours = MarketHours(start=time(10, 0), end=time(11, 0), weekdays=frozenset({5}))
        assert hours.is_open(ist(2024, 1, 6, 10, 30))
        assert not hours.is_open(ist(2024, 1, 8, 10, 30))

    def test_now_is_exchange_time(self, hours):
        assert hours.now().utcoffset() == ist(2024, 1, 8, 12, 0).utcoffset()


class TestValidate:
    """Tests for MarketHours.validate."""

    def test_default_is_valid(self, hours):
        hours.validate()

    @pytest.mark.parametrize("kwargs", [
        {"start": time(15, 30), "end": time(9, 15)},
        {"weekdays": frozenset()},
        {"weekdays": frozenset({7})},
        {"timezone": "Mars/Olympus_Mons"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            MarketHours(**kwargs).validate()


class TestParseTimeOfDay:
    """Tests for parse_time_of_day."""

    def test_valid(self):
        assert parse_time_of_day("09:15") == time(9, 15)
        assert parse_time_of_day(" 15:30 ") == time(15, 30)

    @pytest.mark.parametrize("value", ["9", "25:00", "ab:cd", "9:15:00"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_time_of_day(value)
