"""
Market hours predicate.

Gates scheduled cycles to the exchange session: weekdays only, between the
configured open and close times (both inclusive), in the exchange's
timezone.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import FrozenSet, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ConfigError


NSE_TIMEZONE = "Asia/Kolkata"
WEEKDAYS = frozenset({0, 1, 2, 3, 4})  # Monday..Friday


@dataclass(frozen=True)
class MarketHours:
    """
    Trading session window.

    Attributes:
        start: Session open (local exchange time).
        end: Session close (local exchange time).
        weekdays: Trading days as ``datetime.weekday()`` numbers (0 = Monday).
        timezone: IANA timezone name of the exchange.
    """
    start: time = time(9, 15)
    end: time = time(15, 30)
    weekdays: FrozenSet[int] = field(default_factory=lambda: WEEKDAYS)
    timezone: str = NSE_TIMEZONE

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def validate(self) -> None:
        if self.start >= self.end:
            raise ConfigError(f"Market open {self.start} must be before close {self.end}")
        if not self.weekdays or not set(self.weekdays) <= set(range(7)):
            raise ConfigError(f"weekdays must be a non-empty subset of 0..6, got {sorted(self.weekdays)}")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone '{self.timezone}': {e}")

    def now(self) -> datetime:
        """Current time in the exchange timezone."""
        return datetime.now(self.tzinfo)

    def localize(self, moment: datetime) -> datetime:
        """Express a datetime in exchange time; naive values are taken as exchange time."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tzinfo)
        return moment.astimezone(self.tzinfo)

    def is_open(self, now: Optional[datetime] = None) -> bool:
        """True if ``now`` (default: the current time) falls inside the session."""
        local = self.localize(now) if now is not None else self.now()
        if local.weekday() not in self.weekdays:
            return False
        current = local.time().replace(tzinfo=None)
        return self.start <= current <= self.end


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` into a time, raising ConfigError on bad input."""
    try:
        hour, minute = value.strip().split(":")
        return time(int(hour), int(minute))
    except (ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid time of day '{value}' (expected HH:MM): {e}")
