"""
Sentinel exception hierarchy.

Errors raised while running monitoring cycles. ConfigError lives with the
chart core (``src.point_figure.errors``) and is re-exported here so callers
have one place to import from.
"""

from ..point_figure.errors import ConfigError


class SentinelError(Exception):
    """Base class for monitoring-cycle errors."""


class DataUnavailableError(SentinelError):
    """Bar source failed, timed out or returned too little history.

    Recoverable: the instrument is skipped for the cycle and its signature
    is left untouched.
    """

    def __init__(self, symbol: str, reason: str):
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class NotificationError(SentinelError):
    """Notifier failed to deliver an alert. Logged, never fatal."""


__all__ = [
    "ConfigError",
    "DataUnavailableError",
    "NotificationError",
    "SentinelError",
]
