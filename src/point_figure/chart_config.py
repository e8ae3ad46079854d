"""
Chart Configuration

Centralized parameters for Point-and-Figure chart generation.

Defaults mirror the production watchlist setup: 30-minute bars, a 14-period
ATR for box sizing and a 3-box reversal.
"""

from dataclasses import dataclass, replace
from typing import Any

from .errors import ConfigError


DEFAULT_ATR_LENGTH = 14
DEFAULT_REVERSAL = 3
DEFAULT_INTERVAL = "30minute"


@dataclass(frozen=True)
class ChartConfig:
    """
    All configurable parameters for chart generation.

    Attributes:
        atr_length: Number of true-range values averaged into the box size.
        reversal: Boxes price must move against a column to start a new one.
        interval: Bar interval requested from the bar source (e.g. "30minute").

    Example:
        >>> config = ChartConfig.default()
        >>> config.reversal
        3
    """
    atr_length: int = DEFAULT_ATR_LENGTH
    reversal: int = DEFAULT_REVERSAL
    interval: str = DEFAULT_INTERVAL

    @classmethod
    def default(cls) -> "ChartConfig":
        """Create a config with default values."""
        return cls()

    def with_overrides(self, **kwargs: Any) -> "ChartConfig":
        """
        Create a new config with modified parameters.

        Since ChartConfig is frozen, this creates a new instance. The result
        is validated before it is returned.
        """
        config = replace(self, **kwargs)
        config.validate()
        return config

    @property
    def min_bars(self) -> int:
        """Bars needed before the ATR box size replaces the fallback."""
        return self.atr_length + 1

    def validate(self) -> None:
        """Raise ConfigError when any parameter is out of range."""
        validate_atr_length(self.atr_length)
        validate_reversal(self.reversal)
        if not self.interval:
            raise ConfigError("interval must be a non-empty string")


def validate_atr_length(length: Any) -> None:
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ConfigError(f"atr_length must be a positive integer, got {length!r}")


def validate_reversal(reversal: Any) -> None:
    if isinstance(reversal, bool) or not isinstance(reversal, int) or reversal < 1:
        raise ConfigError(f"reversal must be a positive integer, got {reversal!r}")
