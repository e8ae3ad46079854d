"""Exceptions raised by the chart-generation core."""


class PointFigureError(Exception):
    """Base class for chart-generation errors."""


class ConfigError(PointFigureError, ValueError):
    """Invalid chart, schedule or watchlist configuration.

    Fatal at startup.
    """
