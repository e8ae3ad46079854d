"""Notifier interface and the logging notifier used for dry runs."""

import logging

from ..point_figure.events import ChangeEvent

logger = logging.getLogger(__name__)


class Notifier:
    """
    Receives change events with a human-readable message.

    ``notify`` returns True when the alert was delivered and False when it
    was deliberately suppressed (e.g. missing credentials). Transport
    failures raise NotificationError.
    """

    name = "base"

    def notify(self, event: ChangeEvent, message: str) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources."""


class LoggingNotifier(Notifier):
    """Writes alerts to the log instead of delivering them."""

    name = "log"

    def notify(self, event: ChangeEvent, message: str) -> bool:
        logger.info(f"ALERT [{event.symbol}] {event.column_type.value} column #{event.column_count}: {message!r}")
        return True
