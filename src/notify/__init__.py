# Notifiers
#
# Delivery adapters for chart change alerts.

from .base import LoggingNotifier, Notifier
from .telegram import TelegramNotifier
