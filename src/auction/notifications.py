"""
User-facing notifications (toasts) raised by the bidding flow.
"""

import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Sink for success/error messages shown to the bidder."""

    def success(self, message: str):
        raise NotImplementedError

    def error(self, message: str):
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default notifier: writes messages to the log."""

    def success(self, message: str):
        logger.info(f"[NOTIFY] {message}")

    def error(self, message: str):
        logger.warning(f"[NOTIFY] {message}")
