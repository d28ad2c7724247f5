"""Logging-backed notification sink."""
import logging

from .interfaces import NotificationSink

NOTIFY_LOGGER_NAME = "apphosting_toolkit.notify"

logger = logging.getLogger(__name__)


class LoggingNotifier(NotificationSink):
    """Reports workflow progress through the standard logging module."""

    def __init__(self, notify_logger: logging.Logger = None):
        self._logger = notify_logger or logging.getLogger(NOTIFY_LOGGER_NAME)

    def _emit(self, level: int, message: str) -> None:
        try:
            self._logger.log(level, message)
        except Exception as e:
            # A broken handler must not fail the operation being reported on
            logger.debug(f"Failed to emit notification: {e}")

    def log_success(self, message: str) -> None:
        self._emit(logging.INFO, f"Success: {message}")

    def log_labeled_warning(self, label: str, message: str) -> None:
        self._emit(logging.WARNING, f"{label}: {message}")

    def log_labeled_error(self, label: str, message: str) -> None:
        self._emit(logging.ERROR, f"{label}: {message}")
