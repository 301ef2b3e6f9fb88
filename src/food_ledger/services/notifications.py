"""User-facing success and failure notifications."""

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Sink for toast-style messages."""

    def success(self, message: str) -> None:
        """Report a completed action."""

    def error(self, message: str) -> None:
        """Report a failed action."""


@dataclass
class LoggingNotifier(Notifier):
    """Notifier that writes messages to the application log."""

    def success(self, message: str) -> None:
        """Log a success message."""
        logger.info(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        logger.warning(message)
