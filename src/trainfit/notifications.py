"""
Notification sinks.

Transient success/error messages. Sinks are fire-and-forget: ``notify``
returns immediately and never raises for display problems.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from rich.console import Console

from trainfit.account.models import NotificationKind

logger = logging.getLogger(__name__)

_STYLES: dict[NotificationKind, str] = {
    NotificationKind.SUCCESS: "bold green",
    NotificationKind.ERROR: "bold red",
}


@dataclass
class Notification:
    message: str
    kind: NotificationKind
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ConsoleNotificationSink:
    """Prints notifications to the terminal, colored by kind."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.history: list[Notification] = []

    def notify(self, message: str, kind: NotificationKind) -> None:
        self.history.append(Notification(message, kind))
        try:
            self.console.print(message, style=_STYLES.get(kind, ""), markup=False)
        except OSError as e:
            logger.debug("Could not print notification: %s", e)


class LoggingNotificationSink:
    """Routes notifications to the log. For headless use."""

    def notify(self, message: str, kind: NotificationKind) -> None:
        level = logging.ERROR if kind is NotificationKind.ERROR else logging.INFO
        logger.log(level, "[%s] %s", kind.value, message)
