# Overview: Notification sinks for user-facing messages (low stock, success).

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

LEVELS = ("info", "success", "warning", "error")


class Notifier:
    """Receives short user-facing messages from the services."""

    def notify(self, level: str, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Writes notifications to the application log only (CLI, background use)."""

    def notify(self, level: str, message: str) -> None:
        if level in ("warning", "error"):
            logger.warning("%s: %s", level, message)
        else:
            logger.info("%s: %s", level, message)


class CollectingNotifier(LoggingNotifier):
    """
    Per-request notifier: logs each message and keeps it so the route can
    return the list under "notifications" in the JSON body.
    """

    def __init__(self):
        self.messages: list[dict] = []

    def notify(self, level: str, message: str) -> None:
        if level not in LEVELS:
            level = "info"
        super().notify(level, message)
        self.messages.append({"level": level, "message": message})

    def to_list(self) -> list[dict]:
        return list(self.messages)
