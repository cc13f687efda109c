"""Notification sinks: to the log, or onto the event bus for the UI."""

from __future__ import annotations

import logging

from autotheme.core import events
from autotheme.core.event_bus import EventBus
from autotheme.core.interfaces.collaborators import NotificationSink
from autotheme.core.models.state import Severity

_log = logging.getLogger(__name__)

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LogNotificationSink(NotificationSink):
    """Writes notifications to the log (headless runs)."""

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        _log.log(_LEVELS[severity], "Notification: %s", message)


class EventBusNotificationSink(NotificationSink):
    """Publishes ``notification.requested`` for the status page to toast.

    Uses :meth:`EventBus.publish_threadsafe`, so it never blocks and is
    safe to call from worker threads.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self._bus.publish_threadsafe(
            events.NOTIFICATION_REQUESTED,
            {"message": message, "severity": severity.value},
            source="notifications",
        )
