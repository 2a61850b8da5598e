"""Notification sinks for fired reminders (in-app toast + optional OS popup)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Literal, Optional, Protocol

from program_calendar.calendar.models import EventCategory
from program_calendar.reminders.dedup_store import ReminderKey
from program_calendar.util.logging_utils import get_logger

Permission = Literal["granted", "denied", "default"]

_TITLES: Dict[EventCategory, str] = {
    "program": "Program Starting Soon",
    "agenda": "Team Agenda Reminder",
    "kpi": "KPI Deadline Approaching",
}
_MESSAGES: Dict[EventCategory, str] = {
    "program": "{label} starts in {hours} hours",
    "agenda": "{label} is in {hours} hours",
    "kpi": "{label} deadline is in {hours} hours",
}


@dataclass(frozen=True)
class Reminder:
    key: ReminderKey
    title: str
    message: str
    occurs_at: datetime

    @property
    def tag(self) -> str:
        return f"reminder-{self.key.category}"


def build_reminder(key: ReminderKey, label: str, lead_hours: int, occurs_at: datetime) -> Reminder:
    return Reminder(
        key=key,
        title=_TITLES[key.category],
        message=_MESSAGES[key.category].format(label=label or key.entity_id, hours=lead_hours),
        occurs_at=occurs_at,
    )


class NotificationSink(Protocol):
    def notify(self, reminder: Reminder) -> None:
        ...


class NullNotificationSink:
    def notify(self, reminder: Reminder) -> None:
        return None


class LoggingToastSink:
    """In-app toast stand-in for headless runs: writes the reminder to the log."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    def notify(self, reminder: Reminder) -> None:
        self._logger.info("%s: %s", reminder.title, reminder.message)


class ReminderNotifier:
    """Fans a reminder out to the toast and, when permitted, the OS sink.

    Delivery is fire and forget: sink failures are logged and swallowed.
    """

    def __init__(
        self,
        toast: NotificationSink,
        os_sink: Optional[NotificationSink] = None,
        *,
        permission: Callable[[], Permission] = lambda: "default",
    ) -> None:
        self._toast = toast
        self._os_sink = os_sink
        self._permission = permission
        self._logger = get_logger(__name__)

    def deliver(self, reminder: Reminder) -> None:
        try:
            self._toast.notify(reminder)
        except Exception:
            self._logger.warning("Failed to show reminder toast for %s", reminder.key.storage_key, exc_info=True)

        if self._os_sink is None or not self._os_allowed():
            return
        try:
            self._os_sink.notify(reminder)
        except Exception:
            self._logger.warning("Failed to show notification for %s", reminder.key.storage_key, exc_info=True)

    def _os_allowed(self) -> bool:
        try:
            return self._permission() == "granted"
        except Exception:
            self._logger.warning("Notification permission check failed", exc_info=True)
            return False


__all__ = [
    "Permission",
    "Reminder",
    "build_reminder",
    "NotificationSink",
    "NullNotificationSink",
    "LoggingToastSink",
    "ReminderNotifier",
]
