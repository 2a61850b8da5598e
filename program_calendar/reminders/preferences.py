"""Persisted user preference for whether reminders run."""
from __future__ import annotations

from program_calendar.storage.kv_store import KeyValueStore
from program_calendar.util.logging_utils import get_logger

ENABLED_KEY = "remindersEnabled"


class ReminderPreferences:
    def __init__(self, store: KeyValueStore, *, default_enabled: bool = True) -> None:
        self._store = store
        self._default = default_enabled
        self._logger = get_logger(__name__)

    def is_enabled(self) -> bool:
        value = self._store.get_json(ENABLED_KEY, self._default)
        if not isinstance(value, bool):
            self._logger.warning("Ignoring non-boolean %s preference: %r", ENABLED_KEY, value)
            return self._default
        return value

    def set_enabled(self, enabled: bool) -> bool:
        return self._store.set_json(ENABLED_KEY, bool(enabled))


__all__ = ["ENABLED_KEY", "ReminderPreferences"]
