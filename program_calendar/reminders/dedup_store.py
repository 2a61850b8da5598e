"""Remembers which reminders already fired so each fires at most once."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Protocol

from program_calendar.calendar.models import EventCategory
from program_calendar.storage.kv_store import KeyValueStore, MemoryStore
from program_calendar.util.logging_utils import get_logger
from program_calendar.util.time_utils import ensure_timezone, now_utc

STORAGE_KEY = "calendarRemindersShown"
DEFAULT_EXPIRY = timedelta(hours=48)


@dataclass(frozen=True)
class ReminderKey:
    category: EventCategory
    entity_id: str
    lead_time: str

    @property
    def storage_key(self) -> str:
        return f"{self.category}-{self.entity_id}-{self.lead_time}"


class DedupStore(Protocol):
    def is_shown(self, key: ReminderKey, now: Optional[datetime] = None) -> bool:
        ...

    def mark_shown(self, key: ReminderKey, now: Optional[datetime] = None) -> None:
        ...


def _to_ms(value: datetime) -> int:
    return round(ensure_timezone(value).timestamp() * 1000)


class ReminderDedupStore:
    """Maps ``category-id-leadtime`` to the epoch-ms time it fired.

    Records older than ``expiry`` are evicted lazily: on lookup of that key,
    and for every key whenever a new record is written. Any storage problem
    reads as "not shown", so a reminder may repeat but is never lost.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        expiry: timedelta = DEFAULT_EXPIRY,
        clock: Callable[[], datetime] = now_utc,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        self._store = store
        self._expiry_ms = int(expiry.total_seconds() * 1000)
        self._clock = clock
        self._storage_key = storage_key
        self._logger = get_logger(__name__)

    def _load(self) -> Dict[str, Any]:
        try:
            records = self._store.get_json(self._storage_key, {})
        except Exception as exc:
            self._logger.warning("Reminder records unreadable, treating as empty: %s", exc)
            return {}
        if not isinstance(records, dict):
            self._logger.warning("Reminder records corrupt, treating as empty")
            return {}
        return records

    def _save(self, records: Dict[str, Any]) -> None:
        try:
            saved = self._store.set_json(self._storage_key, records)
        except Exception as exc:
            self._logger.warning("Failed to persist reminder records: %s", exc)
            return
        if not saved:
            self._logger.warning("Failed to persist reminder records")

    def _fired_ms(self, record: Any) -> Optional[int]:
        if not isinstance(record, dict):
            return None
        timestamp = record.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return None
        return int(timestamp)

    def _expired(self, fired_ms: Optional[int], now_ms: int) -> bool:
        return fired_ms is None or now_ms - fired_ms > self._expiry_ms

    def is_shown(self, key: ReminderKey, now: Optional[datetime] = None) -> bool:
        records = self._load()
        name = key.storage_key
        if name not in records:
            return False
        now_ms = _to_ms(now or self._clock())
        if self._expired(self._fired_ms(records[name]), now_ms):
            del records[name]
            self._save(records)
            return False
        return True

    def mark_shown(self, key: ReminderKey, now: Optional[datetime] = None) -> None:
        now_ms = _to_ms(now or self._clock())
        records = {
            name: record
            for name, record in self._load().items()
            if not self._expired(self._fired_ms(record), now_ms)
        }
        records[key.storage_key] = {"timestamp": now_ms}
        self._save(records)


class InMemoryDedupStore(ReminderDedupStore):
    def __init__(
        self,
        *,
        expiry: timedelta = DEFAULT_EXPIRY,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        super().__init__(MemoryStore(), expiry=expiry, clock=clock)


__all__ = [
    "STORAGE_KEY",
    "DEFAULT_EXPIRY",
    "ReminderKey",
    "DedupStore",
    "ReminderDedupStore",
    "InMemoryDedupStore",
]
