"""Polls calendar entities and fires 24h / 3h reminders at most once each."""
from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple

from program_calendar.calendar.entities import iter_deadlines, iter_timed
from program_calendar.calendar.models import DeadlineEvent, EventCategory, TimedEvent
from program_calendar.calendar.source import EntitySource
from program_calendar.reminders.dedup_store import DedupStore, ReminderKey
from program_calendar.reminders.notifications import Reminder, ReminderNotifier, build_reminder
from program_calendar.util.logging_utils import get_logger
from program_calendar.util.time_utils import ensure_timezone, now_utc

DEFAULT_POLL_INTERVAL = timedelta(minutes=5)
DEFAULT_LEAD_TIMES_HOURS: Tuple[int, ...] = (24, 3)

_Occurrence = Tuple[EventCategory, str, str, datetime]


@dataclass(frozen=True)
class LeadTime:
    hours: int

    @property
    def tag(self) -> str:
        return f"{self.hours}h"

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.hours)


class ReminderScheduler:
    """Builds reminders for entities whose occurrence is coming up.

    ``run_check`` does a single pass and only touches the dedup store and the
    notifier. ``start``/``stop`` wrap it in an asyncio polling task that
    checks once right away and then every ``poll_interval``, running each
    check in a worker thread. Offset-less timestamps are read in ``tz``, the
    same display timezone the calendar views use.
    """

    def __init__(
        self,
        source: EntitySource,
        store: DedupStore,
        notifier: ReminderNotifier,
        *,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
        lead_times_hours: Sequence[int] = DEFAULT_LEAD_TIMES_HOURS,
        clock: Callable[[], datetime] = now_utc,
        tz: str = "UTC",
    ) -> None:
        if poll_interval <= timedelta(0):
            raise ValueError("poll_interval must be positive")
        self._source = source
        self._store = store
        self._notifier = notifier
        self._poll_interval = poll_interval
        self._lead_times = [LeadTime(hours) for hours in sorted(set(lead_times_hours), reverse=True)]
        self._clock = clock
        self._tz = tz
        self._task: asyncio.Task[None] | None = None
        self._logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_check(
        self,
        now: datetime,
        ranged_events: Iterable[TimedEvent],
        point_events: Iterable[TimedEvent],
        deadline_events: Iterable[DeadlineEvent],
    ) -> List[Reminder]:
        """Fire every reminder that is due at ``now`` and not yet recorded."""

        ref = ensure_timezone(now, self._tz)
        fired: List[Reminder] = []
        for category, entity_id, label, occurs_at in _occurrences(ranged_events, point_events, deadline_events, self._tz):
            delta = occurs_at - ref
            for lead in self._lead_times:
                if not timedelta(0) < delta <= lead.window:
                    continue
                key = ReminderKey(category=category, entity_id=entity_id, lead_time=lead.tag)
                if self._store.is_shown(key, ref):
                    continue
                reminder = build_reminder(key, label, lead.hours, occurs_at)
                self._notifier.deliver(reminder)
                self._store.mark_shown(key, ref)
                fired.append(reminder)
        if fired:
            self._logger.info("%d reminder(s) fired", len(fired))
        return fired

    def check_now(self) -> List[Reminder]:
        snapshot = self._source.fetch()
        return self.run_check(self._clock(), snapshot.programs, snapshot.agenda_items, snapshot.kpis)

    def start(self) -> None:
        """Schedule the polling task; its first check runs right away.

        Must be called inside a running event loop.
        """

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._logger.info("Reminder polling stopped")

    async def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.start()
        else:
            await self.stop()

    async def _poll_loop(self) -> None:
        self._logger.info("Reminder polling started (every %s)", self._poll_interval)
        interval = self._poll_interval.total_seconds()
        while True:
            # source reads and store writes hit the disk
            await asyncio.to_thread(self._safe_check)
            await asyncio.sleep(interval)

    def _safe_check(self) -> None:
        try:
            self.check_now()
        except Exception:
            self._logger.exception("Reminder check failed")


def _occurrences(
    ranged_events: Iterable[TimedEvent],
    point_events: Iterable[TimedEvent],
    deadline_events: Iterable[DeadlineEvent],
    tz: str,
) -> Iterator[_Occurrence]:
    for item in iter_timed(ranged_events, "program", tz):
        yield item.category, item.entity_id, item.label, item.start
    for item in iter_timed(point_events, "agenda", tz):
        yield item.category, item.entity_id, item.label, item.start
    for deadline in iter_deadlines(deadline_events, "kpi", tz):
        yield deadline.category, deadline.entity_id, deadline.label, deadline.deadline


__all__ = ["DEFAULT_POLL_INTERVAL", "DEFAULT_LEAD_TIMES_HOURS", "LeadTime", "ReminderScheduler"]
