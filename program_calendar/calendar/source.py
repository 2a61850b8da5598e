"""Read accessors handing entity snapshots to the calendar and reminders."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from program_calendar.calendar.aggregation import filter_snapshot
from program_calendar.calendar.models import CalendarSnapshot, ViewWindow
from program_calendar.calendar.schema import ProgramFilter, records_from_payload
from program_calendar.util.logging_utils import get_logger


class EntitySource(Protocol):
    def fetch(self) -> CalendarSnapshot:
        ...


class InMemoryEntitySource:
    """Holds the latest snapshot pushed by the caller."""

    def __init__(self, snapshot: CalendarSnapshot | None = None) -> None:
        self._snapshot = snapshot or CalendarSnapshot()

    def replace(self, snapshot: CalendarSnapshot) -> None:
        self._snapshot = snapshot

    def fetch(self) -> CalendarSnapshot:
        return CalendarSnapshot(
            programs=list(self._snapshot.programs),
            agenda_items=list(self._snapshot.agenda_items),
            kpis=list(self._snapshot.kpis),
        )


class JsonFileEntitySource:
    """Reads an exported ``{"programs": [...], "agendaItems": [...], "kpis": [...]}`` file.

    Read errors propagate; a failed fetch is the caller's concern.
    """

    def __init__(self, path: Path, *, program_filter: ProgramFilter | None = None) -> None:
        self._path = path
        self._filter = program_filter
        self._logger = get_logger(__name__)

    def fetch(self) -> CalendarSnapshot:
        with self._path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"{self._path} must contain a JSON object")
        snapshot = records_from_payload(payload).to_snapshot(self._filter)
        self._logger.debug(
            "Loaded %d program(s), %d agenda item(s), %d KPI(s) from %s",
            len(snapshot.programs),
            len(snapshot.agenda_items),
            len(snapshot.kpis),
            self._path,
        )
        return snapshot


def fetch_for_window(source: EntitySource, window: ViewWindow, *, tz: str = "local") -> CalendarSnapshot:
    return filter_snapshot(source.fetch(), window, tz=tz)


__all__ = ["EntitySource", "InMemoryEntitySource", "JsonFileEntitySource", "fetch_for_window"]
