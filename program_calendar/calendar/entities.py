"""Normalizes entity snapshots, skipping records with unusable timestamps."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import pendulum

from program_calendar.calendar.models import DeadlineEvent, EventCategory, TimedEvent
from program_calendar.util.logging_utils import get_logger
from program_calendar.util.time_utils import to_instant

_logger = get_logger(__name__)

# Raised by to_instant/pendulum for garbage input, or by attribute access on
# objects that are not entities at all.
ENTITY_ERRORS = (ValueError, TypeError, AttributeError, OverflowError)


@dataclass(frozen=True)
class NormalizedTimed:
    category: EventCategory
    event: TimedEvent
    entity_id: str
    label: str
    start: pendulum.DateTime
    end: pendulum.DateTime


@dataclass(frozen=True)
class NormalizedDeadline:
    category: EventCategory
    event: DeadlineEvent
    entity_id: str
    label: str
    deadline: pendulum.DateTime


def iter_timed(
    events: Iterable[TimedEvent], category: EventCategory, tz: str = "UTC"
) -> Iterator[NormalizedTimed]:
    for event in events:
        try:
            entity_id = str(event.id)
            start = to_instant(event.start, tz)
            end = to_instant(event.end, tz)
        except ENTITY_ERRORS as exc:
            _logger.warning("Skipping %s %r with malformed range: %s", category, _entity_id(event), exc)
            continue
        if start > end:
            _logger.warning("Skipping %s %r: start %s is after end %s", category, entity_id, start, end)
            continue
        yield NormalizedTimed(
            category=category,
            event=event,
            entity_id=entity_id,
            label=_label(event),
            start=start,
            end=end,
        )


def iter_deadlines(
    events: Iterable[DeadlineEvent], category: EventCategory = "kpi", tz: str = "UTC"
) -> Iterator[NormalizedDeadline]:
    """Yield events that carry a deadline; absent deadlines are skipped silently."""

    for event in events:
        try:
            if getattr(event, "deadline", None) is None:
                continue
            entity_id = str(event.id)
            deadline = to_instant(event.deadline, tz)
        except ENTITY_ERRORS as exc:
            _logger.warning("Skipping %s %r with malformed deadline: %s", category, _entity_id(event), exc)
            continue
        yield NormalizedDeadline(
            category=category,
            event=event,
            entity_id=entity_id,
            label=_label(event),
            deadline=deadline,
        )


def _entity_id(event: object) -> object:
    return getattr(event, "id", None)


def _label(event: object) -> str:
    # label is optional on records coming from the read accessor
    label = getattr(event, "label", "")
    return label if isinstance(label, str) else str(label)


__all__ = [
    "ENTITY_ERRORS",
    "NormalizedTimed",
    "NormalizedDeadline",
    "iter_timed",
    "iter_deadlines",
]
