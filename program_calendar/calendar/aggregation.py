"""Per-day category counts and listings for the rendered window."""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from program_calendar.calendar.entities import (
    NormalizedDeadline,
    NormalizedTimed,
    iter_deadlines,
    iter_timed,
)
from program_calendar.calendar.models import (
    CalendarSnapshot,
    DayBucket,
    DayItem,
    DayListing,
    DeadlineEvent,
    TimedEvent,
    ViewWindow,
)
from program_calendar.calendar.overlap import occurs_on_day, overlaps
from program_calendar.util.time_utils import InstantLike, date_key, day_bounds


def aggregate(
    days: Sequence[InstantLike],
    ranged_events: Iterable[TimedEvent],
    point_events: Iterable[TimedEvent],
    deadline_events: Iterable[DeadlineEvent],
    *,
    tz: str = "local",
) -> Dict[str, DayBucket]:
    """Count programs, agenda items and KPI deadlines touching each day.

    Ranged and point events count when their ``[start, end]`` overlaps the
    day's ``[00:00, 23:59:59.999]``; deadlines count on their calendar day.
    Entities with malformed timestamps are skipped.
    """

    ranged = list(iter_timed(ranged_events, "program", tz))
    points = list(iter_timed(point_events, "agenda", tz))
    deadlines = list(iter_deadlines(deadline_events, "kpi", tz))

    buckets: Dict[str, DayBucket] = {}
    for day in days:
        day_start, day_end = day_bounds(day, tz)
        buckets[date_key(day_start, tz)] = DayBucket(
            ranged_count=sum(1 for item in ranged if overlaps(item.start, item.end, day_start, day_end)),
            point_count=sum(1 for item in points if overlaps(item.start, item.end, day_start, day_end)),
            deadline_count=sum(1 for item in deadlines if occurs_on_day(item.deadline, day_start, tz)),
        )
    return buckets


def list_day_items(
    days: Sequence[InstantLike],
    snapshot: CalendarSnapshot,
    *,
    tz: str = "local",
) -> List[DayListing]:
    """Items per day for list views; days without items are left out."""

    timed: List[NormalizedTimed] = [
        *iter_timed(snapshot.programs, "program", tz),
        *iter_timed(snapshot.agenda_items, "agenda", tz),
    ]
    deadlines: List[NormalizedDeadline] = list(iter_deadlines(snapshot.kpis, "kpi", tz))

    listings: List[DayListing] = []
    for day in days:
        day_start, day_end = day_bounds(day, tz)
        items = [
            DayItem(category=item.category, event=item.event)
            for item in timed
            if overlaps(item.start, item.end, day_start, day_end)
        ]
        items.extend(
            DayItem(category=item.category, event=item.event)
            for item in deadlines
            if occurs_on_day(item.deadline, day_start, tz)
        )
        if items:
            listings.append(DayListing(date_key=date_key(day_start, tz), day=day_start, items=items))
    return listings


def filter_snapshot(snapshot: CalendarSnapshot, window: ViewWindow, *, tz: str = "local") -> CalendarSnapshot:
    """Keep only entities visible somewhere inside ``window``."""

    return CalendarSnapshot(
        programs=[
            item.event
            for item in iter_timed(snapshot.programs, "program", tz)
            if overlaps(item.start, item.end, window.start, window.end)
        ],
        agenda_items=[
            item.event
            for item in iter_timed(snapshot.agenda_items, "agenda", tz)
            if overlaps(item.start, item.end, window.start, window.end)
        ],
        kpis=[
            item.event
            for item in iter_deadlines(snapshot.kpis, "kpi", tz)
            if window.start <= item.deadline <= window.end
        ],
    )


__all__ = ["aggregate", "list_day_items", "filter_snapshot"]
