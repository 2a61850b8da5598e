"""Visible date window for the month, week, day and agenda views."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import pendulum

from program_calendar.calendar.models import ViewMode, ViewWindow
from program_calendar.util.time_utils import (
    InstantLike,
    day_bounds,
    days_since_sunday,
    end_of_local_day,
    local_midnight,
    now_utc,
)

DEFAULT_AGENDA_DAYS = 14
DEFAULT_AGENDA_STEP_DAYS = 7


def _week_start(day: pendulum.DateTime) -> pendulum.DateTime:
    # Weeks start on Sunday.
    return day.subtract(days=days_since_sunday(day))


def compute_window(
    reference: InstantLike,
    mode: ViewMode | str,
    *,
    tz: str = "local",
    agenda_days: int = DEFAULT_AGENDA_DAYS,
) -> ViewWindow:
    """Inclusive ``[start, end]`` window rendered for ``reference`` in ``mode``.

    Month windows are padded to whole Sunday-to-Saturday weeks. The agenda
    window runs from the reference midnight to the midnight ``agenda_days``
    later.
    """

    view = ViewMode(mode)
    midnight = local_midnight(reference, tz)

    if view is ViewMode.MONTH:
        first = midnight.start_of("month")
        last = local_midnight(midnight.end_of("month"), tz)
        end_day = last.add(days=6 - days_since_sunday(last))
        return ViewWindow(start=_week_start(first), end=end_of_local_day(end_day, tz))
    if view is ViewMode.WEEK:
        start = _week_start(midnight)
        return ViewWindow(start=start, end=end_of_local_day(start.add(days=6), tz))
    if view is ViewMode.DAY:
        start, end = day_bounds(midnight, tz)
        return ViewWindow(start=start, end=end)
    return ViewWindow(start=midnight, end=midnight.add(days=agenda_days))


def shift_reference(
    reference: InstantLike,
    mode: ViewMode | str,
    step: int = 1,
    *,
    tz: str = "local",
    agenda_step_days: int = DEFAULT_AGENDA_STEP_DAYS,
) -> pendulum.DateTime:
    """Move the reference date ``step`` view units forward (negative for back).

    Month steps clamp to the last day of shorter months (Jan 31 -> Feb 28/29).
    """

    view = ViewMode(mode)
    midnight = local_midnight(reference, tz)
    if view is ViewMode.MONTH:
        return midnight.add(months=step)
    if view is ViewMode.WEEK:
        return midnight.add(weeks=step)
    if view is ViewMode.DAY:
        return midnight.add(days=step)
    return midnight.add(days=agenda_step_days * step)


def today_reference(tz: str = "local", now: Optional[datetime] = None) -> pendulum.DateTime:
    return local_midnight(now or now_utc(), tz)


def window_days(window: ViewWindow, tz: str = "local") -> List[pendulum.DateTime]:
    """Local midnights of every day whose midnight precedes ``window.end``."""

    days: List[pendulum.DateTime] = []
    cursor = local_midnight(window.start, tz)
    while cursor < window.end:
        days.append(cursor)
        cursor = cursor.add(days=1)
    return days


__all__ = [
    "DEFAULT_AGENDA_DAYS",
    "DEFAULT_AGENDA_STEP_DAYS",
    "compute_window",
    "shift_reference",
    "today_reference",
    "window_days",
]
