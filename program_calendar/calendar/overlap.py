"""Closed-interval intersection tests."""
from __future__ import annotations

from datetime import datetime

from program_calendar.util.time_utils import InstantLike, same_local_day


def overlaps(
    range_start: datetime,
    range_end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> bool:
    """True when ``[range_start, range_end]`` meets ``[window_start, window_end]``.

    Touching boundaries count as an overlap.
    """

    return range_end >= window_start and range_start <= window_end


def occurs_on_day(instant: InstantLike, day: InstantLike, tz: str = "local") -> bool:
    """Point-in-time check: same local calendar day, not interval overlap."""

    return same_local_day(instant, day, tz)


__all__ = ["overlaps", "occurs_on_day"]
