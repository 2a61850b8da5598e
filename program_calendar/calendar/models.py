"""Core calendar types shared by the window, aggregation and reminder code."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

EventCategory = Literal["program", "agenda", "kpi"]


class ViewMode(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    AGENDA = "agenda"


@dataclass(frozen=True)
class TimedEvent:
    """A program or agenda item: a closed ``[start, end]`` range of time."""

    id: str
    start: datetime
    end: datetime
    label: str = ""


@dataclass(frozen=True)
class DeadlineEvent:
    """A KPI; without a deadline it never shows up on the calendar."""

    id: str
    deadline: Optional[datetime] = None
    label: str = ""


@dataclass(frozen=True)
class ViewWindow:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")


@dataclass
class DayBucket:
    ranged_count: int = 0
    point_count: int = 0
    deadline_count: int = 0

    @property
    def total(self) -> int:
        return self.ranged_count + self.point_count + self.deadline_count


@dataclass(frozen=True)
class DayItem:
    category: EventCategory
    event: TimedEvent | DeadlineEvent


@dataclass
class DayListing:
    date_key: str
    day: datetime
    items: List[DayItem] = field(default_factory=list)


@dataclass
class CalendarSnapshot:
    """Entity collections as returned by the read accessor."""

    programs: List[TimedEvent] = field(default_factory=list)
    agenda_items: List[TimedEvent] = field(default_factory=list)
    kpis: List[DeadlineEvent] = field(default_factory=list)


__all__ = [
    "EventCategory",
    "ViewMode",
    "TimedEvent",
    "DeadlineEvent",
    "ViewWindow",
    "DayBucket",
    "DayItem",
    "DayListing",
    "CalendarSnapshot",
]
