"""Pydantic models describing records returned by the dashboard data actor."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Mapping, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from program_calendar.calendar.models import CalendarSnapshot, DeadlineEvent, TimedEvent
from program_calendar.util.logging_utils import get_logger

_logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Ids arrive as bigints from the data actor.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ProgramRecord(_Record):
    """A program: a ranged entity active from start to end date."""

    id: str
    name: str
    unit: str = ""
    person_in_charge: str = Field(default="", alias="personInCharge")
    status: str = "planning"
    priority: str = "middle"
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")

    @field_validator("person_in_charge", mode="before")
    @classmethod
    def _pic_name(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return value.get("name", "")
        return value

    @model_validator(mode="after")
    def _ordered(self) -> "ProgramRecord":
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self

    def to_event(self) -> TimedEvent:
        return TimedEvent(id=self.id, start=self.start_date, end=self.end_date, label=self.name)


class AgendaItemRecord(_Record):
    """A team agenda item with its own start and end time."""

    id: str
    title: str
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    category: str = ""
    attendees: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ordered(self) -> "AgendaItemRecord":
        if self.start_time > self.end_time:
            raise ValueError("startTime must not be after endTime")
        return self

    def to_event(self) -> TimedEvent:
        return TimedEvent(id=self.id, start=self.start_time, end=self.end_time, label=self.title)


class KpiRecord(_Record):
    """A KPI; only those with a deadline show up on the calendar."""

    id: str
    name: str
    deadline: datetime | None = None
    related_program_id: str | None = Field(default=None, alias="relatedProgramId")
    status: str = ""

    @field_validator("related_program_id", mode="before")
    @classmethod
    def _stringify_program_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_event(self) -> DeadlineEvent:
        return DeadlineEvent(id=self.id, deadline=self.deadline, label=self.name)


class ProgramFilter(BaseModel):
    """Dashboard program filters; empty criteria match everything."""

    division: str = ""
    pic: str = ""
    status: str = ""
    priority: str = ""

    def matches(self, program: ProgramRecord) -> bool:
        if self.division and program.unit != self.division:
            return False
        if self.pic and program.person_in_charge != self.pic:
            return False
        if self.status and program.status != self.status:
            return False
        if self.priority and program.priority != self.priority:
            return False
        return True

    def apply(self, programs: Iterable[ProgramRecord]) -> List[ProgramRecord]:
        return [program for program in programs if self.matches(program)]


class CalendarRecords(BaseModel):
    programs: List[ProgramRecord] = Field(default_factory=list)
    agenda_items: List[AgendaItemRecord] = Field(default_factory=list)
    kpis: List[KpiRecord] = Field(default_factory=list)

    def to_snapshot(self, program_filter: ProgramFilter | None = None) -> CalendarSnapshot:
        programs = program_filter.apply(self.programs) if program_filter else self.programs
        return CalendarSnapshot(
            programs=[record.to_event() for record in programs],
            agenda_items=[record.to_event() for record in self.agenda_items],
            kpis=[record.to_event() for record in self.kpis],
        )


def _parse_each(model: Type[RecordT], raw_items: Sequence[Any], label: str) -> List[RecordT]:
    parsed: List[RecordT] = []
    for raw in raw_items:
        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as exc:
            _logger.warning("Skipping malformed %s record: %s", label, exc.errors()[0].get("msg", exc))
        except TypeError as exc:
            # naive and aware timestamps mixed within one record
            _logger.warning("Skipping malformed %s record: %s", label, exc)
    return parsed


def records_from_payload(payload: Mapping[str, Any]) -> CalendarRecords:
    """Validate each record on its own so one bad record never drops the rest.

    Accepts the data actor's key names (``agendaItems``) as well as snake case.
    """

    raw_agenda = payload.get("agenda_items", payload.get("agendaItems", [])) or []
    return CalendarRecords(
        programs=_parse_each(ProgramRecord, payload.get("programs", []) or [], "program"),
        agenda_items=_parse_each(AgendaItemRecord, raw_agenda, "agenda"),
        kpis=_parse_each(KpiRecord, payload.get("kpis", []) or [], "kpi"),
    )


__all__ = [
    "ProgramRecord",
    "AgendaItemRecord",
    "KpiRecord",
    "ProgramFilter",
    "CalendarRecords",
    "records_from_payload",
]
