from datetime import date, datetime, timezone
from types import SimpleNamespace

import pendulum

from program_calendar.calendar.aggregation import aggregate, filter_snapshot, list_day_items
from program_calendar.calendar.models import CalendarSnapshot, DeadlineEvent, TimedEvent, ViewWindow

TZ = "UTC"


def _at(day: int, hour: int = 0, month: int = 3) -> datetime:
    return datetime(2025, month, day, hour, 0, tzinfo=timezone.utc)


DAYS = [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12), date(2025, 3, 13)]


def test_ranged_event_counts_on_every_day_it_spans():
    program = TimedEvent(id="p1", start=_at(10, 10), end=_at(12, 10), label="Rollout")

    buckets = aggregate(DAYS, [program], [], [], tz=TZ)

    assert [buckets[key].ranged_count for key in sorted(buckets)] == [1, 1, 1, 0]
    assert list(buckets) == ["2025-03-10", "2025-03-11", "2025-03-12", "2025-03-13"]


def test_point_events_and_deadlines_are_counted_separately():
    agenda = [
        TimedEvent(id="a1", start=_at(11, 9), end=_at(11, 10), label="Standup"),
        TimedEvent(id="a2", start=_at(11, 23), end=_at(12, 1), label="Night shift"),
    ]
    kpis = [
        DeadlineEvent(id="k1", deadline=_at(13, 23), label="Q1 revenue"),
        DeadlineEvent(id="k2", deadline=None, label="No deadline"),
    ]

    buckets = aggregate(DAYS, [], agenda, kpis, tz=TZ)

    assert buckets["2025-03-11"].point_count == 2
    assert buckets["2025-03-12"].point_count == 1
    assert buckets["2025-03-13"].deadline_count == 1
    assert sum(bucket.deadline_count for bucket in buckets.values()) == 1
    assert buckets["2025-03-10"].total == 0


def test_day_boundaries_follow_timezone():
    # 18:00 UTC on the 10th is 01:00 on the 11th in Jakarta.
    kpi = DeadlineEvent(id="k1", deadline=_at(10, 18), label="Late deadline")

    utc = aggregate(DAYS, [], [], [kpi], tz="UTC")
    jakarta = aggregate(DAYS, [], [], [kpi], tz="Asia/Jakarta")

    assert utc["2025-03-10"].deadline_count == 1
    assert jakarta["2025-03-10"].deadline_count == 0
    assert jakarta["2025-03-11"].deadline_count == 1


def test_malformed_entities_are_skipped():
    good = TimedEvent(id="p1", start=_at(10, 8), end=_at(10, 9))
    unparseable = TimedEvent(id="p2", start="garbage", end=_at(10, 9))  # type: ignore[arg-type]
    missing = TimedEvent(id="p3", start=None, end=None)  # type: ignore[arg-type]
    reversed_range = TimedEvent(id="p4", start=_at(11), end=_at(10))
    bad_kpi = DeadlineEvent(id="k1", deadline="soon")  # type: ignore[arg-type]

    buckets = aggregate(DAYS, [good, unparseable, missing, reversed_range, object()], [], [bad_kpi], tz=TZ)

    assert buckets["2025-03-10"].ranged_count == 1
    assert buckets["2025-03-11"].ranged_count == 0
    assert all(bucket.deadline_count == 0 for bucket in buckets.values())


def test_epoch_millisecond_timestamps_are_accepted():
    start_ms = int(_at(12, 6).timestamp() * 1000)
    program = TimedEvent(id="p1", start=start_ms, end=start_ms + 3_600_000)  # type: ignore[arg-type]

    buckets = aggregate(DAYS, [program], [], [], tz=TZ)

    assert buckets["2025-03-12"].ranged_count == 1
    assert buckets["2025-03-11"].ranged_count == 0


def test_list_day_items_omits_empty_days():
    snapshot = CalendarSnapshot(
        programs=[TimedEvent(id="p1", start=_at(10, 10), end=_at(11, 10), label="Rollout")],
        agenda_items=[TimedEvent(id="a1", start=_at(11, 9), end=_at(11, 10), label="Standup")],
        kpis=[DeadlineEvent(id="k1", deadline=_at(11, 17), label="Q1 revenue")],
    )

    listings = list_day_items(DAYS, snapshot, tz=TZ)

    assert [listing.date_key for listing in listings] == ["2025-03-10", "2025-03-11"]
    assert [item.category for item in listings[1].items] == ["program", "agenda", "kpi"]
    assert listings[0].items[0].event.id == "p1"


def test_filter_snapshot_keeps_only_visible_entities():
    window = ViewWindow(
        start=pendulum.datetime(2025, 3, 10, tz=TZ),
        end=pendulum.datetime(2025, 3, 16, 23, 59, 59, 999_000, tz=TZ),
    )
    snapshot = CalendarSnapshot(
        programs=[
            TimedEvent(id="inside", start=_at(1), end=_at(10)),
            TimedEvent(id="before", start=_at(1), end=_at(9, 23)),
        ],
        agenda_items=[
            TimedEvent(id="after", start=_at(17), end=_at(17, 1)),
            TimedEvent(id="edge", start=_at(16, 23), end=_at(17, 1)),
        ],
        kpis=[
            DeadlineEvent(id="due", deadline=_at(16, 12)),
            DeadlineEvent(id="late", deadline=_at(20)),
            DeadlineEvent(id="none"),
        ],
    )

    visible = filter_snapshot(snapshot, window, tz=TZ)

    assert [event.id for event in visible.programs] == ["inside"]
    assert [event.id for event in visible.agenda_items] == ["edge"]
    assert [event.id for event in visible.kpis] == ["due"]


def test_entities_only_need_id_and_times():
    bare = SimpleNamespace(id=42, start=_at(11, 8), end=_at(11, 9))
    bare_kpi = SimpleNamespace(id=7, deadline=_at(12, 8))

    buckets = aggregate(DAYS, [bare], [], [bare_kpi], tz=TZ)
    listings = list_day_items(DAYS, CalendarSnapshot(programs=[bare], kpis=[bare_kpi]), tz=TZ)

    assert buckets["2025-03-11"].ranged_count == 1
    assert buckets["2025-03-12"].deadline_count == 1
    assert [listing.items[0].event for listing in listings] == [bare, bare_kpi]
