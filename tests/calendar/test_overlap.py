from datetime import datetime, timedelta, timezone

import pytest

from program_calendar.calendar.overlap import occurs_on_day, overlaps

T0 = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def _at(hours: int) -> datetime:
    return T0 + timedelta(hours=hours)


def test_touching_boundaries_overlap():
    assert overlaps(_at(0), _at(2), _at(2), _at(4))
    assert overlaps(_at(2), _at(4), _at(0), _at(2))


def test_disjoint_ranges_do_not_overlap():
    assert not overlaps(_at(0), _at(1), _at(2), _at(3))
    assert not overlaps(_at(5), _at(6), _at(2), _at(3))


def test_containment_overlaps():
    assert overlaps(_at(0), _at(10), _at(3), _at(4))
    assert overlaps(_at(3), _at(4), _at(0), _at(10))


@pytest.mark.parametrize(
    "first, second",
    [
        ((0, 2), (1, 3)),
        ((0, 2), (2, 3)),
        ((0, 2), (3, 4)),
        ((1, 1), (0, 5)),
        ((4, 4), (4, 4)),
    ],
)
def test_overlap_is_symmetric(first, second):
    s, e = (_at(h) for h in first)
    ws, we = (_at(h) for h in second)

    assert overlaps(s, e, ws, we) == overlaps(ws, we, s, e)


def test_point_in_time_uses_calendar_day():
    late = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)

    assert occurs_on_day(late, datetime(2025, 3, 10, tzinfo=timezone.utc), "UTC")
    assert not occurs_on_day(late, datetime(2025, 3, 11, tzinfo=timezone.utc), "UTC")
