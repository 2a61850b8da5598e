"""Instant coercion and local calendar-day helpers built on pendulum."""
from __future__ import annotations

import datetime
from typing import Union, cast

import pendulum

InstantLike = Union[datetime.datetime, datetime.date, int, float, str]

# Epoch values above this are milliseconds (the data actor stores ms).
_MS_THRESHOLD = 10**11


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def ensure_timezone(value: datetime.datetime, tz: str = "UTC") -> pendulum.DateTime:
    """Naive datetimes are interpreted in ``tz``; aware ones keep their offset."""

    if value.tzinfo is None:
        return pendulum.instance(value, tz=tz)
    return pendulum.instance(value)


def to_instant(value: InstantLike, tz: str = "UTC") -> pendulum.DateTime:
    """Coerce a raw timestamp into an aware UTC instant.

    Accepts datetimes, dates (local midnight in ``tz``), epoch numbers in
    seconds or milliseconds and ISO-8601 strings. Raises ``ValueError`` or
    ``TypeError`` for anything else.
    """

    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    if isinstance(value, datetime.datetime):
        return ensure_timezone(value, tz).in_tz("UTC")
    if isinstance(value, datetime.date):
        return pendulum.datetime(value.year, value.month, value.day, tz=tz).in_tz("UTC")
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _MS_THRESHOLD else value
        return pendulum.from_timestamp(seconds, tz="UTC")
    if isinstance(value, str):
        if not value.strip():
            raise ValueError("empty timestamp")
        parsed = pendulum.parse(value, tz=tz)
        if not isinstance(parsed, pendulum.DateTime):
            if isinstance(parsed, pendulum.Date):
                return pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=tz).in_tz("UTC")
            raise ValueError(f"not a point in time: {value!r}")
        return parsed.in_tz("UTC")
    raise TypeError(f"unsupported timestamp type: {type(value).__name__}")


def local_midnight(value: InstantLike, tz: str = "local") -> pendulum.DateTime:
    """Midnight of the calendar day ``value`` falls on, in ``tz``."""

    if isinstance(value, datetime.datetime):
        local = ensure_timezone(value, tz).in_tz(tz)
    elif isinstance(value, datetime.date):
        return pendulum.datetime(value.year, value.month, value.day, tz=tz)
    else:
        local = to_instant(value, tz).in_tz(tz)
    return cast(pendulum.DateTime, local.start_of("day"))


def end_of_local_day(value: InstantLike, tz: str = "local") -> pendulum.DateTime:
    """Last rendered millisecond (23:59:59.999) of the day ``value`` falls on."""

    end = local_midnight(value, tz).end_of("day")
    return end.set(microsecond=999_000)


def day_bounds(value: InstantLike, tz: str = "local") -> tuple[pendulum.DateTime, pendulum.DateTime]:
    return local_midnight(value, tz), end_of_local_day(value, tz)


def same_local_day(left: InstantLike, right: InstantLike, tz: str = "local") -> bool:
    return local_midnight(left, tz).date() == local_midnight(right, tz).date()


def date_key(value: InstantLike, tz: str = "local") -> str:
    """Normalized ``YYYY-MM-DD`` key of the local calendar day."""

    return local_midnight(value, tz).format("YYYY-MM-DD")


def days_since_sunday(value: datetime.date) -> int:
    return value.isoweekday() % 7


__all__ = [
    "InstantLike",
    "now_utc",
    "ensure_timezone",
    "to_instant",
    "local_midnight",
    "end_of_local_day",
    "day_bounds",
    "same_local_day",
    "date_key",
    "days_since_sunday",
]
