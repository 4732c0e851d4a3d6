"""Clock and timezone helpers.

Appointment and subscription instants are stored as naive UTC datetimes.
Anything read from a clock is timezone-aware and is converted with
``to_storage`` before it reaches a query.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock of the running process, always returned in UTC."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Clock pinned to one instant; tests move it with ``advance``."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta) -> None:
        self._instant = self._instant + delta


def to_storage(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def business_now(clock: Clock, tz: ZoneInfo) -> datetime:
    """Current instant expressed in the business timezone."""
    return clock.now().astimezone(tz)


def combine_local(day: date, wall_time: time, tz: ZoneInfo) -> datetime:
    """Turn a local booking date and wall-clock time into an aware instant."""
    return datetime.combine(day, wall_time).replace(tzinfo=tz)


def isoformat_or_none(value: datetime | None) -> str | None:
    value = from_storage(value)
    return value.isoformat() if value else None
