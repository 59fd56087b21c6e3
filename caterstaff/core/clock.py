"""Time source used by the confirmation workflow.

Every expiry check and escalation computation asks a Clock for the
current time instead of reading the wall clock directly, so tests can
pin time to an exact instant.
"""
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock frozen at a given instant, movable with advance()."""

    def __init__(self, instant: datetime):
        self._instant = as_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs) -> None:
        self._instant = self._instant + timedelta(**kwargs)

    def set(self, instant: datetime) -> None:
        self._instant = as_utc(instant)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes.

    SQLite drops tzinfo on the way back out, so stored timestamps come
    back naive even though they were written as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


_system_clock = SystemClock()


def get_clock() -> Clock:
    """Dependency returning the application clock."""
    return _system_clock
