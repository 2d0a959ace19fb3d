"""Calendar value types shared by the availability, conflict and pricing code."""

from __future__ import annotations

import calendar
import datetime
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

WEEKDAY_NAMES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DEFAULT_OPENING = datetime.time(8, 0)
DEFAULT_CLOSING = datetime.time(20, 0)


class ScheduledBooking(Protocol):
    """Anything carrying an inclusive date range and a booking status."""

    start_date: datetime.date
    end_date: datetime.date
    status: str


@dataclass(frozen=True, slots=True, order=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: datetime.date
    end: datetime.date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("start_date must be on or before end_date")

    @classmethod
    def of(cls, booking: ScheduledBooking) -> "DateRange":
        return cls(booking.start_date, booking.end_date)

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    @property
    def days(self) -> int:
        return self.nights + 1

    def contains(self, day: datetime.date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: "DateRange") -> bool:
        return self.start <= other.end and self.end >= other.start

    def iter_dates(self) -> Iterator[datetime.date]:
        # Counting offsets never steps past date.max.
        for offset in range(self.days):
            yield self.start + datetime.timedelta(days=offset)


@dataclass(frozen=True, slots=True, order=True)
class AvailabilityDay:
    """Derived availability for one date; never persisted."""

    date: datetime.date
    is_available: bool

    def to_dict(self) -> dict[str, object]:
        return {"date": self.date.isoformat(), "is_available": self.is_available}


@dataclass(frozen=True, slots=True)
class AvailabilityOverride:
    """A host pinning one date to explicitly available or unavailable."""

    date: datetime.date
    is_available: bool


@dataclass(frozen=True, slots=True)
class WeeklySchedule:
    """Owner's default open weekdays and pickup hours."""

    available_days: frozenset[str] = frozenset(WEEKDAY_NAMES)
    start_time: datetime.time = DEFAULT_OPENING
    end_time: datetime.time = DEFAULT_CLOSING

    def __post_init__(self) -> None:
        unknown = set(self.available_days) - set(WEEKDAY_NAMES)
        if unknown:
            raise ValueError(f"Unknown weekday names: {sorted(unknown)}")
        if self.start_time > self.end_time:
            raise ValueError("Weekly availability must start before it ends")

    @classmethod
    def from_names(
        cls,
        names: Iterable[str],
        start_time: datetime.time = DEFAULT_OPENING,
        end_time: datetime.time = DEFAULT_CLOSING,
    ) -> "WeeklySchedule":
        return cls(
            available_days=frozenset(name.strip().lower() for name in names),
            start_time=start_time,
            end_time=end_time,
        )

    def allows(self, day: datetime.date) -> bool:
        return WEEKDAY_NAMES[day.weekday()] in self.available_days

    def covers(self, moment: datetime.time) -> bool:
        return self.start_time <= moment <= self.end_time


def days_in_month(year: int, month_index: int) -> int:
    """Number of days in the month; ``month_index`` is zero-based."""
    _check_month_index(month_index)
    return calendar.monthrange(year, month_index + 1)[1]


def month_range(year: int, month_index: int) -> DateRange:
    """The whole month as an inclusive range."""
    last_day = days_in_month(year, month_index)
    return DateRange(
        datetime.date(year, month_index + 1, 1),
        datetime.date(year, month_index + 1, last_day),
    )


def month_dates(year: int, month_index: int) -> list[datetime.date]:
    """Every date of the month, earliest first."""
    return list(month_range(year, month_index).iter_dates())


def iter_months(year: int, month_index: int, count: int) -> Iterator[tuple[int, int]]:
    """Yield ``count`` consecutive ``(year, month_index)`` pairs."""
    _check_month_index(month_index)
    if count < 1:
        raise ValueError("count must be at least 1")
    for offset in range(count):
        absolute = year * 12 + month_index + offset
        yield absolute // 12, absolute % 12


def _check_month_index(month_index: int) -> None:
    if not 0 <= month_index <= 11:
        raise ValueError("month_index must be between 0 and 11")
