"""Per-day availability of a car, derived from bookings and host rules."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from rento.core.config import get_settings
from rento.services import booking_store, car_service
from rento.services.calendar_types import (
    AvailabilityDay,
    AvailabilityOverride,
    DateRange,
    ScheduledBooking,
    WeeklySchedule,
    iter_months,
    month_range,
)
from rento.services.conflict_service import is_active


@dataclass(slots=True)
class MonthAvailability:
    """Availability for every day of one month."""

    year: int
    month_index: int
    days: list[AvailabilityDay]

    def to_dict(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month_index": self.month_index,
            "days": [day.to_dict() for day in self.days],
        }


def _override_map(
    overrides: Iterable[AvailabilityOverride],
) -> dict[datetime.date, bool]:
    # Later entries for the same date replace earlier ones.
    return {override.date: override.is_available for override in overrides}


def _booked_ranges(bookings: Iterable[ScheduledBooking]) -> list[DateRange]:
    return [DateRange.of(booking) for booking in bookings if is_active(booking.status)]


def _resolve(
    day: datetime.date,
    booked: list[DateRange],
    overrides: dict[datetime.date, bool],
    schedule: WeeklySchedule,
) -> bool:
    if any(span.contains(day) for span in booked):
        return False
    if day in overrides:
        return overrides[day]
    return schedule.allows(day)


def compute_day_availability(
    day: datetime.date,
    *,
    bookings: Iterable[ScheduledBooking],
    overrides: Iterable[AvailabilityOverride] = (),
    schedule: WeeklySchedule | None = None,
) -> AvailabilityDay:
    """Booking conflicts beat date overrides, which beat the weekly schedule."""
    available = _resolve(
        day, _booked_ranges(bookings), _override_map(overrides), schedule or WeeklySchedule()
    )
    return AvailabilityDay(date=day, is_available=available)


def compute_range_availability(
    date_range: DateRange,
    *,
    bookings: Iterable[ScheduledBooking],
    overrides: Iterable[AvailabilityOverride] = (),
    schedule: WeeklySchedule | None = None,
) -> list[AvailabilityDay]:
    """Return one availability record per date of ``date_range``, in order."""
    booked = [span for span in _booked_ranges(bookings) if span.overlaps(date_range)]
    override_map = _override_map(overrides)
    weekly = schedule or WeeklySchedule()
    return [
        AvailabilityDay(date=day, is_available=_resolve(day, booked, override_map, weekly))
        for day in date_range.iter_dates()
    ]


def compute_month_availability(
    year: int,
    month_index: int,
    *,
    bookings: Iterable[ScheduledBooking],
    overrides: Iterable[AvailabilityOverride] = (),
    schedule: WeeklySchedule | None = None,
) -> list[AvailabilityDay]:
    """Availability for each day of a month; ``month_index`` is zero-based."""
    return compute_range_availability(
        month_range(year, month_index),
        bookings=bookings,
        overrides=overrides,
        schedule=schedule,
    )


def unavailable_dates(
    date_range: DateRange,
    *,
    bookings: Iterable[ScheduledBooking],
    overrides: Iterable[AvailabilityOverride] = (),
    schedule: WeeklySchedule | None = None,
) -> list[datetime.date]:
    """Dates within ``date_range`` that cannot be rented."""
    return [
        day.date
        for day in compute_range_availability(
            date_range, bookings=bookings, overrides=overrides, schedule=schedule
        )
        if not day.is_available
    ]


async def get_month_availability(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    year: int,
    month_index: int,
    months: int = 1,
) -> list[MonthAvailability] | None:
    """Load a car's bookings and rules and project ``months`` calendar months."""
    limit = get_settings().max_availability_months
    if not 1 <= months <= limit:
        raise ValueError(f"months must be between 1 and {limit}")
    periods = list(iter_months(year, month_index, months))

    car = await car_service.get_car(session, car_id=car_id)
    if car is None:
        return None

    window = DateRange(
        month_range(*periods[0]).start, month_range(*periods[-1]).end
    )
    bookings = await booking_store.fetch_active_bookings(
        session, car_id=car_id, within=window
    )
    overrides = car_service.overrides_for(car)
    schedule = car_service.schedule_for(car)
    return [
        MonthAvailability(
            year=period_year,
            month_index=period_month,
            days=compute_month_availability(
                period_year,
                period_month,
                bookings=bookings,
                overrides=overrides,
                schedule=schedule,
            ),
        )
        for period_year, period_month in periods
    ]


async def get_unavailable_dates(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    date_range: DateRange,
) -> list[datetime.date] | None:
    """Dates a renter cannot pick for the car, or ``None`` for an unknown car."""
    limit = get_settings().max_calendar_span_days
    if date_range.days > limit:
        raise ValueError(f"Date window must span at most {limit} days")
    car = await car_service.get_car(session, car_id=car_id)
    if car is None:
        return None
    bookings = await booking_store.fetch_active_bookings(
        session, car_id=car_id, within=date_range
    )
    return unavailable_dates(
        date_range,
        bookings=bookings,
        overrides=car_service.overrides_for(car),
        schedule=car_service.schedule_for(car),
    )
