"""Tests for the availability calculator."""

from __future__ import annotations

import datetime
from dataclasses import dataclass

import pytest

from rento.services.availability_service import (
    compute_day_availability,
    compute_month_availability,
    unavailable_dates,
)
from rento.services.calendar_types import (
    AvailabilityOverride,
    DateRange,
    WeeklySchedule,
    days_in_month,
)

MARCH = 2  # zero-based


@dataclass
class StubBooking:
    start_date: datetime.date
    end_date: datetime.date
    status: str = "confirmed"


def _unavailable(days) -> list[int]:
    return [day.date.day for day in days if not day.is_available]


def test_confirmed_booking_blocks_its_inclusive_range() -> None:
    booking = StubBooking(datetime.date(2024, 3, 10), datetime.date(2024, 3, 15))

    days = compute_month_availability(2024, MARCH, bookings=[booking])

    assert len(days) == 31
    assert _unavailable(days) == [10, 11, 12, 13, 14, 15]


def test_unavailable_override_closes_a_single_day() -> None:
    override = AvailabilityOverride(datetime.date(2024, 3, 20), is_available=False)

    days = compute_month_availability(2024, MARCH, bookings=[], overrides=[override])

    assert _unavailable(days) == [20]


@pytest.mark.parametrize(
    ("year", "month_index"),
    [(2024, 1), (2023, 1), (2024, 3), (2024, 11), (2025, 0)],
)
def test_month_output_covers_every_day_once(year: int, month_index: int) -> None:
    bookings = [
        StubBooking(datetime.date(year, month_index + 1, 2), datetime.date(year, month_index + 1, 4)),
    ]

    days = compute_month_availability(year, month_index, bookings=bookings)
    dates = [day.date for day in days]

    assert len(days) == days_in_month(year, month_index)
    assert dates == sorted(set(dates))
    assert all(day.month == month_index + 1 for day in dates)


def test_booking_beats_an_available_override() -> None:
    booking = StubBooking(datetime.date(2024, 3, 10), datetime.date(2024, 3, 12), "pending")
    override = AvailabilityOverride(datetime.date(2024, 3, 11), is_available=True)

    day = compute_day_availability(
        datetime.date(2024, 3, 11), bookings=[booking], overrides=[override]
    )

    assert day.is_available is False


def test_override_beats_the_weekly_schedule() -> None:
    weekdays_only = WeeklySchedule.from_names(
        ["monday", "tuesday", "wednesday", "thursday", "friday"]
    )
    saturday = datetime.date(2024, 3, 16)
    wednesday = datetime.date(2024, 3, 13)
    overrides = [
        AvailabilityOverride(saturday, is_available=True),
        AvailabilityOverride(wednesday, is_available=False),
    ]

    days = compute_month_availability(
        2024, MARCH, bookings=[], overrides=overrides, schedule=weekdays_only
    )
    by_date = {day.date: day.is_available for day in days}

    assert by_date[saturday] is True
    assert by_date[wednesday] is False
    assert by_date[datetime.date(2024, 3, 17)] is False  # Sunday, weekly default
    assert by_date[datetime.date(2024, 3, 14)] is True


def test_cancelled_bookings_do_not_block() -> None:
    booking = StubBooking(datetime.date(2024, 3, 1), datetime.date(2024, 3, 31), "cancelled")

    days = compute_month_availability(2024, MARCH, bookings=[booking])

    assert _unavailable(days) == []


def test_booking_spanning_months_is_clipped_to_the_month() -> None:
    booking = StubBooking(datetime.date(2024, 2, 27), datetime.date(2024, 3, 2))

    days = compute_month_availability(2024, MARCH, bookings=[booking])

    assert _unavailable(days) == [1, 2]


def test_later_override_for_the_same_date_wins() -> None:
    day = datetime.date(2024, 3, 5)
    overrides = [
        AvailabilityOverride(day, is_available=False),
        AvailabilityOverride(day, is_available=True),
    ]

    assert compute_day_availability(day, bookings=[], overrides=overrides).is_available


def test_unavailable_dates_lists_closed_days_in_order() -> None:
    booking = StubBooking(datetime.date(2024, 3, 4), datetime.date(2024, 3, 5))
    override = AvailabilityOverride(datetime.date(2024, 3, 2), is_available=False)

    closed = unavailable_dates(
        DateRange(datetime.date(2024, 3, 1), datetime.date(2024, 3, 6)),
        bookings=[booking],
        overrides=[override],
    )

    assert closed == [
        datetime.date(2024, 3, 2),
        datetime.date(2024, 3, 4),
        datetime.date(2024, 3, 5),
    ]


def test_month_ending_on_the_last_representable_date() -> None:
    booking = StubBooking(datetime.date(9999, 12, 30), datetime.date.max)

    days = compute_month_availability(9999, 11, bookings=[booking])

    assert len(days) == 31
    assert _unavailable(days) == [30, 31]
