"""Detect overlaps between a proposed rental and a car's active bookings."""

from __future__ import annotations

from collections.abc import Iterable

from rento.models.booking import ACTIVE_BOOKING_STATUSES, BookingStatus
from rento.services.calendar_types import DateRange, ScheduledBooking


def is_active(status: BookingStatus | str) -> bool:
    """Pending and confirmed bookings hold the car; cancelled ones do not."""
    return BookingStatus(status) in ACTIVE_BOOKING_STATUSES


def ranges_overlap(first: DateRange, second: DateRange) -> bool:
    """Inclusive intersection; ranges sharing a boundary day overlap."""
    return first.start <= second.end and first.end >= second.start


def find_conflicts(
    bookings: Iterable[ScheduledBooking], proposed: DateRange
) -> list[ScheduledBooking]:
    """Return the active bookings overlapping ``proposed``, earliest first."""
    conflicts = [
        booking
        for booking in bookings
        if is_active(booking.status) and ranges_overlap(DateRange.of(booking), proposed)
    ]
    conflicts.sort(key=lambda booking: (booking.start_date, booking.end_date))
    return conflicts


def is_range_bookable(
    bookings: Iterable[ScheduledBooking], proposed: DateRange
) -> bool:
    return not find_conflicts(bookings, proposed)
