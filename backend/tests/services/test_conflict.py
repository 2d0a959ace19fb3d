"""Tests for booking conflict detection."""

from __future__ import annotations

import datetime
from dataclasses import dataclass

import pytest

from rento.services.calendar_types import DateRange
from rento.services.conflict_service import (
    find_conflicts,
    is_active,
    is_range_bookable,
    ranges_overlap,
)


@dataclass
class StubBooking:
    start_date: datetime.date
    end_date: datetime.date
    status: str = "confirmed"


def _range(start: str, end: str) -> DateRange:
    return DateRange(datetime.date.fromisoformat(start), datetime.date.fromisoformat(end))


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (("2024-04-01", "2024-04-05"), ("2024-04-04", "2024-04-10"), True),
        (("2024-04-01", "2024-04-04"), ("2024-04-04", "2024-04-10"), True),
        (("2024-04-10", "2024-04-12"), ("2024-04-04", "2024-04-10"), True),
        (("2024-04-05", "2024-04-06"), ("2024-04-01", "2024-04-10"), True),
        (("2024-04-01", "2024-04-03"), ("2024-04-04", "2024-04-10"), False),
        (("2024-04-11", "2024-04-11"), ("2024-04-04", "2024-04-10"), False),
        (("2024-04-10", "2024-04-10"), ("2024-04-10", "2024-04-10"), True),
    ],
)
def test_overlap_is_inclusive_and_symmetric(first, second, expected) -> None:
    a, b = _range(*first), _range(*second)
    assert ranges_overlap(a, b) is expected
    assert ranges_overlap(b, a) is expected
    assert a.overlaps(b) is expected


def test_overlapping_confirmed_booking_is_reported() -> None:
    existing = StubBooking(datetime.date(2024, 4, 4), datetime.date(2024, 4, 10))

    conflicts = find_conflicts([existing], _range("2024-04-01", "2024-04-05"))

    assert conflicts == [existing]
    assert not is_range_bookable([existing], _range("2024-04-01", "2024-04-05"))


def test_cancelled_bookings_are_ignored() -> None:
    cancelled = StubBooking(datetime.date(2024, 4, 4), datetime.date(2024, 4, 10), "cancelled")

    assert is_range_bookable([cancelled], _range("2024-04-01", "2024-04-05"))


def test_conflicts_come_back_earliest_first() -> None:
    late = StubBooking(datetime.date(2024, 4, 8), datetime.date(2024, 4, 9), "pending")
    early = StubBooking(datetime.date(2024, 4, 1), datetime.date(2024, 4, 2))
    clear = StubBooking(datetime.date(2024, 5, 1), datetime.date(2024, 5, 2))

    conflicts = find_conflicts([late, clear, early], _range("2024-04-02", "2024-04-08"))

    assert conflicts == [early, late]


@pytest.mark.parametrize(
    ("status", "expected"),
    [("pending", True), ("confirmed", True), ("cancelled", False)],
)
def test_active_statuses(status: str, expected: bool) -> None:
    assert is_active(status) is expected
