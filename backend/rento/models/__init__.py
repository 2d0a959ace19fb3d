"""ORM models package export."""

from rento.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from rento.models.car import (
    ALL_WEEKDAYS,
    CancellationPolicy,
    Car,
    CarAvailabilityOverride,
    CarDiscountTier,
)

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "ALL_WEEKDAYS",
    "Booking",
    "BookingStatus",
    "CancellationPolicy",
    "Car",
    "CarAvailabilityOverride",
    "CarDiscountTier",
]
