"""Booking submission workflow and booking lookups."""
from __future__ import annotations

import datetime
import enum
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rento.models.booking import Booking, BookingStatus
from rento.services import booking_store, car_service
from rento.services.availability_service import unavailable_dates
from rento.services.booking_store import BookingConflictError
from rento.services.calendar_types import DateRange
from rento.services.conflict_service import find_conflicts
from rento.services.pricing_service import PricingQuote, quote_for_car

logger = logging.getLogger(__name__)


class SubmissionState(str, enum.Enum):
    """Terminal states of a submission attempt."""

    COMMITTED = "committed"
    REJECTED = "rejected"


class RejectionReason(str, enum.Enum):
    """Why a submission was turned down.

    ``unavailable`` extends the scheduling reasons: the range is free of
    bookings but the host has closed at least one of its dates.
    """

    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    PERSISTENCE_FAILURE = "persistence_failure"


@dataclass(slots=True)
class BookingOutcome:
    """Result handed back to whoever submitted the booking."""

    state: SubmissionState
    booking_id: uuid.UUID | None = None
    reason: RejectionReason | None = None
    detail: str | None = None
    quote: PricingQuote | None = None
    conflicts: list[DateRange] = field(default_factory=list)
    unavailable_dates: list[datetime.date] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.state is SubmissionState.COMMITTED

    @classmethod
    def rejected(
        cls, reason: RejectionReason, detail: str, **extra: Any
    ) -> "BookingOutcome":
        return cls(state=SubmissionState.REJECTED, reason=reason, detail=detail, **extra)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"state": self.state.value}
        if self.booking_id is not None:
            payload["booking_id"] = str(self.booking_id)
        if self.reason is not None:
            payload["reason"] = self.reason.value
            payload["message"] = self.detail
        if self.quote is not None:
            payload["quote"] = self.quote.to_dict()
        if self.conflicts:
            payload["conflicts"] = [
                {"start_date": span.start.isoformat(), "end_date": span.end.isoformat()}
                for span in self.conflicts
            ]
        if self.unavailable_dates:
            payload["unavailable_dates"] = [day.isoformat() for day in self.unavailable_dates]
        return payload


async def submit_booking(
    session: AsyncSession,
    *,
    car_id: uuid.UUID | None,
    requester_id: uuid.UUID | None,
    start_date: datetime.date,
    end_date: datetime.date,
    pickup_time: datetime.time | None = None,
    return_time: datetime.time | None = None,
    message: str | None = None,
) -> BookingOutcome:
    """Validate, conflict-check, price and store a new ``pending`` booking.

    Every failure comes back as a rejected outcome; nothing is retried here.
    Besides ``invalid_input``, ``not_found``, ``conflict`` and
    ``persistence_failure``, a conflict-free range touching a date closed by an
    override or the weekly schedule is rejected as ``unavailable``.
    A caller retrying after ``persistence_failure`` may create a duplicate if
    the first write landed, so it should look for its own booking first.
    """
    if car_id is None:
        return BookingOutcome.rejected(RejectionReason.INVALID_INPUT, "A car is required")
    if requester_id is None:
        return BookingOutcome.rejected(
            RejectionReason.INVALID_INPUT, "Sign in to request a booking"
        )
    try:
        requested = DateRange(start_date, end_date)
    except ValueError as exc:
        return BookingOutcome.rejected(RejectionReason.INVALID_INPUT, str(exc))

    try:
        car = await car_service.get_car(session, car_id=car_id)
        if car is None:
            return BookingOutcome.rejected(RejectionReason.NOT_FOUND, "Car not found")

        schedule = car_service.schedule_for(car)
        for label, moment in (("Pickup", pickup_time), ("Return", return_time)):
            if moment is not None and not schedule.covers(moment):
                return BookingOutcome.rejected(
                    RejectionReason.INVALID_INPUT,
                    f"{label} time must be between {schedule.start_time:%H:%M} "
                    f"and {schedule.end_time:%H:%M}",
                )

        active = await booking_store.fetch_active_bookings(
            session, car_id=car_id, within=requested
        )
        conflicts = find_conflicts(active, requested)
        if conflicts:
            logger.info(
                "Booking request for car %s %s..%s conflicts with %d booking(s)",
                car_id,
                requested.start,
                requested.end,
                len(conflicts),
            )
            return BookingOutcome.rejected(
                RejectionReason.CONFLICT,
                "The car is already booked for part of these dates",
                conflicts=[DateRange.of(booking) for booking in conflicts],
            )

        closed = unavailable_dates(
            requested,
            bookings=(),
            overrides=car_service.overrides_for(car),
            schedule=schedule,
        )
        if closed:
            return BookingOutcome.rejected(
                RejectionReason.UNAVAILABLE,
                "The host has not made the car available on every requested date",
                unavailable_dates=closed,
            )

        quote = quote_for_car(car, requested)

        booking = await booking_store.insert_pending_booking(
            session,
            car_id=car_id,
            user_id=requester_id,
            date_range=requested,
            pickup_time=pickup_time,
            return_time=return_time,
            message=message,
            total_price=quote.total,
        )
    except BookingConflictError as exc:
        logger.info("Booking request for car %s lost the race: %s", car_id, exc)
        return BookingOutcome.rejected(RejectionReason.CONFLICT, str(exc))
    except SQLAlchemyError:
        logger.exception("Booking store failure for car %s", car_id)
        await session.rollback()
        return BookingOutcome.rejected(
            RejectionReason.PERSISTENCE_FAILURE,
            "The booking could not be saved; check availability and try again",
        )

    logger.info(
        "Booking %s requested for car %s by %s (%s..%s)",
        booking.id,
        car_id,
        requester_id,
        requested.start,
        requested.end,
    )
    return BookingOutcome(
        state=SubmissionState.COMMITTED, booking_id=booking.id, quote=quote
    )


async def get_booking(
    session: AsyncSession, *, booking_id: uuid.UUID
) -> Booking | None:
    return await booking_store.get_booking(session, booking_id=booking_id)


async def list_bookings_for_requester(
    session: AsyncSession,
    *,
    requester_id: uuid.UUID,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Booking]:
    """A renter's own trips, latest first."""
    return await booking_store.list_bookings(
        session, user_id=requester_id, skip=skip, limit=limit
    )


async def list_bookings_for_car(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    statuses: Sequence[BookingStatus] | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Booking]:
    """Bookings of one car, e.g. the pending requests a host has to answer."""
    return await booking_store.list_bookings(
        session, car_id=car_id, statuses=statuses, skip=skip, limit=limit
    )
