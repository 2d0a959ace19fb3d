"""Booking persistence with a serialised check-and-insert per car."""
from __future__ import annotations

import asyncio
import datetime
import logging
import uuid
import weakref
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rento.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from rento.models.car import Car
from rento.services.calendar_types import DateRange

logger = logging.getLogger(__name__)

# Name of the Postgres exclusion constraint installed by the migrations.
NO_OVERLAP_CONSTRAINT = "ex_bookings_active_no_overlap"

_ACTIVE_STATUSES = sorted(ACTIVE_BOOKING_STATUSES, key=lambda status: status.value)

_car_locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


class BookingStoreError(RuntimeError):
    """Raised when the booking store cannot complete an operation."""


class BookingConflictError(BookingStoreError):
    """Raised when an active booking already holds part of the requested range."""


@asynccontextmanager
async def _serialized(car_id: uuid.UUID) -> AsyncIterator[None]:
    lock = _car_locks.get(car_id)
    if lock is None:
        lock = asyncio.Lock()
        _car_locks[car_id] = lock
    async with lock:
        yield


def _active_overlap_query(car_id: uuid.UUID, span: DateRange) -> Select[tuple[Booking]]:
    return select(Booking).where(
        Booking.car_id == car_id,
        Booking.status.in_(_ACTIVE_STATUSES),
        Booking.start_date <= span.end,
        Booking.end_date >= span.start,
    )


async def fetch_active_bookings(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    within: DateRange | None = None,
) -> Sequence[Booking]:
    """Return the car's pending and confirmed bookings, optionally clipped to a window."""
    stmt = select(Booking).where(
        Booking.car_id == car_id,
        Booking.status.in_(_ACTIVE_STATUSES),
    )
    if within is not None:
        stmt = stmt.where(
            Booking.start_date <= within.end, Booking.end_date >= within.start
        )
    result = await session.execute(stmt.order_by(Booking.start_date.asc()))
    return result.scalars().all()


async def insert_pending_booking(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    user_id: uuid.UUID,
    date_range: DateRange,
    pickup_time: datetime.time | None = None,
    return_time: datetime.time | None = None,
    message: str | None = None,
    total_price: Decimal | None = None,
) -> Booking:
    """Insert a ``pending`` booking unless an active booking overlaps the range.

    The overlap check and the insert run under one per-car lock and inside one
    transaction that holds a row lock on the car, so two submissions for the
    same car cannot both pass the check.
    """
    async with _serialized(car_id):
        try:
            await session.execute(
                select(Car.id).where(Car.id == car_id).with_for_update()
            )
            overlapping = (
                await session.execute(
                    select(func.count()).select_from(
                        _active_overlap_query(car_id, date_range).subquery()
                    )
                )
            ).scalar_one()
            if overlapping:
                await session.rollback()
                raise BookingConflictError(
                    "An active booking already covers part of the requested dates"
                )

            booking = Booking(
                car_id=car_id,
                user_id=user_id,
                start_date=date_range.start,
                end_date=date_range.end,
                status=BookingStatus.PENDING,
                pickup_time=pickup_time,
                return_time=return_time,
                message=message,
                total_price=total_price,
            )
            session.add(booking)
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            if NO_OVERLAP_CONSTRAINT in str(exc.orig):
                raise BookingConflictError(
                    "An active booking already covers part of the requested dates"
                ) from exc
            raise
    await session.refresh(booking)
    logger.debug("Stored pending booking %s for car %s", booking.id, car_id)
    return booking


async def get_booking(
    session: AsyncSession, *, booking_id: uuid.UUID
) -> Booking | None:
    return await session.get(Booking, booking_id)


async def list_bookings(
    session: AsyncSession,
    *,
    car_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    statuses: Iterable[BookingStatus] | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Booking]:
    stmt = select(Booking)
    if car_id is not None:
        stmt = stmt.where(Booking.car_id == car_id)
    if user_id is not None:
        stmt = stmt.where(Booking.user_id == user_id)
    if statuses is not None:
        stmt = stmt.where(Booking.status.in_(list(statuses)))
    stmt = stmt.order_by(Booking.start_date.desc()).offset(skip).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()
