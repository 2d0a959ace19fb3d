"""Booking models."""
from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rento.db.base import Base
from rento.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from rento.models.car import Car


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Booking(TimestampMixin, Base):
    """A renter's request to hold a car for an inclusive range of dates."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_car_status", "car_id", "status"),
        CheckConstraint("start_date <= end_date", name="ck_bookings_range_order"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    car_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("cars.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        default=BookingStatus.PENDING,
        nullable=False,
    )
    pickup_time: Mapped[datetime.time | None] = mapped_column(Time())
    return_time: Mapped[datetime.time | None] = mapped_column(Time())
    message: Mapped[str | None] = mapped_column(String(1024))
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    car: Mapped["Car"] = relationship("Car", back_populates="bookings")
