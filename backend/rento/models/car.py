"""Car listing models: pricing, weekly schedule and date overrides."""

from __future__ import annotations

import enum
import uuid
import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Date,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from rento.db.base import Base
from rento.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from rento.models.booking import Booking

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")

ALL_WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]


class CancellationPolicy(str, enum.Enum):
    """Refund policies a host can pick for a listing."""

    FLEXIBLE = "flexible"
    MODERATE = "moderate"
    STRICT = "strict"


class Car(TimestampMixin, Base):
    """A vehicle advertised by a host."""

    __tablename__ = "cars"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    brand: Mapped[str] = mapped_column(String(120), nullable=False)
    model: Mapped[str] = mapped_column(String(120), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer())
    location: Mapped[str | None] = mapped_column(String(255))
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    available_days: Mapped[list[str]] = mapped_column(
        JSONB_TYPE, default=lambda: list(ALL_WEEKDAYS), nullable=False
    )
    available_from: Mapped[datetime.time] = mapped_column(
        Time(), default=datetime.time(8, 0), nullable=False
    )
    available_until: Mapped[datetime.time] = mapped_column(
        Time(), default=datetime.time(20, 0), nullable=False
    )
    cancellation_policy: Mapped[CancellationPolicy] = mapped_column(
        Enum(
            CancellationPolicy,
            name="cancellation_policy",
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        default=CancellationPolicy.MODERATE,
        nullable=False,
    )

    discount_tiers: Mapped[list["CarDiscountTier"]] = relationship(
        "CarDiscountTier",
        back_populates="car",
        cascade="all, delete-orphan",
        order_by="CarDiscountTier.min_nights",
    )
    overrides: Mapped[list["CarAvailabilityOverride"]] = relationship(
        "CarAvailabilityOverride",
        back_populates="car",
        cascade="all, delete-orphan",
        order_by="CarAvailabilityOverride.date",
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="car")


class CarDiscountTier(Base):
    """Percentage off the base total once a rental reaches ``min_nights``."""

    __tablename__ = "car_discount_tiers"
    __table_args__ = (
        UniqueConstraint("car_id", "min_nights", name="uq_discount_tier_car_nights"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    car_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("cars.id", ondelete="CASCADE"), nullable=False
    )
    min_nights: Mapped[int] = mapped_column(Integer(), nullable=False)
    percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    car: Mapped[Car] = relationship("Car", back_populates="discount_tiers")


class CarAvailabilityOverride(TimestampMixin, Base):
    """Host exception pinning one date to available or unavailable."""

    __tablename__ = "car_availability_overrides"
    __table_args__ = (
        UniqueConstraint("car_id", "date", name="uq_availability_override_car_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    car_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("cars.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False)

    car: Mapped[Car] = relationship("Car", back_populates="overrides")
