"""Pydantic schemas for bookings."""
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rento.models.booking import BookingStatus
from rento.schemas.pricing import PricingQuoteRead


class BookingCreate(BaseModel):
    """Payload for requesting a booking."""

    car_id: uuid.UUID
    start_date: date
    end_date: date
    pickup_time: time | None = None
    return_time: time | None = None
    message: str | None = Field(default=None, max_length=1024)


class BookingRead(BaseModel):
    """Serialized booking representation."""

    id: uuid.UUID
    car_id: uuid.UUID
    user_id: uuid.UUID
    start_date: date
    end_date: date
    status: BookingStatus
    pickup_time: time | None = None
    return_time: time | None = None
    message: str | None = None
    total_price: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingSubmissionRead(BaseModel):
    """Successful submission: the new booking's id and its price."""

    state: str
    booking_id: uuid.UUID
    status: BookingStatus = BookingStatus.PENDING
    quote: PricingQuoteRead
