"""Availability calendar schemas."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class AvailabilityDayRead(BaseModel):
    """Whether the car can be rented on one date."""

    date: date
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class MonthAvailabilityRead(BaseModel):
    """One calendar month; ``month_index`` is zero-based."""

    year: int
    month_index: int = Field(ge=0, le=11)
    days: list[AvailabilityDayRead]

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    """Availability response payload."""

    car_id: uuid.UUID
    months: list[MonthAvailabilityRead]


class UnavailableDatesResponse(BaseModel):
    """Dates a renter cannot pick within the requested window."""

    car_id: uuid.UUID
    start_date: date
    end_date: date
    dates: list[date]
