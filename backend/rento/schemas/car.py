"""Car availability override schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class AvailabilityOverrideUpsert(BaseModel):
    """Payload pinning a date open or closed."""

    is_available: bool


class AvailabilityOverrideRead(BaseModel):
    """Serialized override."""

    id: uuid.UUID
    car_id: uuid.UUID
    date: date
    is_available: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
