"""Pricing schema definitions."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class PricingLineRead(BaseModel):
    """Individual line item within a pricing quote."""

    description: str
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class PricingQuoteRead(BaseModel):
    """Rental quote for a car and an inclusive date range."""

    start_date: date
    end_date: date
    nights: int
    nightly_price: Decimal
    items: list[PricingLineRead]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    service_fee: Decimal
    total_with_fees: Decimal

    model_config = ConfigDict(from_attributes=True)
