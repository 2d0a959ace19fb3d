"""Pricing engine for car rentals."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rento.core.config import get_settings
from rento.models.car import Car
from rento.services import car_service
from rento.services.calendar_types import DateRange

MONEY_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class DiscountTier:
    """Percentage off once a rental lasts at least ``min_nights`` nights."""

    min_nights: int
    percent: Decimal


@dataclass(slots=True)
class PricingLine:
    """Individual component contributing to a rental quote."""

    description: str
    amount: Decimal


@dataclass(slots=True)
class PricingQuote:
    """Aggregate pricing output for a proposed rental."""

    date_range: DateRange
    nights: int
    nightly_price: Decimal
    items: list[PricingLine]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    service_fee: Decimal
    total_with_fees: Decimal
    discount_tier: DiscountTier | None = None

    @property
    def start_date(self) -> datetime.date:
        return self.date_range.start

    @property
    def end_date(self) -> datetime.date:
        return self.date_range.end

    def to_dict(self) -> dict[str, Any]:
        """Serialize the quote to plain types for responses."""

        def _serialize(line: PricingLine) -> dict[str, str]:
            return {
                "description": line.description,
                "amount": _to_str(line.amount),
            }

        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "nights": self.nights,
            "nightly_price": _to_str(self.nightly_price),
            "items": [_serialize(line) for line in self.items],
            "subtotal": _to_str(self.subtotal),
            "discount_total": _to_str(self.discount_total),
            "total": _to_str(self.total),
            "service_fee": _to_str(self.service_fee),
            "total_with_fees": _to_str(self.total_with_fees),
        }


def _to_money(value: Decimal | float | str | int) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _to_str(value: Decimal) -> str:
    return f"{value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP):.2f}"


def _sorted_tiers(tiers: Iterable[DiscountTier]) -> list[DiscountTier]:
    return sorted(tiers, key=lambda tier: tier.min_nights)


def validate_discount_schedule(
    tiers: Iterable[DiscountTier], *, max_percent: Decimal | None = None
) -> list[DiscountTier]:
    """Check a schedule and return it ordered by threshold.

    Percentages must grow with the threshold, stay within ``max_percent``, and
    never make a longer rental cheaper than one night less.
    """
    ceiling = max_percent if max_percent is not None else get_settings().max_discount_percent
    ordered = _sorted_tiers(tiers)
    previous: DiscountTier | None = None
    for tier in ordered:
        if tier.min_nights < 1:
            raise ValueError("Discount thresholds must be at least one night")
        if not Decimal("0") < Decimal(tier.percent) <= ceiling:
            raise ValueError(f"Discount percent must be above 0 and at most {ceiling}")
        previous_percent = Decimal("0")
        if previous is not None:
            if tier.min_nights == previous.min_nights:
                raise ValueError(f"Duplicate discount threshold {tier.min_nights}")
            if tier.percent <= previous.percent:
                raise ValueError("Discount percent must increase with the threshold")
            previous_percent = previous.percent
        at_threshold = tier.min_nights * (HUNDRED - tier.percent)
        night_before = (tier.min_nights - 1) * (HUNDRED - previous_percent)
        if at_threshold < night_before:
            raise ValueError(
                f"A {tier.min_nights}-night rental would cost less than one night shorter"
            )
        previous = tier
    return ordered


def billable_nights(date_range: DateRange) -> int:
    """Nights charged for the range; a same-day rental bills one night."""
    return max(date_range.nights, 1)


def select_discount_tier(
    tiers: Iterable[DiscountTier], nights: int
) -> DiscountTier | None:
    """Return the highest threshold the rental meets; tiers never stack."""
    chosen: DiscountTier | None = None
    for tier in _sorted_tiers(tiers):
        if nights >= tier.min_nights:
            chosen = tier
    return chosen


def quote_rental(
    *,
    nightly_price: Decimal,
    discount_tiers: Sequence[DiscountTier],
    date_range: DateRange,
    service_fee_percent: Decimal | None = None,
) -> PricingQuote:
    """Price a rental of ``date_range`` at ``nightly_price`` per night."""
    if nightly_price < 0:
        raise ValueError("Nightly price cannot be negative")
    fee_percent = (
        service_fee_percent
        if service_fee_percent is not None
        else get_settings().service_fee_percent
    )

    nights = billable_nights(date_range)
    price = _to_money(nightly_price)
    subtotal = _to_money(price * nights)
    items = [
        PricingLine(
            description=f"{_to_str(price)} x {nights} {'night' if nights == 1 else 'nights'}",
            amount=subtotal,
        )
    ]

    tier = select_discount_tier(discount_tiers, nights)
    discount_total = Decimal("0.00")
    if tier is not None:
        discount_total = _to_money(subtotal * Decimal(tier.percent) / HUNDRED)
        # A met tier always takes at least a cent off.
        if discount_total == 0 and subtotal > 0:
            discount_total = MONEY_PLACES
        items.append(
            PricingLine(
                description=f"Multi-day discount ({Decimal(tier.percent).normalize():f}%)",
                amount=-discount_total,
            )
        )

    total = _to_money(subtotal - discount_total)
    service_fee = _to_money(total * Decimal(fee_percent) / HUNDRED)
    return PricingQuote(
        date_range=date_range,
        nights=nights,
        nightly_price=price,
        items=items,
        subtotal=subtotal,
        discount_total=discount_total,
        total=total,
        service_fee=service_fee,
        total_with_fees=_to_money(total + service_fee),
        discount_tier=tier,
    )


def discount_tiers_for(car: Car) -> list[DiscountTier]:
    return [
        DiscountTier(min_nights=row.min_nights, percent=Decimal(row.percent))
        for row in car.discount_tiers
    ]


def quote_for_car(car: Car, date_range: DateRange) -> PricingQuote:
    return quote_rental(
        nightly_price=Decimal(car.price_per_day),
        discount_tiers=discount_tiers_for(car),
        date_range=date_range,
    )


async def quote_car(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    date_range: DateRange,
) -> PricingQuote | None:
    """Quote a rental for a stored car, or ``None`` if the car is unknown."""
    car = await car_service.get_car(session, car_id=car_id)
    if car is None:
        return None
    return quote_for_car(car, date_range)
