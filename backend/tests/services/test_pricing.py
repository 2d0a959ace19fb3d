"""Tests for the rental pricing engine."""

from __future__ import annotations

import datetime
from decimal import Decimal

import pytest

from rento.services.calendar_types import DateRange
from rento.services.pricing_service import (
    DiscountTier,
    quote_rental,
    select_discount_tier,
    validate_discount_schedule,
)

START = datetime.date(2024, 6, 1)
WEEKLY_TEN = [DiscountTier(min_nights=7, percent=Decimal("10"))]


def _quote(nights: int, tiers=WEEKLY_TEN, price: str = "50.00"):
    return quote_rental(
        nightly_price=Decimal(price),
        discount_tiers=tiers,
        date_range=DateRange(START, START + datetime.timedelta(days=nights)),
        service_fee_percent=Decimal("10"),
    )


def test_short_rental_pays_the_linear_price() -> None:
    quote = _quote(3)

    assert quote.nights == 3
    assert quote.total == Decimal("150.00")
    assert quote.discount_total == Decimal("0.00")
    assert quote.discount_tier is None
    assert [line.description for line in quote.items] == ["50.00 x 3 nights"]


def test_weekly_rental_gets_the_discount() -> None:
    quote = _quote(7)

    assert quote.subtotal == Decimal("350.00")
    assert quote.discount_total == Decimal("35.00")
    assert quote.total == Decimal("315.00")
    assert quote.items[-1].description == "Multi-day discount (10%)"
    assert quote.items[-1].amount == Decimal("-35.00")


def test_service_fee_is_reported_beside_the_total() -> None:
    quote = _quote(7)

    assert quote.service_fee == Decimal("31.50")
    assert quote.total_with_fees == Decimal("346.50")


def test_same_day_rental_bills_one_night() -> None:
    quote = _quote(0)

    assert quote.nights == 1
    assert quote.total == Decimal("50.00")
    assert quote.items[0].description == "50.00 x 1 night"


def test_only_the_highest_threshold_applies() -> None:
    tiers = [
        DiscountTier(min_nights=3, percent=Decimal("5")),
        DiscountTier(min_nights=7, percent=Decimal("10")),
    ]

    assert select_discount_tier(tiers, 2) is None
    assert select_discount_tier(tiers, 3) == tiers[0]
    assert select_discount_tier(tiers, 30) == tiers[1]
    assert _quote(10, tiers).total == Decimal("450.00")


def test_total_never_drops_as_the_rental_grows() -> None:
    tiers = validate_discount_schedule(
        [
            DiscountTier(min_nights=3, percent=Decimal("5")),
            DiscountTier(min_nights=7, percent=Decimal("10")),
            DiscountTier(min_nights=28, percent=Decimal("12")),
        ]
    )
    previous = Decimal("0")
    for nights in range(1, 60):
        quote = _quote(nights, tiers, price="37.99")
        linear = Decimal("37.99") * nights
        assert quote.total >= previous
        if nights >= 3:
            assert quote.total < linear
        previous = quote.total


@pytest.mark.parametrize(
    "tiers",
    [
        [DiscountTier(min_nights=0, percent=Decimal("5"))],
        [DiscountTier(min_nights=3, percent=Decimal("0"))],
        [DiscountTier(min_nights=3, percent=Decimal("60"))],
        [
            DiscountTier(min_nights=3, percent=Decimal("10")),
            DiscountTier(min_nights=3, percent=Decimal("15")),
        ],
        [
            DiscountTier(min_nights=3, percent=Decimal("10")),
            DiscountTier(min_nights=7, percent=Decimal("8")),
        ],
        # 28 nights at 30% off would cost less than 27 nights at 10% off.
        [
            DiscountTier(min_nights=7, percent=Decimal("10")),
            DiscountTier(min_nights=28, percent=Decimal("30")),
        ],
    ],
)
def test_invalid_discount_schedules_are_rejected(tiers) -> None:
    with pytest.raises(ValueError):
        validate_discount_schedule(tiers, max_percent=Decimal("50"))


def test_negative_nightly_price_is_rejected() -> None:
    with pytest.raises(ValueError):
        _quote(2, price="-1")


def test_sub_cent_discount_still_lowers_the_total() -> None:
    one_night_tier = [DiscountTier(min_nights=1, percent=Decimal("10"))]

    quote = _quote(1, one_night_tier, price="0.01")

    assert quote.discount_total == Decimal("0.01")
    assert quote.total < Decimal("0.01")
