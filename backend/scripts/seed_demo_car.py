"""Seed a demo car with a weekly schedule, discount tiers and overrides."""

from __future__ import annotations

import asyncio
import os
import uuid
from datetime import date, time, timedelta
from decimal import Decimal

from sqlalchemy import select

from rento.db.session import get_sessionmaker
from rento.models import Car, CarAvailabilityOverride, CarDiscountTier
from rento.services.pricing_service import DiscountTier, validate_discount_schedule

DEMO_BRAND = "Toyota"
DEMO_MODEL = "Corolla (demo)"
DEMO_TIERS = (
    DiscountTier(min_nights=3, percent=Decimal("5")),
    DiscountTier(min_nights=7, percent=Decimal("10")),
    DiscountTier(min_nights=28, percent=Decimal("12")),
)


def _host_id() -> uuid.UUID:
    raw = os.environ.get("DEMO_HOST_ID")
    return uuid.UUID(raw) if raw else uuid.uuid4()


def _next_sunday(today: date | None = None) -> date:
    today = today or date.today()
    return today + timedelta(days=(6 - today.weekday()) or 7)


async def seed_demo_car() -> None:
    tiers = validate_discount_schedule(DEMO_TIERS)
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        existing = (
            await session.execute(
                select(Car).where(Car.brand == DEMO_BRAND, Car.model == DEMO_MODEL)
            )
        ).scalar_one_or_none()
        if existing is not None:
            print(f"Demo car already present: {existing.id}")
            return

        car = Car(
            host_id=_host_id(),
            brand=DEMO_BRAND,
            model=DEMO_MODEL,
            year=2022,
            location="Lisbon",
            price_per_day=Decimal("50.00"),
            available_days=["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"],
            available_from=time(8, 0),
            available_until=time(20, 0),
        )
        car.discount_tiers = [
            CarDiscountTier(min_nights=tier.min_nights, percent=tier.percent)
            for tier in tiers
        ]
        # Open the next Sunday as a one-off exception to the weekly schedule.
        car.overrides = [
            CarAvailabilityOverride(date=_next_sunday(), is_available=True),
        ]
        session.add(car)
        await session.commit()

        print(
            f"Seeded demo car {car.id} for host {car.host_id} "
            f"with {len(tiers)} discount tier(s)."
        )


def main() -> None:
    asyncio.run(seed_demo_car())


if __name__ == "__main__":
    main()
