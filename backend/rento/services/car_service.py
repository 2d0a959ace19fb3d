"""Car configuration lookups and host-managed availability overrides."""
from __future__ import annotations

import datetime
import uuid

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rento.models.car import Car, CarAvailabilityOverride
from rento.services.calendar_types import AvailabilityOverride, WeeklySchedule


def _car_query(car_id: uuid.UUID) -> Select[tuple[Car]]:
    return (
        select(Car)
        .options(selectinload(Car.discount_tiers), selectinload(Car.overrides))
        .where(Car.id == car_id)
        .execution_options(populate_existing=True)
    )


async def get_car(session: AsyncSession, *, car_id: uuid.UUID) -> Car | None:
    """Return the car with its discount tiers and overrides loaded."""
    result = await session.execute(_car_query(car_id))
    return result.scalars().unique().one_or_none()


def schedule_for(car: Car) -> WeeklySchedule:
    return WeeklySchedule.from_names(
        car.available_days, car.available_from, car.available_until
    )


def overrides_for(car: Car) -> list[AvailabilityOverride]:
    return [
        AvailabilityOverride(date=row.date, is_available=row.is_available)
        for row in car.overrides
    ]


async def _ensure_host(
    session: AsyncSession, *, car_id: uuid.UUID, host_id: uuid.UUID
) -> Car:
    car = await session.get(Car, car_id)
    if car is None:
        raise ValueError("Car not found")
    if car.host_id != host_id:
        raise PermissionError("Only the car's host can change its availability")
    return car


async def list_overrides(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    host_id: uuid.UUID,
) -> list[CarAvailabilityOverride]:
    await _ensure_host(session, car_id=car_id, host_id=host_id)
    result = await session.execute(
        select(CarAvailabilityOverride)
        .where(CarAvailabilityOverride.car_id == car_id)
        .order_by(CarAvailabilityOverride.date.asc())
    )
    return list(result.scalars().all())


async def upsert_override(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    host_id: uuid.UUID,
    day: datetime.date,
    is_available: bool,
) -> CarAvailabilityOverride:
    """Pin ``day`` open or closed; replaces any existing override for the day."""
    await _ensure_host(session, car_id=car_id, host_id=host_id)
    existing = (
        await session.execute(
            select(CarAvailabilityOverride).where(
                CarAvailabilityOverride.car_id == car_id,
                CarAvailabilityOverride.date == day,
            )
        )
    ).scalar_one_or_none()
    if existing is None:
        override = CarAvailabilityOverride(
            car_id=car_id, date=day, is_available=is_available
        )
        session.add(override)
        await session.commit()
        await session.refresh(override)
        return override

    existing.is_available = is_available
    await session.commit()
    await session.refresh(existing)
    return existing


async def delete_override(
    session: AsyncSession,
    *,
    car_id: uuid.UUID,
    host_id: uuid.UUID,
    day: datetime.date,
) -> bool:
    """Drop the override for ``day``; returns whether one existed."""
    await _ensure_host(session, car_id=car_id, host_id=host_id)
    existing = (
        await session.execute(
            select(CarAvailabilityOverride).where(
                CarAvailabilityOverride.car_id == car_id,
                CarAvailabilityOverride.date == day,
            )
        )
    ).scalar_one_or_none()
    if existing is None:
        return False
    await session.delete(existing)
    await session.commit()
    return True
