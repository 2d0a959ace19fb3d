"""Car calendar, quote and host override endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rento.api import deps
from rento.models.booking import BookingStatus
from rento.schemas.availability import (
    AvailabilityResponse,
    MonthAvailabilityRead,
    UnavailableDatesResponse,
)
from rento.schemas.booking import BookingRead
from rento.schemas.car import AvailabilityOverrideRead, AvailabilityOverrideUpsert
from rento.schemas.pricing import PricingQuoteRead
from rento.services import (
    availability_service,
    booking_service,
    car_service,
    pricing_service,
)
from rento.services.calendar_types import DateRange

router = APIRouter()


def _car_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Car not found")


def _date_range(start_date: date, end_date: date) -> DateRange:
    try:
        return DateRange(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


async def _assert_host(
    session: AsyncSession, *, car_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    car = await car_service.get_car(session, car_id=car_id)
    if car is None:
        raise _car_not_found()
    if car.host_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )


@router.get(
    "/{car_id}/availability",
    response_model=AvailabilityResponse,
    summary="Per-day availability for one or more months",
)
async def get_car_availability(
    car_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    year: Annotated[int, Query(ge=1, le=9998)],
    month_index: Annotated[int, Query(ge=0, le=11)],
    months: Annotated[int, Query(ge=1)] = 1,
) -> AvailabilityResponse:
    try:
        periods = await availability_service.get_month_availability(
            session,
            car_id=car_id,
            year=year,
            month_index=month_index,
            months=months,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if periods is None:
        raise _car_not_found()
    return AvailabilityResponse(
        car_id=car_id,
        months=[MonthAvailabilityRead.model_validate(period) for period in periods],
    )


@router.get(
    "/{car_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    summary="Dates a renter cannot pick",
)
async def get_unavailable_dates(
    car_id: uuid.UUID,
    start_date: date,
    end_date: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> UnavailableDatesResponse:
    window = _date_range(start_date, end_date)
    try:
        dates = await availability_service.get_unavailable_dates(
            session, car_id=car_id, date_range=window
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if dates is None:
        raise _car_not_found()
    return UnavailableDatesResponse(
        car_id=car_id, start_date=start_date, end_date=end_date, dates=dates
    )


@router.get(
    "/{car_id}/quote", response_model=PricingQuoteRead, summary="Quote a rental"
)
async def quote_car_rental(
    car_id: uuid.UUID,
    start_date: date,
    end_date: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> PricingQuoteRead:
    quote = await pricing_service.quote_car(
        session, car_id=car_id, date_range=_date_range(start_date, end_date)
    )
    if quote is None:
        raise _car_not_found()
    return PricingQuoteRead.model_validate(quote)


@router.get(
    "/{car_id}/bookings",
    response_model=list[BookingRead],
    summary="Booking requests for a host's car",
)
async def list_car_bookings(
    car_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
    status_filter: Annotated[list[BookingStatus] | None, Query(alias="status")] = None,
    skip: int = 0,
    limit: int = 50,
) -> list[BookingRead]:
    await _assert_host(session, car_id=car_id, user_id=current_user_id)
    bookings = await booking_service.list_bookings_for_car(
        session,
        car_id=car_id,
        statuses=status_filter,
        skip=skip,
        limit=min(limit, 100),
    )
    return [BookingRead.model_validate(booking) for booking in bookings]


@router.get(
    "/{car_id}/overrides",
    response_model=list[AvailabilityOverrideRead],
    summary="List date overrides",
)
async def list_car_overrides(
    car_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> list[AvailabilityOverrideRead]:
    try:
        overrides = await car_service.list_overrides(
            session, car_id=car_id, host_id=current_user_id
        )
    except ValueError as exc:
        raise _car_not_found() from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    return [AvailabilityOverrideRead.model_validate(row) for row in overrides]


@router.put(
    "/{car_id}/overrides/{day}",
    response_model=AvailabilityOverrideRead,
    summary="Pin a date open or closed",
)
async def upsert_car_override(
    car_id: uuid.UUID,
    day: date,
    payload: AvailabilityOverrideUpsert,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> AvailabilityOverrideRead:
    try:
        override = await car_service.upsert_override(
            session,
            car_id=car_id,
            host_id=current_user_id,
            day=day,
            is_available=payload.is_available,
        )
    except ValueError as exc:
        raise _car_not_found() from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    return AvailabilityOverrideRead.model_validate(override)


@router.delete(
    "/{car_id}/overrides/{day}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Return a date to the weekly schedule",
)
async def delete_car_override(
    car_id: uuid.UUID,
    day: date,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> Response:
    try:
        removed = await car_service.delete_override(
            session, car_id=car_id, host_id=current_user_id, day=day
        )
    except ValueError as exc:
        raise _car_not_found() from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Override not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
