"""Booking submission and lookup API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from rento.api import deps
from rento.schemas.booking import BookingCreate, BookingRead, BookingSubmissionRead
from rento.schemas.pricing import PricingQuoteRead
from rento.services import booking_service, car_service
from rento.services.booking_service import RejectionReason

router = APIRouter()

_REJECTION_STATUS: dict[RejectionReason, int] = {
    RejectionReason.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    RejectionReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionReason.CONFLICT: status.HTTP_409_CONFLICT,
    RejectionReason.UNAVAILABLE: status.HTTP_409_CONFLICT,
    RejectionReason.PERSISTENCE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@router.post(
    "",
    response_model=BookingSubmissionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    description=(
        "Rejections carry a reason: invalid_input (400), not_found (404), "
        "conflict (409), unavailable (409, host-closed dates) or "
        "persistence_failure (503)."
    ),
    dependencies=[Depends(deps.rate_limit)],
)
async def submit_booking(
    payload: BookingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> BookingSubmissionRead:
    outcome = await booking_service.submit_booking(
        session,
        requester_id=current_user_id,
        **payload.model_dump(),
    )
    if not outcome.committed:
        body = outcome.to_dict()
        body.pop("state", None)
        status_code = _REJECTION_STATUS.get(
            outcome.reason, status.HTTP_400_BAD_REQUEST  # type: ignore[arg-type]
        )
        raise HTTPException(status_code=status_code, detail=body)
    return BookingSubmissionRead(
        state=outcome.state.value,
        booking_id=outcome.booking_id,
        quote=PricingQuoteRead.model_validate(outcome.quote),
    )


@router.get("", response_model=list[BookingRead], summary="List my bookings")
async def list_my_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
    skip: int = 0,
    limit: int = 50,
) -> list[BookingRead]:
    bookings = await booking_service.list_bookings_for_requester(
        session, requester_id=current_user_id, skip=skip, limit=min(limit, 100)
    )
    return [BookingRead.model_validate(booking) for booking in bookings]


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> BookingRead:
    booking = await booking_service.get_booking(session, booking_id=booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    if booking.user_id != current_user_id:
        car = await car_service.get_car(session, car_id=booking.car_id)
        if car is None or car.host_id != current_user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
            )
    return BookingRead.model_validate(booking)
