"""Version 1 routes: health, car calendars and booking submission."""

from fastapi import APIRouter

from . import bookings, cars, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(cars.router, prefix="/cars", tags=["cars"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])

__all__ = ["router"]
