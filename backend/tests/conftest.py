"""Test fixtures for the Rento backend."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from rento.core.config import get_settings
from rento.core.security import create_access_token
from rento.db.base import Base
from rento.db.session import dispose_engine, get_sessionmaker
from rento.main import app
from rento.models import Car, CarDiscountTier


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def seeded_car(reset_database: None, db_url: str) -> dict[str, uuid.UUID]:
    """A $50/night car open every day with 10% off from seven nights."""
    sessionmaker = get_sessionmaker(db_url)
    host_id = uuid.uuid4()
    async with sessionmaker() as session:
        car = Car(
            host_id=host_id,
            brand="Toyota",
            model="Corolla",
            year=2021,
            location="Porto",
            price_per_day=Decimal("50.00"),
        )
        car.discount_tiers = [CarDiscountTier(min_nights=7, percent=Decimal("10"))]
        session.add(car)
        await session.commit()
        return {"car_id": car.id, "host_id": host_id, "renter_id": uuid.uuid4()}


@pytest_asyncio.fixture()
async def app_context(
    seeded_car: dict[str, uuid.UUID],
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client, the seeded car and bearer headers for its users."""
    context: dict[str, object] = dict(seeded_car)
    for role in ("host", "renter"):
        token = create_access_token(str(seeded_car[f"{role}_id"]))
        context[f"{role}_headers"] = {"Authorization": f"Bearer {token}"}

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
