"""Test fixtures for the quote pricing backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from app.core.config import get_settings
from app.db.base import Base
from app.db.session import dispose_engine
from app.main import app
from app.pricing.catalog import CatalogAddOn, InMemoryCatalog
from app.pricing.controller import QuoteSyncController
from app.pricing.types import Currency


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def catalog() -> InMemoryCatalog:
    """Catalog with a few add-ons and one package priced per person."""
    catalog = InMemoryCatalog(
        [
            CatalogAddOn("kayak", "Kayak excursion", 5000, Currency.GBP, True),
            CatalogAddOn("transfer", "Airport transfer", 20000, Currency.GBP, False),
            CatalogAddOn("dinner", "Gala dinner", 3000, Currency.EUR, True),
        ]
    )
    catalog.put_package("pkg-lakes", name="Lakes Escape", version=1)
    catalog.add_package_price(
        "pkg-lakes",
        tier_label="Standard",
        period="Summer",
        nights=3,
        price_per_person_cents=5000,
        min_people=1,
        max_people=20,
    )
    catalog.add_package_price(
        "pkg-lakes",
        tier_label="Standard",
        period="Winter",
        nights=3,
        price_per_person_cents=None,
    )
    return catalog


@pytest.fixture()
def controller(catalog: InMemoryCatalog, clock: StepClock) -> QuoteSyncController:
    return QuoteSyncController(catalog, timeout=1.0, clock=clock)


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
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client against a fresh database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {"client": client, "db_url": db_url}
