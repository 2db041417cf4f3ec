"""Tests for the SQL-backed catalog."""

from __future__ import annotations

from decimal import Decimal
import uuid

import pytest

from app.db.session import get_sessionmaker
from app.pricing.errors import PackageNotFoundError, QuoteValidationError
from app.pricing.types import Currency
from app.schemas.catalog import (
    AddOnCreate,
    AddOnUpdate,
    PackagePriceRowCreate,
    TravelPackageCreate,
)
from app.services import catalog_service

pytestmark = pytest.mark.asyncio


def _lakes_package() -> TravelPackageCreate:
    return TravelPackageCreate(
        name="Lakes Escape",
        currency=Currency.GBP,
        version=2,
        prices=[
            PackagePriceRowCreate(
                tier_label="Standard",
                min_people=1,
                max_people=9,
                period="Summer",
                nights=3,
                price_per_person=Decimal("60.00"),
            ),
            PackagePriceRowCreate(
                tier_label="Standard",
                min_people=10,
                max_people=30,
                period="Summer",
                nights=3,
                price_per_person=Decimal("50.00"),
            ),
            PackagePriceRowCreate(
                tier_label="Standard",
                min_people=1,
                max_people=30,
                period="Winter",
                nights=3,
            ),
        ],
    )


async def test_add_on_crud_and_lookup(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        kayak = await catalog_service.create_add_on(
            session,
            payload=AddOnCreate(
                name="Kayak excursion",
                unit_price=Decimal("50.00"),
                currency=Currency.GBP,
                per_unit_default=True,
            ),
        )
        await catalog_service.create_add_on(
            session,
            payload=AddOnCreate(
                name="Archived tour",
                unit_price=Decimal("10.00"),
                currency=Currency.EUR,
                active=False,
            ),
        )

        active = await catalog_service.list_add_ons(session, active=True)
        assert [item.name for item in active] == ["Kayak excursion"]
        assert len(await catalog_service.list_add_ons(session)) == 2

        catalog = catalog_service.SqlCatalog(session)
        records = await catalog.lookup_add_ons([str(kayak.id), str(uuid.uuid4()), "bad"])
        assert len(records) == 1
        assert records[0].unit_price_cents == 5000
        assert records[0].per_unit_default is True

        await catalog_service.update_add_on(
            session, item=kayak, payload=AddOnUpdate(active=False, unit_price=Decimal("55"))
        )
        (record,) = await catalog.lookup_add_ons([str(kayak.id)])
        assert record.is_active is False
        assert record.unit_price_cents == 5500

        await catalog_service.delete_add_on(session, item=kayak)
        assert await catalog.lookup_add_ons([str(kayak.id)]) == []


async def test_package_price_lookup(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        package = await catalog_service.create_package(session, payload=_lakes_package())
        catalog = catalog_service.SqlCatalog(session)

        small = await catalog.lookup_package_price(str(package.id), "Standard", "Summer", 3, 4)
        assert small.price_cents == 24000
        assert small.package_version == 2
        assert small.package_name == "Lakes Escape"
        assert small.currency is Currency.GBP

        large = await catalog.lookup_package_price(
            str(package.id), "Standard", "Summer", 3, 12
        )
        assert large.price_cents == 60000

        on_request = await catalog.lookup_package_price(
            str(package.id), "Standard", "Winter", 3, 12
        )
        assert on_request.is_on_request
        assert on_request.currency is Currency.GBP

        with pytest.raises(QuoteValidationError):
            await catalog.lookup_package_price(str(package.id), "Standard", "Summer", 3, 40)
        with pytest.raises(PackageNotFoundError):
            await catalog.lookup_package_price(str(uuid.uuid4()), "Standard", "Summer", 3, 4)
        with pytest.raises(PackageNotFoundError):
            await catalog.lookup_package_price("not-a-uuid", "Standard", "Summer", 3, 4)

        package.active = False
        await session.commit()
        with pytest.raises(PackageNotFoundError):
            await catalog.lookup_package_price(str(package.id), "Standard", "Summer", 3, 4)
