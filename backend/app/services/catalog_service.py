"""Catalog persistence: add-on curation and the SQL pricing collaborator."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import AddOn, PackagePriceRow, TravelPackage
from app.pricing.catalog import CatalogAddOn, PackagePrice, select_price_row
from app.pricing.errors import PackageNotFoundError
from app.pricing.money import to_cents
from app.schemas.catalog import AddOnCreate, AddOnUpdate, TravelPackageCreate

logger = logging.getLogger(__name__)


def _parse_ids(ids: list[str]) -> list[uuid.UUID]:
    parsed: list[uuid.UUID] = []
    for value in ids:
        try:
            parsed.append(uuid.UUID(str(value)))
        except ValueError:
            logger.debug("Ignoring malformed add-on id %r", value)
    return parsed


def to_catalog_add_on(item: AddOn) -> CatalogAddOn:
    return CatalogAddOn(
        id=str(item.id),
        name=item.name,
        unit_price_cents=to_cents(item.unit_price),
        currency=item.currency,
        per_unit_default=item.per_unit_default,
        is_active=item.active,
    )


class SqlCatalog:
    """Catalog collaborator backed by the add-on and package tables."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def lookup_add_ons(self, ids: list[str]) -> list[CatalogAddOn]:
        parsed = _parse_ids(ids)
        if not parsed:
            return []
        result = await self._session.execute(select(AddOn).where(AddOn.id.in_(parsed)))
        return [to_catalog_add_on(item) for item in result.scalars().all()]

    async def lookup_package_price(
        self,
        package_id: str,
        tier_label: str,
        period: str,
        nights: int,
        group_size: int,
    ) -> PackagePrice:
        try:
            key = uuid.UUID(str(package_id))
        except ValueError as exc:
            raise PackageNotFoundError(package_id) from exc
        package = await self._session.get(TravelPackage, key)
        if package is None or not package.active:
            raise PackageNotFoundError(package_id)
        row = select_price_row(package.prices, tier_label, period, nights, group_size)
        if row.price_per_person is None:
            return PackagePrice(None, package.version, package.name, package.currency)
        return PackagePrice(
            to_cents(row.price_per_person) * group_size,
            package.version,
            package.name,
            package.currency,
        )


async def list_add_ons(
    session: AsyncSession, *, active: bool | None = None
) -> list[AddOn]:
    stmt: Select[tuple[AddOn]] = select(AddOn)
    if active is not None:
        stmt = stmt.where(AddOn.active.is_(active))
    stmt = stmt.order_by(AddOn.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_add_on(session: AsyncSession, *, add_on_id: uuid.UUID) -> AddOn | None:
    return await session.get(AddOn, add_on_id)


async def create_add_on(session: AsyncSession, *, payload: AddOnCreate) -> AddOn:
    item = AddOn(
        name=payload.name,
        description=payload.description,
        unit_price=Decimal(str(payload.unit_price)),
        currency=payload.currency,
        per_unit_default=payload.per_unit_default,
        active=payload.active,
    )
    session.add(item)
    await session.commit()
    await session.refresh(item)
    logger.info("Created add-on %s (%s)", item.id, item.name)
    return item


async def update_add_on(
    session: AsyncSession, *, item: AddOn, payload: AddOnUpdate
) -> AddOn:
    data = payload.model_dump(exclude_unset=True)
    if data.get("unit_price") is not None:
        data["unit_price"] = Decimal(str(data["unit_price"]))
    for key, value in data.items():
        if value is None and key != "description":
            continue
        setattr(item, key, value)
    await session.commit()
    await session.refresh(item)
    return item


async def delete_add_on(session: AsyncSession, *, item: AddOn) -> None:
    await session.delete(item)
    await session.commit()
    logger.info("Deleted add-on %s", item.id)


async def create_package(
    session: AsyncSession, *, payload: TravelPackageCreate
) -> TravelPackage:
    package = TravelPackage(
        name=payload.name,
        currency=payload.currency,
        version=payload.version,
        active=payload.active,
    )
    package.prices = [
        PackagePriceRow(
            tier_label=row.tier_label,
            min_people=row.min_people,
            max_people=row.max_people,
            period=row.period,
            nights=row.nights,
            price_per_person=(
                Decimal(str(row.price_per_person))
                if row.price_per_person is not None
                else None
            ),
        )
        for row in payload.prices
    ]
    session.add(package)
    await session.commit()
    await session.refresh(package)
    return package


async def get_package(
    session: AsyncSession, *, package_id: uuid.UUID
) -> TravelPackage | None:
    return await session.get(TravelPackage, package_id)


async def list_packages(
    session: AsyncSession, *, active: bool | None = None
) -> list[TravelPackage]:
    stmt: Select[tuple[TravelPackage]] = select(TravelPackage)
    if active is not None:
        stmt = stmt.where(TravelPackage.active.is_(active))
    stmt = stmt.order_by(TravelPackage.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


__all__ = [
    "SqlCatalog",
    "create_add_on",
    "create_package",
    "delete_add_on",
    "get_add_on",
    "get_package",
    "list_add_ons",
    "list_packages",
    "to_catalog_add_on",
]
