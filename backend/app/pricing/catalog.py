"""Catalog collaborator contract consumed by the pricing engine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Awaitable, Final, Iterable, Protocol, TypeVar

from app.pricing.errors import (
    CatalogUnavailableError,
    PackageNotFoundError,
    QuoteValidationError,
)
from app.pricing.types import Currency

ON_REQUEST: Final = "ON_REQUEST"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CatalogAddOn:
    """Live catalog view of an add-on."""

    id: str
    name: str
    unit_price_cents: int
    currency: Currency
    per_unit_default: bool
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class PackagePrice:
    """Result of a package price lookup; ``price_cents`` is None when on request."""

    price_cents: int | None
    package_version: int = 1
    package_name: str | None = None
    currency: Currency | None = None

    @property
    def is_on_request(self) -> bool:
        return self.price_cents is None


class CatalogClient(Protocol):
    """Read-only lookups the engine needs from the catalog."""

    async def lookup_add_ons(self, ids: list[str]) -> list[CatalogAddOn]:
        """Return the records that exist for ``ids``; unknown ids are omitted."""
        ...

    async def lookup_package_price(
        self,
        package_id: str,
        tier_label: str,
        period: str,
        nights: int,
        group_size: int,
    ) -> PackagePrice:
        """Return the group price for a package row."""
        ...


@dataclass(slots=True)
class _PackageRow:
    tier_label: str
    min_people: int
    max_people: int
    period: str
    nights: int
    price_per_person_cents: int | None


@dataclass(slots=True)
class _Package:
    name: str
    version: int
    active: bool
    currency: Currency
    rows: list[_PackageRow] = field(default_factory=list)


class InMemoryCatalog:
    """Dictionary-backed catalog used for local runs and tests."""

    def __init__(self, add_ons: Iterable[CatalogAddOn] = ()) -> None:
        self._add_ons: dict[str, CatalogAddOn] = {item.id: item for item in add_ons}
        self._packages: dict[str, _Package] = {}
        self.available = True
        self.add_on_calls: list[list[str]] = []
        self.package_calls = 0

    def put_add_on(self, add_on: CatalogAddOn) -> None:
        self._add_ons[add_on.id] = add_on

    def update_add_on(self, add_on_id: str, **changes: object) -> None:
        self._add_ons[add_on_id] = replace(self._add_ons[add_on_id], **changes)

    def delete_add_on(self, add_on_id: str) -> None:
        self._add_ons.pop(add_on_id, None)

    def put_package(
        self,
        package_id: str,
        *,
        name: str = "Package",
        version: int = 1,
        active: bool = True,
        currency: Currency = Currency.GBP,
    ) -> None:
        self._packages[package_id] = _Package(
            name=name, version=version, active=active, currency=currency
        )

    def add_package_price(
        self,
        package_id: str,
        *,
        tier_label: str,
        period: str,
        nights: int,
        price_per_person_cents: int | None,
        min_people: int = 1,
        max_people: int = 100,
    ) -> None:
        self._packages[package_id].rows.append(
            _PackageRow(
                tier_label=tier_label,
                min_people=min_people,
                max_people=max_people,
                period=period,
                nights=nights,
                price_per_person_cents=price_per_person_cents,
            )
        )

    async def lookup_add_ons(self, ids: list[str]) -> list[CatalogAddOn]:
        if not self.available:
            raise CatalogUnavailableError("Catalog is unreachable")
        self.add_on_calls.append(list(ids))
        return [self._add_ons[item] for item in ids if item in self._add_ons]

    async def lookup_package_price(
        self,
        package_id: str,
        tier_label: str,
        period: str,
        nights: int,
        group_size: int,
    ) -> PackagePrice:
        if not self.available:
            raise CatalogUnavailableError("Catalog is unreachable")
        self.package_calls += 1
        package = self._packages.get(package_id)
        if package is None or not package.active:
            raise PackageNotFoundError(package_id)
        row = select_price_row(package.rows, tier_label, period, nights, group_size)
        if row.price_per_person_cents is None:
            return PackagePrice(None, package.version, package.name, package.currency)
        return PackagePrice(
            row.price_per_person_cents * group_size,
            package.version,
            package.name,
            package.currency,
        )


def select_price_row(rows, tier_label: str, period: str, nights: int, group_size: int):
    """Pick the package row for a tier/period/nights that covers ``group_size``.

    Works on any row objects exposing ``tier_label``, ``min_people``,
    ``max_people``, ``period`` and ``nights``.
    """
    candidates = [
        row
        for row in rows
        if row.tier_label == tier_label and row.period == period and row.nights == nights
    ]
    if not candidates:
        raise QuoteValidationError.for_field(
            "base_source",
            f"No price for tier {tier_label!r}, period {period!r}, {nights} nights",
        )
    for row in candidates:
        if row.min_people <= group_size <= row.max_people:
            return row
    low = min(row.min_people for row in candidates)
    high = max(row.max_people for row in candidates)
    raise QuoteValidationError.for_field(
        "group_size",
        f"{group_size} people is outside tier {tier_label!r} ({low}-{high} people)",
    )


async def call_catalog(call: Awaitable[T], timeout: float | None) -> T:
    """Await a catalog call, treating a timeout as an unreachable catalog."""
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError as exc:
        raise CatalogUnavailableError(
            f"Catalog did not answer within {timeout} seconds"
        ) from exc


__all__ = [
    "CatalogAddOn",
    "CatalogClient",
    "InMemoryCatalog",
    "ON_REQUEST",
    "PackagePrice",
    "call_catalog",
    "select_price_row",
]
