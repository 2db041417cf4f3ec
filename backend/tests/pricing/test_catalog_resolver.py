"""Tests for the catalog contract helpers and the add-on resolver."""

from __future__ import annotations

import asyncio

import pytest

from app.pricing.catalog import (
    CatalogAddOn,
    InMemoryCatalog,
    call_catalog,
    select_price_row,
)
from app.pricing.errors import (
    AddOnNotFoundError,
    CatalogUnavailableError,
    PackageNotFoundError,
    QuoteValidationError,
)
from app.pricing.resolver import AddOnResolver

pytestmark = pytest.mark.asyncio


async def test_resolve_many_uses_one_batched_call(catalog: InMemoryCatalog) -> None:
    resolver = AddOnResolver(catalog)
    resolved = await resolver.resolve_many(["kayak", "ghost", "kayak", "transfer"])
    assert catalog.add_on_calls == [["kayak", "ghost", "transfer"]]
    assert resolved["ghost"] is None
    assert resolved["kayak"].unit_price_cents == 5000
    assert list(resolved) == ["kayak", "ghost", "transfer"]


async def test_resolve_many_skips_catalog_for_no_ids(catalog: InMemoryCatalog) -> None:
    assert await AddOnResolver(catalog).resolve_many([]) == {}
    assert catalog.add_on_calls == []


async def test_inactive_add_on_is_returned_not_failed(catalog: InMemoryCatalog) -> None:
    catalog.update_add_on("kayak", is_active=False)
    record = await AddOnResolver(catalog).resolve("kayak")
    assert record.is_active is False


async def test_resolve_unknown_id_raises(catalog: InMemoryCatalog) -> None:
    with pytest.raises(AddOnNotFoundError) as excinfo:
        await AddOnResolver(catalog).resolve("ghost")
    assert excinfo.value.add_on_id == "ghost"


async def test_slow_catalog_is_reported_unavailable() -> None:
    class SlowCatalog(InMemoryCatalog):
        async def lookup_add_ons(self, ids: list[str]) -> list[CatalogAddOn]:
            await asyncio.sleep(1)
            return []

    resolver = AddOnResolver(SlowCatalog(), timeout=0.01)
    with pytest.raises(CatalogUnavailableError) as excinfo:
        await resolver.resolve_many(["kayak"])
    assert excinfo.value.retryable is True


async def test_call_catalog_passes_results_through() -> None:
    async def answer() -> int:
        return 42

    assert await call_catalog(answer(), 1.0) == 42


async def test_package_price_multiplies_per_person(catalog: InMemoryCatalog) -> None:
    price = await catalog.lookup_package_price("pkg-lakes", "Standard", "Summer", 3, 10)
    assert price.price_cents == 50000
    assert price.package_name == "Lakes Escape"
    assert not price.is_on_request


async def test_package_price_on_request(catalog: InMemoryCatalog) -> None:
    price = await catalog.lookup_package_price("pkg-lakes", "Standard", "Winter", 3, 10)
    assert price.is_on_request


async def test_inactive_package_is_not_found(catalog: InMemoryCatalog) -> None:
    catalog.put_package("pkg-old", active=False)
    with pytest.raises(PackageNotFoundError):
        await catalog.lookup_package_price("pkg-old", "Standard", "Summer", 3, 2)


async def test_select_price_row_checks_people_range(catalog: InMemoryCatalog) -> None:
    catalog.put_package("pkg-tiers")
    catalog.add_package_price(
        "pkg-tiers",
        tier_label="Group",
        period="Spring",
        nights=2,
        price_per_person_cents=4000,
        min_people=1,
        max_people=9,
    )
    catalog.add_package_price(
        "pkg-tiers",
        tier_label="Group",
        period="Spring",
        nights=2,
        price_per_person_cents=3500,
        min_people=10,
        max_people=30,
    )
    small = await catalog.lookup_package_price("pkg-tiers", "Group", "Spring", 2, 4)
    large = await catalog.lookup_package_price("pkg-tiers", "Group", "Spring", 2, 12)
    assert small.price_cents == 16000
    assert large.price_cents == 42000

    with pytest.raises(QuoteValidationError) as excinfo:
        await catalog.lookup_package_price("pkg-tiers", "Group", "Spring", 2, 31)
    assert "group_size" in excinfo.value.fields


async def test_select_price_row_requires_matching_period() -> None:
    with pytest.raises(QuoteValidationError) as excinfo:
        select_price_row([], "Standard", "Autumn", 4, 2)
    assert "base_source" in excinfo.value.fields


async def test_unavailable_catalog_raises(catalog: InMemoryCatalog) -> None:
    catalog.available = False
    with pytest.raises(CatalogUnavailableError):
        await catalog.lookup_add_ons(["kayak"])
