"""Tests for quote persistence and event application."""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.db.session import get_sessionmaker
from app.pricing.errors import QuoteValidationError
from app.pricing.events import AddOnAdded, BaseChanged, GroupSizeChanged, TotalManuallyEdited
from app.pricing.types import Currency, ManualBase, PackageBase, SyncStatus
from app.schemas.catalog import AddOnCreate, PackagePriceRowCreate, TravelPackageCreate
from app.schemas.quote import QuoteCreate
from app.services import catalog_service, quote_service

pytestmark = pytest.mark.asyncio


async def test_events_are_persisted(reset_database, db_url: str) -> None:
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
        package = await catalog_service.create_package(
            session,
            payload=TravelPackageCreate(
                name="Lakes Escape",
                currency=Currency.GBP,
                prices=[
                    PackagePriceRowCreate(
                        tier_label="Standard",
                        max_people=20,
                        period="Summer",
                        nights=3,
                        price_per_person=Decimal("50.00"),
                    )
                ],
            ),
        )
        quote = await quote_service.create_quote(
            session, payload=QuoteCreate(title="Lakes trip", group_size=10)
        )
        assert quote.currency is Currency.GBP
        assert quote.sync_status is SyncStatus.SYNCED

        source = PackageBase(str(package.id), 1, "Standard", "Summer", 3)
        await quote_service.apply_event(
            session, quote=quote, event=BaseChanged(source), actor_id="agent-7"
        )
        result = await quote_service.apply_event(
            session, quote=quote, event=AddOnAdded(str(kayak.id)), actor_id="agent-7"
        )
        assert result.draft.total_price == Decimal("1000.00")
        quote_id = quote.id

    async with sessionmaker() as session:
        stored = await quote_service.get_quote(session, quote_id=quote_id)
        assert stored is not None
        assert stored.total_price == Decimal("1000.00")
        assert stored.base_source["package_name"] == "Lakes Escape"
        assert [entry["reason"] for entry in stored.price_history] == [
            "package_selected",
            "add_on_added",
        ]
        draft = quote_service.load_draft(stored)
        assert draft.synced_inputs is not None
        assert draft.add_ons[0].name == "Kayak excursion"

        result = await quote_service.apply_event(
            session, quote=stored, event=GroupSizeChanged(12), actor_id="agent-7"
        )
        assert result.draft.total_price == Decimal("1200.00")
        assert stored.sync_status is SyncStatus.SYNCED


async def test_rejected_event_is_not_saved(reset_database, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        quote = await quote_service.create_quote(
            session, payload=QuoteCreate(group_size=2, currency=Currency.EUR)
        )
        await quote_service.apply_event(
            session,
            quote=quote,
            event=BaseChanged(ManualBase(), Decimal("80")),
            actor_id="agent",
        )
        quote_id = quote.id
        with pytest.raises(QuoteValidationError):
            await quote_service.apply_event(
                session,
                quote=quote,
                event=TotalManuallyEdited("-3"),
                actor_id="agent",
            )

    async with sessionmaker() as session:
        stored = await quote_service.get_quote(session, quote_id=quote_id)
        assert stored.total_price == Decimal("80.00")
        assert len(stored.price_history) == 1


async def test_summary_text_is_rendered(reset_database, db_url: str) -> None:
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
        dinner = await catalog_service.create_add_on(
            session,
            payload=AddOnCreate(
                name="Gala dinner", unit_price=Decimal("30.00"), currency=Currency.EUR
            ),
        )
        quote = await quote_service.create_quote(
            session, payload=QuoteCreate(title="Spring group", group_size=4)
        )
        for event in (
            BaseChanged(ManualBase(), Decimal("400")),
            AddOnAdded(str(kayak.id)),
            AddOnAdded(str(dinner.id)),
        ):
            await quote_service.apply_event(
                session, quote=quote, event=event, actor_id="agent"
            )

        summary = quote_service.summarize(quote)
        assert summary["title"] == "Spring group"
        assert summary["total_price"] == "600.00"
        text = summary["text"]
        assert "Quote: Spring group" in text
        assert "Manual base price = 400.00 GBP" in text
        assert "Kayak excursion: 50.00 × 4 = 200.00 GBP" in text
        assert "Gala dinner is priced in EUR" in text
        assert "Quoted total: 600.00 GBP (synced)" in text
