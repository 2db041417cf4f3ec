"""Tests for quote draft records and summaries."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.pricing.errors import QuoteValidationError
from app.pricing.serialization import (
    base_source_from_record,
    build_summary,
    draft_from_record,
    draft_to_record,
)
from app.pricing.types import (
    AddOnSelection,
    Currency,
    ManualBase,
    PackageBase,
    PriceChangeReason,
    PriceHistoryEntry,
    QuoteDraft,
    SyncInputs,
    SyncStatus,
)

STAMP = datetime(2025, 3, 1, 10, 30, tzinfo=UTC)


def _selection(add_on_id: str, cents: int, currency: Currency, per_unit: bool):
    return AddOnSelection(add_on_id, add_on_id.title(), cents, currency, per_unit, STAMP)


@pytest.fixture()
def draft() -> QuoteDraft:
    package = PackageBase(
        "pkg-lakes", 2, "Standard", "Summer", 3, package_name="Lakes Escape"
    )
    return QuoteDraft(
        quote_id="q-42",
        group_size=10,
        currency=Currency.GBP,
        base_price_cents=50000,
        base_source=package,
        add_ons=(
            _selection("kayak", 5000, Currency.GBP, True),
            _selection("transfer", 20000, Currency.GBP, False),
            _selection("dinner", 3000, Currency.EUR, True),
        ),
        total_price_cents=180000,
        expected_total_cents=120000,
        sync_status=SyncStatus.CUSTOM,
        price_history=(
            PriceHistoryEntry(50000, PriceChangeReason.PACKAGE_SELECTED, STAMP, "agent"),
            PriceHistoryEntry(180000, PriceChangeReason.MANUAL_OVERRIDE, STAMP, "agent"),
        ),
        recalc_token=3,
        synced_inputs=SyncInputs(10, Currency.GBP, package),
        recalculated_at=STAMP,
    )


def test_record_uses_plain_values(draft: QuoteDraft) -> None:
    record = draft_to_record(draft)
    assert record["total_price"] == "1800.00"
    assert record["currency"] == "GBP"
    assert record["sync_status"] == "custom"
    assert record["base_source"]["kind"] == "package"
    assert record["add_ons"][0]["unit_price"] == "50.00"
    assert record["price_history"][1]["reason"] == "manual_override"
    assert record["recalculated_at"] == STAMP.isoformat()


def test_record_restores_the_same_draft(draft: QuoteDraft) -> None:
    assert draft_from_record(draft_to_record(draft)) == draft


def test_record_rejects_more_than_twenty_add_ons(draft: QuoteDraft) -> None:
    record = draft_to_record(draft)
    record["add_ons"] = [
        dict(record["add_ons"][0], add_on_id=f"extra-{index}") for index in range(21)
    ]
    with pytest.raises(QuoteValidationError) as excinfo:
        draft_from_record(record)
    assert "add_ons" in excinfo.value.fields


def test_record_rejects_unknown_currency(draft: QuoteDraft) -> None:
    record = draft_to_record(draft)
    record["currency"] = "XYZ"
    with pytest.raises(QuoteValidationError):
        draft_from_record(record)


def test_record_rejects_negative_unit_price(draft: QuoteDraft) -> None:
    record = draft_to_record(draft)
    record["add_ons"][0]["unit_price"] = "-1.00"
    with pytest.raises(QuoteValidationError):
        draft_from_record(record)


def test_incomplete_package_source_is_rejected() -> None:
    with pytest.raises(QuoteValidationError):
        base_source_from_record({"kind": "package", "package_id": "pkg"})
    assert base_source_from_record({"kind": "manual"}) == ManualBase()


def test_summary_itemizes_the_quote(draft: QuoteDraft) -> None:
    summary = build_summary(draft)
    assert summary["base"] == {
        "label": "Lakes Escape (Standard, Summer, 3 nights)",
        "source": "package",
        "amount": "500.00",
    }
    kayak, transfer = summary["add_ons"]
    assert kayak["arithmetic"] == "50.00 × 10"
    assert kayak["amount"] == "500.00"
    assert transfer["arithmetic"] == "200.00"
    assert summary["excluded_add_ons"][0]["add_on_id"] == "dinner"
    assert "EUR" in summary["excluded_add_ons"][0]["notice"]
    assert summary["add_ons_total"] == "700.00"
    assert summary["expected_total"] == "1200.00"
    assert summary["total_price"] == "1800.00"
    assert [entry["price"] for entry in summary["price_history"]] == [
        "500.00",
        "1800.00",
    ]
