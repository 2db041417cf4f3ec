"""Tests for money conversion, the status classifier and price history."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from app.pricing.history import HistoryRecorder
from app.pricing.money import format_money, from_cents, to_cents, within_tolerance
from app.pricing.override import OverrideDetector
from app.pricing.types import (
    Currency,
    ManualBase,
    PackageBase,
    PriceChangeReason,
    QuoteDraft,
    SyncStatus,
)

FIXED = datetime(2025, 3, 1, 12, tzinfo=UTC)


def test_to_cents_rounds_half_up() -> None:
    assert to_cents("12.345") == 1235
    assert to_cents(Decimal("0.005")) == 1
    assert to_cents(7) == 700


def test_to_cents_avoids_binary_float_error() -> None:
    assert to_cents(0.1 + 0.2) == 30


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", None])
def test_to_cents_rejects_garbage(value) -> None:
    with pytest.raises(ValueError):
        to_cents(value)


def test_exact_conversion_rejects_fractions_of_a_cent() -> None:
    assert to_cents("12.50", exact=True) == 1250
    assert to_cents("7.000", exact=True) == 700
    with pytest.raises(ValueError):
        to_cents("10.005", exact=True)


def test_formatting_uses_two_decimals() -> None:
    assert format_money(175000) == "1750.00"
    assert from_cents(5) == Decimal("0.05")


def test_one_cent_tolerance() -> None:
    assert within_tolerance(100000, 100001)
    assert not within_tolerance(100000, 100002)
    assert OverrideDetector.classify(100001, 100000) is SyncStatus.SYNCED
    assert OverrideDetector.classify(180000, 175000) is SyncStatus.CUSTOM


def test_custom_total_is_held_on_input_changes() -> None:
    draft = QuoteDraft(
        group_size=10,
        currency=Currency.GBP,
        base_source=ManualBase(),
        total_price_cents=180000,
        sync_status=SyncStatus.CUSTOM,
    )
    transition = OverrideDetector().on_inputs_changed(draft, 200000)
    assert transition.status is SyncStatus.CUSTOM
    assert transition.total_price_cents == 180000


def test_pending_structural_change_marks_out_of_sync() -> None:
    package = PackageBase("pkg", 1, "Standard", "Summer", 3)
    synced = QuoteDraft(group_size=10, currency=Currency.GBP, base_source=package)
    draft = replace(synced, synced_inputs=synced.structural_inputs(), group_size=12)
    detector = OverrideDetector()
    assert detector.structural_change_pending(draft)
    transition = detector.on_inputs_changed(draft, 50000)
    assert transition.status is SyncStatus.OUT_OF_SYNC
    assert transition.total_price_cents == 50000


def test_manual_entry_from_error_is_custom() -> None:
    draft = QuoteDraft(
        group_size=2,
        currency=Currency.GBP,
        total_price_cents=1000,
        sync_status=SyncStatus.ERROR,
    )
    transition = OverrideDetector().on_manual_total(draft, 1000, 1000)
    assert transition.status is SyncStatus.CUSTOM


def test_history_skips_unchanged_non_structural_prices() -> None:
    recorder = HistoryRecorder(lambda: FIXED)
    draft = QuoteDraft(group_size=1, currency=Currency.GBP, total_price_cents=500)
    same = recorder.record(draft, 500, PriceChangeReason.RECALCULATED, "agent-1")
    assert same is draft


def test_history_records_structural_events_even_without_delta() -> None:
    recorder = HistoryRecorder(lambda: FIXED)
    draft = QuoteDraft(group_size=1, currency=Currency.GBP, total_price_cents=500)
    updated = recorder.record(draft, 500, PriceChangeReason.ADD_ON_ADDED, "agent-1")
    assert len(updated.price_history) == 1
    entry = updated.price_history[0]
    assert entry.price == Decimal("5.00")
    assert entry.reason is PriceChangeReason.ADD_ON_ADDED
    assert entry.timestamp == FIXED
    assert entry.actor_id == "agent-1"


def test_history_only_grows() -> None:
    recorder = HistoryRecorder(lambda: FIXED)
    draft = QuoteDraft(group_size=1, currency=Currency.GBP)
    first = recorder.record(draft, 100, PriceChangeReason.MANUAL_OVERRIDE, "a")
    second = recorder.record(
        replace(first, total_price_cents=100), 250, PriceChangeReason.RECALCULATED, "b"
    )
    assert second.price_history[0] == first.price_history[0]
    assert [entry.price_cents for entry in second.price_history] == [100, 250]
    assert draft.price_history == ()
