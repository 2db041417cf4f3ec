"""Plain-record form of a quote draft for storage and rendering."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from app.pricing.aggregator import Aggregation, aggregate_draft
from app.pricing.errors import QuoteValidationError
from app.pricing.money import format_money
from app.pricing.types import (
    MAX_ADD_ONS,
    AddOnSelection,
    BaseSource,
    ManualBase,
    NoBase,
    PackageBase,
    PriceChangeReason,
    PriceHistoryEntry,
    QuoteDraft,
    SyncInputs,
    SyncStatus,
)
from app.pricing.validation import (
    check_add_on_id,
    check_group_size,
    check_name,
    parse_amount,
    parse_currency,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Any, field: str) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise QuoteValidationError.for_field(field, f"Invalid timestamp {value!r}") from exc


def base_source_to_record(source: BaseSource) -> dict[str, Any]:
    if isinstance(source, PackageBase):
        return {
            "kind": source.kind,
            "package_id": source.package_id,
            "package_version": source.package_version,
            "tier_label": source.tier_label,
            "period": source.period,
            "nights": source.nights,
            "package_name": source.package_name,
        }
    return {"kind": source.kind}


def base_source_from_record(record: Mapping[str, Any] | None) -> BaseSource:
    if not record:
        return NoBase()
    kind = record.get("kind")
    if kind == NoBase.kind:
        return NoBase()
    if kind == ManualBase.kind:
        return ManualBase()
    if kind == PackageBase.kind:
        try:
            return PackageBase(
                package_id=str(record["package_id"]),
                package_version=int(record.get("package_version", 1)),
                tier_label=str(record["tier_label"]),
                period=str(record["period"]),
                nights=int(record["nights"]),
                package_name=record.get("package_name"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise QuoteValidationError.for_field(
                "base_source", f"Incomplete package base source: {exc}"
            ) from exc
    raise QuoteValidationError.for_field("base_source", f"Unknown base source {kind!r}")


def _inputs_to_record(inputs: SyncInputs | None) -> dict[str, Any] | None:
    if inputs is None:
        return None
    return {
        "group_size": inputs.group_size,
        "currency": inputs.currency.value,
        "base_source": base_source_to_record(inputs.base_source),
    }


def _inputs_from_record(record: Mapping[str, Any] | None) -> SyncInputs | None:
    if not record:
        return None
    return SyncInputs(
        group_size=check_group_size(record.get("group_size")),
        currency=parse_currency(record.get("currency", "")),
        base_source=base_source_from_record(record.get("base_source")),
    )


def selection_to_record(selection: AddOnSelection) -> dict[str, Any]:
    return {
        "add_on_id": selection.add_on_id,
        "name": selection.name,
        "unit_price": format_money(selection.unit_price_cents),
        "currency": selection.currency.value,
        "per_unit_pricing": selection.per_unit_pricing,
        "added_at": _iso(selection.added_at),
    }


def selection_from_record(record: Mapping[str, Any]) -> AddOnSelection:
    return AddOnSelection(
        add_on_id=check_add_on_id(record.get("add_on_id")),
        name=check_name(record.get("name")),
        unit_price_cents=parse_amount(record.get("unit_price", ""), "unit_price"),
        currency=parse_currency(record.get("currency", "")),
        per_unit_pricing=bool(record.get("per_unit_pricing", False)),
        added_at=_parse_datetime(record.get("added_at"), "added_at"),
    )


def history_entry_to_record(entry: PriceHistoryEntry) -> dict[str, Any]:
    return {
        "price": format_money(entry.price_cents),
        "reason": entry.reason.value,
        "timestamp": _iso(entry.timestamp),
        "actor_id": entry.actor_id,
    }


def history_entry_from_record(record: Mapping[str, Any]) -> PriceHistoryEntry:
    try:
        reason = PriceChangeReason(record.get("reason"))
    except ValueError as exc:
        raise QuoteValidationError.for_field(
            "price_history", f"Unknown reason {record.get('reason')!r}"
        ) from exc
    return PriceHistoryEntry(
        price_cents=parse_amount(record.get("price", ""), "price_history"),
        reason=reason,
        timestamp=_parse_datetime(record.get("timestamp"), "price_history"),
        actor_id=str(record.get("actor_id", "")),
    )


def draft_to_record(draft: QuoteDraft) -> dict[str, Any]:
    """Serialize ``draft`` to JSON-compatible plain types."""
    return {
        "quote_id": draft.quote_id,
        "group_size": draft.group_size,
        "currency": draft.currency.value,
        "base_price": format_money(draft.base_price_cents),
        "base_source": base_source_to_record(draft.base_source),
        "add_ons": [selection_to_record(item) for item in draft.add_ons],
        "total_price": format_money(draft.total_price_cents),
        "expected_total": format_money(draft.expected_total_cents),
        "sync_status": draft.sync_status.value,
        "price_history": [history_entry_to_record(item) for item in draft.price_history],
        "recalc_token": draft.recalc_token,
        "status_before_calculation": (
            draft.status_before_calculation.value
            if draft.status_before_calculation is not None
            else None
        ),
        "synced_inputs": _inputs_to_record(draft.synced_inputs),
        "sync_error": draft.sync_error,
        "recalculated_at": _iso(draft.recalculated_at),
    }


def draft_from_record(record: Mapping[str, Any]) -> QuoteDraft:
    """Rebuild a draft from ``draft_to_record`` output, validating limits."""
    add_ons = [selection_from_record(item) for item in record.get("add_ons") or []]
    if len(add_ons) > MAX_ADD_ONS:
        raise QuoteValidationError.for_field(
            "add_ons", f"Maximum {MAX_ADD_ONS} add-ons allowed per quote"
        )
    try:
        status = SyncStatus(record.get("sync_status", SyncStatus.SYNCED.value))
        before_raw = record.get("status_before_calculation")
        before = SyncStatus(before_raw) if before_raw else None
    except ValueError as exc:
        raise QuoteValidationError.for_field("sync_status", str(exc)) from exc
    recalculated_at = record.get("recalculated_at")
    return QuoteDraft(
        quote_id=record.get("quote_id"),
        group_size=check_group_size(record.get("group_size")),
        currency=parse_currency(record.get("currency", "")),
        base_price_cents=parse_amount(record.get("base_price", "0"), "base_price"),
        base_source=base_source_from_record(record.get("base_source")),
        add_ons=tuple(add_ons),
        total_price_cents=parse_amount(record.get("total_price", "0"), "total_price"),
        expected_total_cents=parse_amount(
            record.get("expected_total", "0"), "expected_total"
        ),
        sync_status=status,
        price_history=tuple(
            history_entry_from_record(item) for item in record.get("price_history") or []
        ),
        recalc_token=int(record.get("recalc_token") or 0),
        status_before_calculation=before,
        synced_inputs=_inputs_from_record(record.get("synced_inputs")),
        sync_error=record.get("sync_error"),
        recalculated_at=(
            _parse_datetime(recalculated_at, "recalculated_at") if recalculated_at else None
        ),
    )


def _base_label(source: BaseSource) -> str:
    if isinstance(source, PackageBase):
        name = source.package_name or source.package_id
        return f"{name} ({source.tier_label}, {source.period}, {source.nights} nights)"
    if isinstance(source, ManualBase):
        return "Manual base price"
    return "No base price"


def build_summary(
    draft: QuoteDraft, aggregation: Aggregation | None = None
) -> dict[str, Any]:
    """Itemized view of a quote for summaries and exported emails."""
    aggregation = aggregation or aggregate_draft(draft)
    currency = draft.currency.value
    return {
        "quote_id": draft.quote_id,
        "currency": currency,
        "group_size": draft.group_size,
        "base": {
            "label": _base_label(draft.base_source),
            "source": draft.base_source.kind,
            "amount": format_money(aggregation.base_cents),
        },
        "add_ons": [
            {
                "add_on_id": line.add_on_id,
                "name": line.name,
                "per_unit_pricing": line.per_unit_pricing,
                "unit_price": format_money(line.unit_price_cents),
                "quantity": line.quantity,
                "arithmetic": line.arithmetic(),
                "amount": format_money(line.amount_cents),
            }
            for line in aggregation.lines
        ],
        "excluded_add_ons": [
            {
                "add_on_id": selection.add_on_id,
                "name": selection.name,
                "currency": selection.currency.value,
                "notice": (
                    f"{selection.name} is priced in {selection.currency.value} and "
                    f"is not included in the {currency} total"
                ),
            }
            for selection in aggregation.excluded_add_ons
        ],
        "add_ons_total": format_money(aggregation.add_ons_total_cents),
        "expected_total": format_money(aggregation.expected_total_cents),
        "total_price": format_money(draft.total_price_cents),
        "sync_status": draft.sync_status.value,
        "sync_error": draft.sync_error,
        "price_history": [history_entry_to_record(item) for item in draft.price_history],
    }


__all__ = [
    "base_source_from_record",
    "base_source_to_record",
    "build_summary",
    "draft_from_record",
    "draft_to_record",
    "history_entry_to_record",
    "selection_to_record",
]
