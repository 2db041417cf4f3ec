"""Expected total of a quote from its base price and add-on selections."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from app.pricing.calculator import cost, is_excluded
from app.pricing.money import format_money, from_cents
from app.pricing.types import AddOnSelection, Currency, QuoteDraft


@dataclass(frozen=True, slots=True)
class AggregationLine:
    """Contribution of one included add-on."""

    add_on_id: str
    name: str
    unit_price_cents: int
    quantity: int
    per_unit_pricing: bool
    amount_cents: int

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)

    def arithmetic(self) -> str:
        """Human readable arithmetic, e.g. ``50.00 × 10``."""
        if self.per_unit_pricing:
            return f"{format_money(self.unit_price_cents)} × {self.quantity}"
        return format_money(self.unit_price_cents)


@dataclass(frozen=True, slots=True)
class Aggregation:
    """Aggregate pricing output for a quote."""

    base_cents: int
    expected_total_cents: int
    lines: tuple[AggregationLine, ...]
    excluded_add_ons: tuple[AddOnSelection, ...]

    @property
    def add_ons_total_cents(self) -> int:
        return sum(line.amount_cents for line in self.lines)

    @property
    def expected_total(self) -> Decimal:
        return from_cents(self.expected_total_cents)


def aggregate(
    base_cents: int,
    add_ons: Iterable[AddOnSelection],
    currency: Currency,
    group_size: int,
) -> Aggregation:
    """Sum the base price and matching-currency add-ons.

    Pure: identical inputs always produce an equal ``Aggregation``.
    """
    lines: list[AggregationLine] = []
    excluded: list[AddOnSelection] = []
    for selection in add_ons:
        if is_excluded(selection, currency):
            excluded.append(selection)
            continue
        lines.append(
            AggregationLine(
                add_on_id=selection.add_on_id,
                name=selection.name,
                unit_price_cents=selection.unit_price_cents,
                quantity=group_size if selection.per_unit_pricing else 1,
                per_unit_pricing=selection.per_unit_pricing,
                amount_cents=cost(selection, currency, group_size),
            )
        )
    expected = base_cents + sum(line.amount_cents for line in lines)
    return Aggregation(
        base_cents=base_cents,
        expected_total_cents=expected,
        lines=tuple(lines),
        excluded_add_ons=tuple(excluded),
    )


def aggregate_draft(draft: QuoteDraft) -> Aggregation:
    return aggregate(draft.base_price_cents, draft.add_ons, draft.currency, draft.group_size)


__all__ = ["Aggregation", "AggregationLine", "aggregate", "aggregate_draft"]
