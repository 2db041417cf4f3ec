"""Contribution of a single add-on selection to a quote total."""

from __future__ import annotations

from app.pricing.types import AddOnSelection, Currency


def is_excluded(selection: AddOnSelection, target_currency: Currency) -> bool:
    """Selections priced in another currency never count towards the total."""
    return selection.currency != target_currency


def cost(selection: AddOnSelection, target_currency: Currency, group_size: int) -> int:
    """Return the selection's contribution in cents.

    Zero when the currency differs from the quote's, ``unit × group_size``
    for per-unit pricing and the flat unit price otherwise.
    """
    if is_excluded(selection, target_currency):
        return 0
    if selection.per_unit_pricing:
        return selection.unit_price_cents * group_size
    return selection.unit_price_cents


__all__ = ["cost", "is_excluded"]
