"""Money helpers: quotes are priced in integer cents internally."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Final

MONEY_PLACES: Final = Decimal("0.01")
TOLERANCE_CENTS: Final = 1


def to_cents(value: Decimal | float | int | str, *, exact: bool = False) -> int:
    """Convert a display amount (``"12.50"``) into integer cents.

    With ``exact`` set, amounts finer than one cent are rejected instead of
    rounded.
    """
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    rounded = amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    if exact and rounded != amount:
        raise ValueError(f"Amount {value!r} has more than 2 decimal places")
    return int(rounded * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(MONEY_PLACES)


def format_money(cents: int) -> str:
    return f"{from_cents(cents):.2f}"


def within_tolerance(left_cents: int, right_cents: int) -> bool:
    """Return True when two totals differ by at most one cent."""
    return abs(left_cents - right_cents) <= TOLERANCE_CENTS
