"""Boundary checks shared by the controller and record deserialization."""

from __future__ import annotations

from decimal import Decimal

from app.pricing.errors import QuoteValidationError
from app.pricing.money import to_cents
from app.pricing.types import MAX_ADD_ONS, NAME_MAX_LENGTH, Currency, QuoteDraft


def parse_currency(value: Currency | str, field: str = "currency") -> Currency:
    try:
        return Currency(value)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in Currency)
        raise QuoteValidationError.for_field(
            field, f"Unknown currency {value!r}; expected one of {allowed}"
        ) from exc


def parse_amount(value: Decimal | int | str, field: str) -> int:
    """Parse a non-negative money amount into cents."""
    try:
        cents = to_cents(value, exact=True)
    except ValueError as exc:
        raise QuoteValidationError.for_field(field, str(exc)) from exc
    if cents < 0:
        raise QuoteValidationError.for_field(field, "Amount must not be negative")
    return cents


def check_group_size(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuoteValidationError.for_field("group_size", "Group size must be an integer")
    if value < 1:
        raise QuoteValidationError.for_field("group_size", "Group size must be at least 1")
    return value


def check_add_on_id(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuoteValidationError.for_field("add_on_id", "Add-on id is required")
    return value


def check_name(value: object, field: str = "name") -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuoteValidationError.for_field(field, "Name is required")
    if len(value) > NAME_MAX_LENGTH:
        raise QuoteValidationError.for_field(
            field, f"Name must be at most {NAME_MAX_LENGTH} characters"
        )
    return value


def check_capacity(draft: QuoteDraft) -> None:
    if len(draft.add_ons) >= MAX_ADD_ONS:
        raise QuoteValidationError.for_field(
            "add_ons", f"Maximum {MAX_ADD_ONS} add-ons allowed per quote"
        )


__all__ = [
    "check_add_on_id",
    "check_capacity",
    "check_group_size",
    "check_name",
    "parse_amount",
    "parse_currency",
]
