"""Mutations understood by the quote sync controller."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from app.pricing.types import BaseSource, Currency


@dataclass(frozen=True, slots=True)
class BaseChanged:
    """Link a package, enter a manual base price, or clear the base.

    ``base_price`` is required for ``ManualBase`` and ignored otherwise.
    """

    source: BaseSource
    base_price: Decimal | str | None = None


@dataclass(frozen=True, slots=True)
class AddOnAdded:
    add_on_id: str
    per_unit_pricing: bool | None = None


@dataclass(frozen=True, slots=True)
class AddOnRemoved:
    add_on_id: str


@dataclass(frozen=True, slots=True)
class AddOnPerUnitToggled:
    add_on_id: str
    per_unit_pricing: bool


@dataclass(frozen=True, slots=True)
class GroupSizeChanged:
    group_size: int


@dataclass(frozen=True, slots=True)
class CurrencyChanged:
    currency: Currency | str


@dataclass(frozen=True, slots=True)
class TotalManuallyEdited:
    total_price: Decimal | str


@dataclass(frozen=True, slots=True)
class Recalculate:
    """Force the calculated total into the quote."""


@dataclass(frozen=True, slots=True)
class ResetToCalculated:
    """Drop a custom override in favour of the calculated total."""


QuoteEvent = Union[
    BaseChanged,
    AddOnAdded,
    AddOnRemoved,
    AddOnPerUnitToggled,
    GroupSizeChanged,
    CurrencyChanged,
    TotalManuallyEdited,
    Recalculate,
    ResetToCalculated,
]

__all__ = [
    "AddOnAdded",
    "AddOnPerUnitToggled",
    "AddOnRemoved",
    "BaseChanged",
    "CurrencyChanged",
    "GroupSizeChanged",
    "QuoteEvent",
    "Recalculate",
    "ResetToCalculated",
    "TotalManuallyEdited",
]
