"""Value types for the quote pricing engine.

All monetary fields are integer cents. Every type here is immutable: the
controller produces a new ``QuoteDraft`` for each applied event instead of
mutating the previous one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Final, Union

from app.pricing.money import from_cents

MAX_ADD_ONS: Final = 20
NAME_MAX_LENGTH: Final = 200


class Currency(str, enum.Enum):
    """Settlement currencies supported by quotes and the catalog."""

    GBP = "GBP"
    EUR = "EUR"
    USD = "USD"


class SyncStatus(str, enum.Enum):
    """Whether the stored total agrees with the formula-derived total."""

    SYNCED = "synced"
    CUSTOM = "custom"
    CALCULATING = "calculating"
    ERROR = "error"
    OUT_OF_SYNC = "out_of_sync"


class PriceChangeReason(str, enum.Enum):
    """Why a price history entry was appended."""

    PACKAGE_SELECTED = "package_selected"
    RECALCULATED = "recalculated"
    MANUAL_OVERRIDE = "manual_override"
    ADD_ON_ADDED = "add_on_added"
    ADD_ON_REMOVED = "add_on_removed"

    @property
    def is_structural(self) -> bool:
        return self in (PriceChangeReason.ADD_ON_ADDED, PriceChangeReason.ADD_ON_REMOVED)


class WarningCode(str, enum.Enum):
    """Non-blocking notices returned alongside a new draft."""

    CURRENCY_MISMATCH = "currency_mismatch"
    ADD_ON_INACTIVE = "add_on_inactive"
    ADD_ON_MISSING = "add_on_missing"
    PRICE_DRIFT = "price_drift"
    PRICE_UNAVAILABLE = "price_unavailable"
    PACKAGE_NOT_FOUND = "package_not_found"
    INVALID_PARAMETERS = "invalid_parameters"
    PACKAGE_VERSION_CHANGED = "package_version_changed"
    CATALOG_UNAVAILABLE = "catalog_unavailable"


@dataclass(frozen=True, slots=True)
class NoBase:
    """The quote has no base offering yet."""

    kind: ClassVar[str] = "none"


@dataclass(frozen=True, slots=True)
class ManualBase:
    """The base price was typed in by the operator."""

    kind: ClassVar[str] = "manual"


@dataclass(frozen=True, slots=True)
class PackageBase:
    """The base price comes from a catalog package price row."""

    package_id: str
    package_version: int
    tier_label: str
    period: str
    nights: int
    package_name: str | None = None
    kind: ClassVar[str] = "package"


BaseSource = Union[NoBase, ManualBase, PackageBase]


@dataclass(frozen=True, slots=True)
class SyncInputs:
    """Structural inputs captured at the last successful recalculation."""

    group_size: int
    currency: Currency
    base_source: BaseSource


@dataclass(frozen=True, slots=True)
class AddOnSelection:
    """Snapshot of a catalog add-on taken when the operator selected it."""

    add_on_id: str
    name: str
    unit_price_cents: int
    currency: Currency
    per_unit_pricing: bool
    added_at: datetime

    @property
    def unit_price(self) -> Decimal:
        return from_cents(self.unit_price_cents)


@dataclass(frozen=True, slots=True)
class PriceHistoryEntry:
    """Immutable audit record of a total price change."""

    price_cents: int
    reason: PriceChangeReason
    timestamp: datetime
    actor_id: str

    @property
    def price(self) -> Decimal:
        return from_cents(self.price_cents)


@dataclass(frozen=True, slots=True)
class SyncWarning:
    """A notice the operator must see, which does not block saving."""

    code: WarningCode
    message: str
    add_on_id: str | None = None


@dataclass(frozen=True, slots=True)
class QuoteDraft:
    """Working state of one quote being priced."""

    group_size: int
    currency: Currency
    base_price_cents: int = 0
    base_source: BaseSource = field(default_factory=NoBase)
    add_ons: tuple[AddOnSelection, ...] = ()
    total_price_cents: int = 0
    expected_total_cents: int = 0
    sync_status: SyncStatus = SyncStatus.SYNCED
    price_history: tuple[PriceHistoryEntry, ...] = ()
    recalc_token: int = 0
    status_before_calculation: SyncStatus | None = None
    synced_inputs: SyncInputs | None = None
    sync_error: str | None = None
    recalculated_at: datetime | None = None
    quote_id: str | None = None

    @property
    def total_price(self) -> Decimal:
        return from_cents(self.total_price_cents)

    @property
    def base_price(self) -> Decimal:
        return from_cents(self.base_price_cents)

    @property
    def expected_total(self) -> Decimal:
        return from_cents(self.expected_total_cents)

    @property
    def add_on_ids(self) -> list[str]:
        return [selection.add_on_id for selection in self.add_ons]

    def find_add_on(self, add_on_id: str) -> AddOnSelection | None:
        for selection in self.add_ons:
            if selection.add_on_id == add_on_id:
                return selection
        return None

    def structural_inputs(self) -> SyncInputs:
        return SyncInputs(
            group_size=self.group_size,
            currency=self.currency,
            base_source=self.base_source,
        )


__all__ = [
    "AddOnSelection",
    "BaseSource",
    "Currency",
    "MAX_ADD_ONS",
    "ManualBase",
    "NAME_MAX_LENGTH",
    "NoBase",
    "PackageBase",
    "PriceChangeReason",
    "PriceHistoryEntry",
    "QuoteDraft",
    "SyncInputs",
    "SyncStatus",
    "SyncWarning",
    "WarningCode",
]
