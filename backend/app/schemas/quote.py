"""Schemas for quote drafts, pricing events and summaries."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator

from app.pricing import events
from app.pricing.types import (
    Currency,
    ManualBase,
    NoBase,
    PackageBase,
    PriceChangeReason,
    SyncStatus,
    WarningCode,
)


class QuoteCreate(BaseModel):
    """Payload for starting a new quote draft."""

    title: str | None = Field(default=None, max_length=200)
    group_size: int = Field(ge=1)
    currency: Currency | None = None


class BaseChangedRequest(BaseModel):
    """Link a package, type a base price or clear the base."""

    type: Literal["base_changed"]
    source: Literal["none", "manual", "package"]
    base_price: Decimal | None = Field(default=None, ge=Decimal("0"), decimal_places=2)
    package_id: uuid.UUID | None = None
    package_version: int = Field(default=1, ge=1)
    tier_label: str | None = None
    period: str | None = None
    nights: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_source_fields(self) -> "BaseChangedRequest":
        if self.source == "manual" and self.base_price is None:
            raise ValueError("base_price is required for a manual base")
        if self.source == "package":
            missing = [
                name
                for name in ("package_id", "tier_label", "period", "nights")
                if getattr(self, name) in (None, "")
            ]
            if missing:
                raise ValueError(f"Missing package fields: {', '.join(missing)}")
        return self

    def to_event(self) -> events.BaseChanged:
        if self.source == "manual":
            return events.BaseChanged(ManualBase(), self.base_price)
        if self.source == "package":
            return events.BaseChanged(
                PackageBase(
                    package_id=str(self.package_id),
                    package_version=self.package_version,
                    tier_label=self.tier_label or "",
                    period=self.period or "",
                    nights=self.nights or 0,
                )
            )
        return events.BaseChanged(NoBase())


class AddOnAddedRequest(BaseModel):
    type: Literal["add_on_added"]
    add_on_id: uuid.UUID
    per_unit_pricing: bool | None = None

    def to_event(self) -> events.AddOnAdded:
        return events.AddOnAdded(str(self.add_on_id), self.per_unit_pricing)


class AddOnRemovedRequest(BaseModel):
    type: Literal["add_on_removed"]
    add_on_id: uuid.UUID

    def to_event(self) -> events.AddOnRemoved:
        return events.AddOnRemoved(str(self.add_on_id))


class AddOnPerUnitToggledRequest(BaseModel):
    type: Literal["add_on_per_unit_toggled"]
    add_on_id: uuid.UUID
    per_unit_pricing: bool

    def to_event(self) -> events.AddOnPerUnitToggled:
        return events.AddOnPerUnitToggled(str(self.add_on_id), self.per_unit_pricing)


class GroupSizeChangedRequest(BaseModel):
    type: Literal["group_size_changed"]
    group_size: int = Field(ge=1)

    def to_event(self) -> events.GroupSizeChanged:
        return events.GroupSizeChanged(self.group_size)


class CurrencyChangedRequest(BaseModel):
    type: Literal["currency_changed"]
    currency: Currency

    def to_event(self) -> events.CurrencyChanged:
        return events.CurrencyChanged(self.currency)


class TotalManuallyEditedRequest(BaseModel):
    type: Literal["total_manually_edited"]
    total_price: Decimal = Field(ge=Decimal("0"), decimal_places=2)

    def to_event(self) -> events.TotalManuallyEdited:
        return events.TotalManuallyEdited(self.total_price)


QuoteEventRequest = Annotated[
    Union[
        BaseChangedRequest,
        AddOnAddedRequest,
        AddOnRemovedRequest,
        AddOnPerUnitToggledRequest,
        GroupSizeChangedRequest,
        CurrencyChangedRequest,
        TotalManuallyEditedRequest,
    ],
    Field(discriminator="type"),
]


class QuoteEventBody(RootModel[QuoteEventRequest]):
    """Request body for ``POST /quotes/{id}/events``."""

    def to_event(self) -> events.QuoteEvent:
        return self.root.to_event()


class BaseSourceRead(BaseModel):
    kind: Literal["none", "manual", "package"]
    package_id: str | None = None
    package_version: int | None = None
    tier_label: str | None = None
    period: str | None = None
    nights: int | None = None
    package_name: str | None = None


class AddOnSelectionRead(BaseModel):
    add_on_id: str
    name: str
    unit_price: Decimal
    currency: Currency
    per_unit_pricing: bool
    added_at: datetime


class PriceHistoryEntryRead(BaseModel):
    price: Decimal
    reason: PriceChangeReason
    timestamp: datetime
    actor_id: str


class QuoteRead(BaseModel):
    """Serialized quote draft."""

    id: uuid.UUID
    title: str | None = None
    group_size: int
    currency: Currency
    base_price: Decimal
    base_source: BaseSourceRead
    add_ons: list[AddOnSelectionRead] = Field(default_factory=list)
    total_price: Decimal
    expected_total: Decimal
    sync_status: SyncStatus
    sync_error: str | None = None
    recalculated_at: datetime | None = None
    price_history: list[PriceHistoryEntryRead] = Field(default_factory=list)


class SyncWarningRead(BaseModel):
    code: WarningCode
    message: str
    add_on_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PriceComparisonRead(BaseModel):
    old_price: Decimal
    new_price: Decimal
    price_difference: Decimal
    percentage_change: Decimal
    currency: Currency


class QuoteSyncResponse(BaseModel):
    """Quote state after an event, with the warnings to show."""

    quote: QuoteRead
    warnings: list[SyncWarningRead] = Field(default_factory=list)
    comparison: PriceComparisonRead | None = None


class SummaryBaseLine(BaseModel):
    label: str
    source: str
    amount: Decimal


class SummaryAddOnLine(BaseModel):
    add_on_id: str
    name: str
    per_unit_pricing: bool
    unit_price: Decimal
    quantity: int
    arithmetic: str
    amount: Decimal


class SummaryExcludedAddOn(BaseModel):
    add_on_id: str
    name: str
    currency: Currency
    notice: str


class QuoteSummaryRead(BaseModel):
    """Itemized quote for summaries and exported emails."""

    quote_id: str | None = None
    title: str | None = None
    currency: Currency
    group_size: int
    base: SummaryBaseLine
    add_ons: list[SummaryAddOnLine] = Field(default_factory=list)
    excluded_add_ons: list[SummaryExcludedAddOn] = Field(default_factory=list)
    add_ons_total: Decimal
    expected_total: Decimal
    total_price: Decimal
    sync_status: SyncStatus
    sync_error: str | None = None
    price_history: list[PriceHistoryEntryRead] = Field(default_factory=list)
    text: str
