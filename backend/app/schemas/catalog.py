"""Schemas for catalog add-ons and travel packages."""

from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.pricing.types import Currency


class AddOnBase(BaseModel):
    """Shared add-on fields."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    unit_price: Decimal = Field(ge=Decimal("0"), decimal_places=2)
    currency: Currency
    per_unit_default: bool = False
    active: bool = True


class AddOnCreate(AddOnBase):
    """Payload for creating catalog add-ons."""


class AddOnUpdate(BaseModel):
    """Mutable add-on fields."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    unit_price: Decimal | None = Field(default=None, ge=Decimal("0"), decimal_places=2)
    currency: Currency | None = None
    per_unit_default: bool | None = None
    active: bool | None = None


class AddOnRead(AddOnBase):
    """Serialized add-on."""

    id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class PackagePriceRowBase(BaseModel):
    tier_label: str = Field(min_length=1, max_length=100)
    min_people: int = Field(default=1, ge=1)
    max_people: int = Field(ge=1)
    period: str = Field(min_length=1, max_length=200)
    nights: int = Field(ge=1)
    price_per_person: Decimal | None = Field(
        default=None, ge=Decimal("0"), decimal_places=2
    )

    @model_validator(mode="after")
    def _check_people_range(self) -> "PackagePriceRowBase":
        if self.min_people > self.max_people:
            raise ValueError("min_people must not exceed max_people")
        return self


class PackagePriceRowCreate(PackagePriceRowBase):
    """A price row; omit ``price_per_person`` for on-request pricing."""


class PackagePriceRowRead(PackagePriceRowBase):
    id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class TravelPackageCreate(BaseModel):
    """Payload for creating a travel package with its price grid."""

    name: str = Field(min_length=1, max_length=200)
    currency: Currency
    version: int = Field(default=1, ge=1)
    active: bool = True
    prices: list[PackagePriceRowCreate] = Field(default_factory=list)


class TravelPackageRead(BaseModel):
    id: uuid.UUID
    name: str
    currency: Currency
    version: int
    active: bool
    prices: list[PackagePriceRowRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
