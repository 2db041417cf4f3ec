"""Catalog models: optional add-ons and priced travel packages."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from app.pricing.types import Currency


class AddOn(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Separately priced item (e.g. an excursion) that quotes can include."""

    __tablename__ = "add_ons"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    per_unit_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TravelPackage(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Catalog offering whose price depends on tier, period and nights."""

    __tablename__ = "travel_packages"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    prices: Mapped[list["PackagePriceRow"]] = relationship(
        "PackagePriceRow",
        back_populates="package",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PackagePriceRow(UUIDPrimaryKeyMixin, Base):
    """Per-person price for one tier/period/nights combination."""

    __tablename__ = "package_prices"

    package_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("travel_packages.id", ondelete="CASCADE"), nullable=False
    )
    tier_label: Mapped[str] = mapped_column(String(100), nullable=False)
    min_people: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_people: Mapped[int] = mapped_column(Integer, nullable=False)
    period: Mapped[str] = mapped_column(String(200), nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    # NULL means the price is on request
    price_per_person: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    package: Mapped[TravelPackage] = relationship("TravelPackage", back_populates="prices")
