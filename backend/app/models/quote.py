"""Persisted quote drafts."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Enum, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from app.db.base import Base
from app.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from app.pricing.types import Currency, SyncStatus

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class Quote(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Stored pricing state of one group quote.

    Add-on snapshots, history and base source are kept as JSON documents in
    the shape produced by ``app.pricing.serialization``.
    """

    __tablename__ = "quotes"

    title: Mapped[str | None] = mapped_column(String(200))
    group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[Currency] = mapped_column(Enum(Currency), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    base_source: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, nullable=False, default=dict
    )
    add_ons: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, nullable=False, default=list
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    expected_total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=0
    )
    sync_status: Mapped[SyncStatus] = mapped_column(
        Enum(SyncStatus), nullable=False, default=SyncStatus.SYNCED
    )
    price_history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, nullable=False, default=list
    )
    sync_state: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, nullable=False, default=dict
    )
