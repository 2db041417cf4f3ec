"""Price synchronization engine for group travel quotes."""

from app.pricing.aggregator import Aggregation, AggregationLine, aggregate
from app.pricing.controller import QuoteSyncController, SyncResult
from app.pricing.types import (
    AddOnSelection,
    Currency,
    ManualBase,
    NoBase,
    PackageBase,
    PriceChangeReason,
    PriceHistoryEntry,
    QuoteDraft,
    SyncStatus,
    SyncWarning,
    WarningCode,
)

__all__ = [
    "AddOnSelection",
    "Aggregation",
    "AggregationLine",
    "Currency",
    "ManualBase",
    "NoBase",
    "PackageBase",
    "PriceChangeReason",
    "PriceHistoryEntry",
    "QuoteDraft",
    "QuoteSyncController",
    "SyncResult",
    "SyncStatus",
    "SyncWarning",
    "WarningCode",
    "aggregate",
]
