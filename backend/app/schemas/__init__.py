"""Pydantic schemas exposed by the application."""

from app.schemas.catalog import (
    AddOnCreate,
    AddOnRead,
    AddOnUpdate,
    PackagePriceRowCreate,
    PackagePriceRowRead,
    TravelPackageCreate,
    TravelPackageRead,
)
from app.schemas.quote import (
    AddOnAddedRequest,
    AddOnPerUnitToggledRequest,
    AddOnRemovedRequest,
    BaseChangedRequest,
    CurrencyChangedRequest,
    GroupSizeChangedRequest,
    PriceComparisonRead,
    QuoteCreate,
    QuoteEventBody,
    QuoteEventRequest,
    QuoteRead,
    QuoteSummaryRead,
    QuoteSyncResponse,
    SyncWarningRead,
    TotalManuallyEditedRequest,
)

__all__ = [
    "AddOnAddedRequest",
    "AddOnCreate",
    "AddOnPerUnitToggledRequest",
    "AddOnRead",
    "AddOnRemovedRequest",
    "AddOnUpdate",
    "BaseChangedRequest",
    "CurrencyChangedRequest",
    "GroupSizeChangedRequest",
    "PackagePriceRowCreate",
    "PackagePriceRowRead",
    "PriceComparisonRead",
    "QuoteCreate",
    "QuoteEventBody",
    "QuoteEventRequest",
    "QuoteRead",
    "QuoteSummaryRead",
    "QuoteSyncResponse",
    "SyncWarningRead",
    "TotalManuallyEditedRequest",
    "TravelPackageCreate",
    "TravelPackageRead",
]
