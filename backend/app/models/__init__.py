"""ORM models package export."""

from app.models.catalog import AddOn, PackagePriceRow, TravelPackage
from app.models.quote import Quote

__all__ = [
    "AddOn",
    "PackagePriceRow",
    "Quote",
    "TravelPackage",
]
