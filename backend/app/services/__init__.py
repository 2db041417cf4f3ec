"""Service layer exports."""
from app.services import catalog_service, quote_service

__all__ = [
    "catalog_service",
    "quote_service",
]
