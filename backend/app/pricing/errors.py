"""Error types raised by the quote pricing engine."""

from __future__ import annotations

from typing import Any


class QuotePriceError(Exception):
    """Base error for quote price operations."""

    code = "QUOTE_PRICE_ERROR"
    retryable = False

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class QuoteValidationError(QuotePriceError, ValueError):
    """Malformed input rejected before any state change."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        fields: dict[str, str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.fields = fields or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "QuoteValidationError":
        return cls(message, fields={field: message})


class AddOnNotFoundError(QuotePriceError, LookupError):
    """The catalog has no record for an add-on id."""

    code = "ADD_ON_NOT_FOUND"

    def __init__(self, add_on_id: str) -> None:
        super().__init__(
            f'Add-on "{add_on_id}" not found or has been deleted',
            context={"add_on_id": add_on_id},
        )
        self.add_on_id = add_on_id


class PackageNotFoundError(QuotePriceError, LookupError):
    """The linked package is missing or no longer active."""

    code = "PACKAGE_NOT_FOUND"

    def __init__(self, package_id: str) -> None:
        super().__init__(
            f'Package "{package_id}" not found or has been deleted',
            context={"package_id": package_id},
        )
        self.package_id = package_id


class PriceUnavailableError(QuotePriceError):
    """The package price for the requested parameters is on request."""

    code = "PRICE_ON_REQUEST"

    def __init__(self, package_id: str) -> None:
        super().__init__(
            "The package pricing is set to ON REQUEST for these parameters; "
            "enter the price manually",
            context={"package_id": package_id},
        )


class PackageCurrencyMismatchError(QuotePriceError):
    """The package is priced in a different currency than the quote."""

    code = "PACKAGE_CURRENCY_MISMATCH"

    def __init__(self, package_id: str, package_currency: str, quote_currency: str) -> None:
        super().__init__(
            f"The package is priced in {package_currency} but the quote uses "
            f"{quote_currency}; change the quote currency or enter the price manually",
            context={
                "package_id": package_id,
                "package_currency": package_currency,
                "quote_currency": quote_currency,
            },
        )


class CatalogUnavailableError(QuotePriceError, RuntimeError):
    """The catalog could not be reached or did not answer in time."""

    code = "CATALOG_UNAVAILABLE"
    retryable = True


__all__ = [
    "AddOnNotFoundError",
    "CatalogUnavailableError",
    "PackageNotFoundError",
    "PackageCurrencyMismatchError",
    "PriceUnavailableError",
    "QuotePriceError",
    "QuoteValidationError",
]
