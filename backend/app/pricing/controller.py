"""Orchestrates price synchronization for a quote draft.

``QuoteSyncController.apply`` takes an event and the full prior draft and
returns the next draft plus the warnings the operator must see. Drafts are
never mutated; a rejected event leaves the caller's draft exactly as it was.

Package price lookups go through a request token: ``begin_recalculation``
moves the draft to ``Calculating`` and hands out a new token, and
``complete_recalculation`` only accepts the result carrying the latest one.
``apply`` runs both steps inline, so synchronous callers need no debounce.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP

from app.pricing.aggregator import Aggregation, aggregate_draft
from app.pricing.catalog import CatalogAddOn, CatalogClient, call_catalog
from app.pricing.errors import (
    AddOnNotFoundError,
    CatalogUnavailableError,
    PackageCurrencyMismatchError,
    PackageNotFoundError,
    PriceUnavailableError,
    QuotePriceError,
    QuoteValidationError,
)
from app.pricing.events import (
    AddOnAdded,
    AddOnPerUnitToggled,
    AddOnRemoved,
    BaseChanged,
    CurrencyChanged,
    GroupSizeChanged,
    QuoteEvent,
    Recalculate,
    ResetToCalculated,
    TotalManuallyEdited,
)
from app.pricing.history import Clock, HistoryRecorder, utcnow
from app.pricing.money import format_money
from app.pricing.override import OverrideDetector
from app.pricing.resolver import AddOnResolver
from app.pricing.types import (
    AddOnSelection,
    Currency,
    ManualBase,
    NoBase,
    PackageBase,
    PriceChangeReason,
    QuoteDraft,
    SyncStatus,
    SyncWarning,
    WarningCode,
)
from app.pricing.validation import (
    check_add_on_id,
    check_capacity,
    check_group_size,
    check_name,
    parse_amount,
    parse_currency,
)

logger = logging.getLogger(__name__)

_ERROR_WARNINGS: dict[type[QuotePriceError], WarningCode] = {
    PriceUnavailableError: WarningCode.PRICE_UNAVAILABLE,
    PackageNotFoundError: WarningCode.PACKAGE_NOT_FOUND,
    PackageCurrencyMismatchError: WarningCode.CURRENCY_MISMATCH,
    QuoteValidationError: WarningCode.INVALID_PARAMETERS,
    CatalogUnavailableError: WarningCode.CATALOG_UNAVAILABLE,
}


@dataclass(frozen=True, slots=True)
class RecalculationOutcome:
    """Base price produced by a lookup, or the error that prevented it."""

    base_price_cents: int | None = None
    package_version: int | None = None
    package_name: str | None = None
    currency: Currency | None = None
    error: QuotePriceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class PriceComparison:
    """Old versus new total after an explicit recalculation."""

    old_price_cents: int
    new_price_cents: int

    @property
    def price_difference_cents(self) -> int:
        return self.new_price_cents - self.old_price_cents

    @property
    def percentage_change(self) -> Decimal:
        if self.old_price_cents == 0:
            return Decimal("0.00")
        change = Decimal(self.price_difference_cents) / Decimal(self.old_price_cents) * 100
        return change.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Next draft plus everything the caller needs to render it."""

    draft: QuoteDraft
    warnings: tuple[SyncWarning, ...]
    aggregation: Aggregation
    comparison: PriceComparison | None = None


class QuoteSyncController:
    """Single entry point for every price-affecting mutation of a quote."""

    def __init__(
        self,
        catalog: CatalogClient,
        *,
        timeout: float | None = None,
        auto_recalculate: bool = True,
        clock: Clock = utcnow,
    ) -> None:
        self._catalog = catalog
        self._timeout = timeout
        self._auto_recalculate = auto_recalculate
        self._clock = clock
        self._resolver = AddOnResolver(catalog, timeout=timeout)
        self._detector = OverrideDetector()
        self._history = HistoryRecorder(clock)

    async def apply(
        self, event: QuoteEvent, draft: QuoteDraft, *, actor_id: str = "system"
    ) -> SyncResult:
        """Apply ``event`` to ``draft`` and return the next state."""
        logger.debug(
            "Applying %s to quote %s (status=%s)",
            type(event).__name__,
            draft.quote_id,
            draft.sync_status.value,
        )
        new_id = event.add_on_id if isinstance(event, AddOnAdded) else None
        if new_id is not None:
            check_add_on_id(new_id)
            check_capacity(draft)
            if draft.find_add_on(new_id) is not None:
                raise QuoteValidationError.for_field(
                    "add_on_id", f'Add-on "{new_id}" is already on this quote'
                )

        live, lookup_warnings = await self._lookup_live(draft, new_id)
        warnings: list[SyncWarning] = list(lookup_warnings)
        comparison: PriceComparison | None = None

        if isinstance(event, BaseChanged):
            next_draft, extra = await self._apply_base_changed(event, draft, actor_id)
            warnings.extend(extra)
        elif isinstance(event, AddOnAdded):
            record = live.get(event.add_on_id) if live is not None else None
            if record is None:
                raise AddOnNotFoundError(event.add_on_id)
            selection = self._snapshot(record, event.per_unit_pricing)
            next_draft = self._inputs_changed(
                replace(draft, add_ons=draft.add_ons + (selection,)),
                PriceChangeReason.ADD_ON_ADDED,
                actor_id,
            )
        elif isinstance(event, AddOnRemoved):
            self._require_selection(draft, event.add_on_id)
            remaining = tuple(a for a in draft.add_ons if a.add_on_id != event.add_on_id)
            next_draft = self._inputs_changed(
                replace(draft, add_ons=remaining),
                PriceChangeReason.ADD_ON_REMOVED,
                actor_id,
            )
        elif isinstance(event, AddOnPerUnitToggled):
            current = self._require_selection(draft, event.add_on_id)
            toggled = replace(current, per_unit_pricing=bool(event.per_unit_pricing))
            add_ons = tuple(toggled if a is current else a for a in draft.add_ons)
            next_draft = self._inputs_changed(
                replace(draft, add_ons=add_ons), PriceChangeReason.RECALCULATED, actor_id
            )
        elif isinstance(event, GroupSizeChanged):
            group_size = check_group_size(event.group_size)
            next_draft, extra = await self._structural_change(
                replace(draft, group_size=group_size), actor_id
            )
            warnings.extend(extra)
        elif isinstance(event, CurrencyChanged):
            currency = parse_currency(event.currency)
            next_draft, extra = await self._structural_change(
                replace(draft, currency=currency), actor_id
            )
            warnings.extend(extra)
        elif isinstance(event, TotalManuallyEdited):
            next_draft = self._apply_manual_total(event, draft, actor_id)
        elif isinstance(event, Recalculate):
            next_draft, extra = await self._recalculate(
                draft, PriceChangeReason.RECALCULATED, actor_id, force=True
            )
            warnings.extend(extra)
            comparison = PriceComparison(draft.total_price_cents, next_draft.total_price_cents)
        elif isinstance(event, ResetToCalculated):
            next_draft, extra = await self._reset_to_calculated(draft, actor_id)
            warnings.extend(extra)
            comparison = PriceComparison(draft.total_price_cents, next_draft.total_price_cents)
        else:
            raise QuoteValidationError.for_field(
                "event", f"Unsupported event {type(event).__name__}"
            )

        aggregation = aggregate_draft(next_draft)
        warnings.extend(self._selection_warnings(next_draft, aggregation, live))
        if next_draft.sync_status is not draft.sync_status:
            logger.debug(
                "Quote %s status %s -> %s",
                draft.quote_id,
                draft.sync_status.value,
                next_draft.sync_status.value,
            )
        return SyncResult(next_draft, tuple(warnings), aggregation, comparison)

    async def recalculate(self, draft: QuoteDraft, *, actor_id: str = "system") -> SyncResult:
        return await self.apply(Recalculate(), draft, actor_id=actor_id)

    async def reset_to_calculated(
        self, draft: QuoteDraft, *, actor_id: str = "system"
    ) -> SyncResult:
        return await self.apply(ResetToCalculated(), draft, actor_id=actor_id)

    def begin_recalculation(self, draft: QuoteDraft) -> tuple[QuoteDraft, int]:
        """Move ``draft`` to ``Calculating`` and return the new request token."""
        token = draft.recalc_token + 1
        before = self._detector.effective_status(draft)
        return (
            replace(
                draft,
                sync_status=SyncStatus.CALCULATING,
                status_before_calculation=before,
                recalc_token=token,
            ),
            token,
        )

    async def fetch_base_price(self, draft: QuoteDraft) -> RecalculationOutcome:
        """Look up the base price for ``draft``'s base source.

        Lookup failures are returned in the outcome rather than raised.
        """
        source = draft.base_source
        if isinstance(source, NoBase):
            return RecalculationOutcome(base_price_cents=0)
        if isinstance(source, ManualBase):
            return RecalculationOutcome(base_price_cents=draft.base_price_cents)
        try:
            price = await call_catalog(
                self._catalog.lookup_package_price(
                    source.package_id,
                    source.tier_label,
                    source.period,
                    source.nights,
                    draft.group_size,
                ),
                self._timeout,
            )
        except (CatalogUnavailableError, PackageNotFoundError, QuoteValidationError) as exc:
            logger.warning(
                "Package price lookup failed for quote %s: %s", draft.quote_id, exc
            )
            return RecalculationOutcome(error=exc)
        if price.is_on_request:
            logger.warning(
                "Package %s is priced on request for quote %s",
                source.package_id,
                draft.quote_id,
            )
            return RecalculationOutcome(error=PriceUnavailableError(source.package_id))
        currency = parse_currency(price.currency) if price.currency is not None else None
        return RecalculationOutcome(
            base_price_cents=price.price_cents,
            package_version=price.package_version,
            package_name=price.package_name,
            currency=currency,
        )

    def complete_recalculation(
        self,
        draft: QuoteDraft,
        token: int,
        outcome: RecalculationOutcome,
        *,
        actor_id: str = "system",
        reason: PriceChangeReason = PriceChangeReason.RECALCULATED,
        force: bool = False,
    ) -> tuple[QuoteDraft, list[SyncWarning]]:
        """Fold a lookup result into ``draft``.

        A result whose token is not the draft's latest is dropped and the
        draft is returned unchanged.
        """
        if token != draft.recalc_token or draft.sync_status is not SyncStatus.CALCULATING:
            logger.debug(
                "Dropping stale recalculation for quote %s (token %s, latest %s)",
                draft.quote_id,
                token,
                draft.recalc_token,
            )
            return draft, []

        if (
            outcome.ok
            and outcome.currency is not None
            and outcome.currency != draft.currency
        ):
            draft, outcome = self._reconcile_package_currency(draft, outcome, reason)

        if not outcome.ok:
            error = outcome.error
            transition = self._detector.on_recalculation_failed(draft)
            failed = replace(
                draft,
                sync_status=transition.status,
                total_price_cents=transition.total_price_cents,
                expected_total_cents=aggregate_draft(draft).expected_total_cents,
                status_before_calculation=None,
                synced_inputs=None,
                sync_error=error.message,
            )
            code = _ERROR_WARNINGS.get(type(error), WarningCode.CATALOG_UNAVAILABLE)
            return failed, [SyncWarning(code, error.message)]

        warnings: list[SyncWarning] = []
        source = draft.base_source
        if (
            isinstance(source, PackageBase)
            and outcome.package_version is not None
            and outcome.package_version != source.package_version
        ):
            if reason is not PriceChangeReason.PACKAGE_SELECTED:
                warnings.append(
                    SyncWarning(
                        WarningCode.PACKAGE_VERSION_CHANGED,
                        f"Package pricing changed from version {source.package_version} "
                        f"to {outcome.package_version}",
                    )
                )
            source = replace(
                source,
                package_version=outcome.package_version,
                package_name=outcome.package_name or source.package_name,
            )
        if isinstance(source, PackageBase) and not source.package_name and outcome.package_name:
            source = replace(source, package_name=outcome.package_name)

        priced = replace(draft, base_source=source, base_price_cents=outcome.base_price_cents)
        expected = aggregate_draft(priced).expected_total_cents
        transition = self._detector.on_recalculated(priced, expected, force=force)
        priced = self._history.record(priced, transition.total_price_cents, reason, actor_id)
        return (
            replace(
                priced,
                total_price_cents=transition.total_price_cents,
                expected_total_cents=expected,
                sync_status=transition.status,
                status_before_calculation=None,
                synced_inputs=priced.structural_inputs(),
                sync_error=None,
                recalculated_at=self._clock(),
            ),
            warnings,
        )

    def _reconcile_package_currency(
        self,
        draft: QuoteDraft,
        outcome: RecalculationOutcome,
        reason: PriceChangeReason,
    ) -> tuple[QuoteDraft, RecalculationOutcome]:
        """Adopt the package currency on selection, otherwise fail the lookup."""
        source = draft.base_source
        if reason is PriceChangeReason.PACKAGE_SELECTED:
            logger.info(
                "Quote %s adopts package currency %s (was %s)",
                draft.quote_id,
                outcome.currency.value,
                draft.currency.value,
            )
            return replace(draft, currency=outcome.currency), outcome
        error = PackageCurrencyMismatchError(
            source.package_id, outcome.currency.value, draft.currency.value
        )
        logger.warning("Package price rejected for quote %s: %s", draft.quote_id, error)
        return draft, replace(outcome, error=error)

    async def _recalculate(
        self,
        draft: QuoteDraft,
        reason: PriceChangeReason,
        actor_id: str,
        *,
        force: bool = False,
    ) -> tuple[QuoteDraft, list[SyncWarning]]:
        pending, token = self.begin_recalculation(draft)
        outcome = await self.fetch_base_price(pending)
        return self.complete_recalculation(
            pending, token, outcome, actor_id=actor_id, reason=reason, force=force
        )

    async def _apply_base_changed(
        self, event: BaseChanged, draft: QuoteDraft, actor_id: str
    ) -> tuple[QuoteDraft, list[SyncWarning]]:
        source = event.source
        if isinstance(source, NoBase):
            changed = replace(draft, base_source=source, base_price_cents=0)
            reason = PriceChangeReason.RECALCULATED
        elif isinstance(source, ManualBase):
            if event.base_price is None:
                raise QuoteValidationError.for_field(
                    "base_price", "A manual base price is required"
                )
            cents = parse_amount(event.base_price, "base_price")
            changed = replace(draft, base_source=source, base_price_cents=cents)
            reason = PriceChangeReason.RECALCULATED
        elif isinstance(source, PackageBase):
            self._check_package_source(source)
            changed = replace(draft, base_source=source)
            reason = PriceChangeReason.PACKAGE_SELECTED
        else:
            raise QuoteValidationError.for_field("base_source", "Unknown base source")
        return await self._recalculate(changed, reason, actor_id)

    async def _structural_change(
        self, changed: QuoteDraft, actor_id: str
    ) -> tuple[QuoteDraft, list[SyncWarning]]:
        if (
            self._auto_recalculate
            and isinstance(changed.base_source, PackageBase)
            and self._detector.structural_change_pending(changed)
        ):
            return await self._recalculate(changed, PriceChangeReason.RECALCULATED, actor_id)
        return self._inputs_changed(changed, PriceChangeReason.RECALCULATED, actor_id), []

    async def _reset_to_calculated(
        self, draft: QuoteDraft, actor_id: str
    ) -> tuple[QuoteDraft, list[SyncWarning]]:
        status = draft.sync_status
        if status in (
            SyncStatus.ERROR,
            SyncStatus.OUT_OF_SYNC,
            SyncStatus.CALCULATING,
        ) or self._detector.structural_change_pending(draft):
            return await self._recalculate(
                draft, PriceChangeReason.RECALCULATED, actor_id, force=True
            )
        expected = aggregate_draft(draft).expected_total_cents
        recorded = self._history.record(
            draft, expected, PriceChangeReason.RECALCULATED, actor_id
        )
        return (
            replace(
                recorded,
                total_price_cents=expected,
                expected_total_cents=expected,
                sync_status=SyncStatus.SYNCED,
                sync_error=None,
            ),
            [],
        )

    def _apply_manual_total(
        self, event: TotalManuallyEdited, draft: QuoteDraft, actor_id: str
    ) -> QuoteDraft:
        total = parse_amount(event.total_price, "total_price")
        expected = aggregate_draft(draft).expected_total_cents
        transition = self._detector.on_manual_total(draft, total, expected)
        recorded = self._history.record(
            draft, total, PriceChangeReason.MANUAL_OVERRIDE, actor_id
        )
        # a typed total supersedes any lookup still in flight
        token = recorded.recalc_token
        if draft.sync_status is SyncStatus.CALCULATING:
            token += 1
        return replace(
            recorded,
            total_price_cents=transition.total_price_cents,
            expected_total_cents=expected,
            sync_status=transition.status,
            status_before_calculation=None,
            recalc_token=token,
            sync_error=None,
        )

    def _inputs_changed(
        self, changed: QuoteDraft, reason: PriceChangeReason, actor_id: str
    ) -> QuoteDraft:
        expected = aggregate_draft(changed).expected_total_cents
        transition = self._detector.on_inputs_changed(changed, expected)
        recorded = self._history.record(changed, transition.total_price_cents, reason, actor_id)
        return replace(
            recorded,
            total_price_cents=transition.total_price_cents,
            expected_total_cents=expected,
            sync_status=transition.status,
        )

    async def _lookup_live(
        self, draft: QuoteDraft, new_id: str | None
    ) -> tuple[dict[str, CatalogAddOn | None] | None, list[SyncWarning]]:
        """One batched catalog lookup for every referenced add-on.

        Returns None for the mapping when the catalog is unreachable; that
        only blocks the event when a new add-on has to be snapshotted.
        """
        ids = draft.add_on_ids + ([new_id] if new_id is not None else [])
        try:
            return await self._resolver.resolve_many(ids), []
        except CatalogUnavailableError as exc:
            if new_id is not None:
                raise
            logger.warning("Catalog unavailable for quote %s: %s", draft.quote_id, exc)
            return None, [
                SyncWarning(
                    WarningCode.CATALOG_UNAVAILABLE,
                    "Add-on availability could not be checked; quoted prices are kept",
                )
            ]

    def _snapshot(self, record: CatalogAddOn, per_unit: bool | None) -> AddOnSelection:
        name = check_name(record.name)
        if record.unit_price_cents < 0:
            raise QuoteValidationError.for_field(
                "unit_price", f'Add-on "{record.id}" has a negative price'
            )
        return AddOnSelection(
            add_on_id=record.id,
            name=name,
            unit_price_cents=record.unit_price_cents,
            currency=parse_currency(record.currency),
            per_unit_pricing=record.per_unit_default if per_unit is None else bool(per_unit),
            added_at=self._clock(),
        )

    @staticmethod
    def _require_selection(draft: QuoteDraft, add_on_id: str) -> AddOnSelection:
        selection = draft.find_add_on(check_add_on_id(add_on_id))
        if selection is None:
            raise QuoteValidationError.for_field(
                "add_on_id", f'Add-on "{add_on_id}" is not on this quote'
            )
        return selection

    @staticmethod
    def _check_package_source(source: PackageBase) -> None:
        if not source.package_id:
            raise QuoteValidationError.for_field("package_id", "Package id is required")
        if not source.tier_label:
            raise QuoteValidationError.for_field("tier_label", "Tier is required")
        if not source.period:
            raise QuoteValidationError.for_field("period", "Period is required")
        if isinstance(source.nights, bool) or not isinstance(source.nights, int) or source.nights < 1:
            raise QuoteValidationError.for_field("nights", "Nights must be at least 1")
        if source.package_version < 1:
            raise QuoteValidationError.for_field(
                "package_version", "Package version must be at least 1"
            )

    @staticmethod
    def _selection_warnings(
        draft: QuoteDraft,
        aggregation: Aggregation,
        live: dict[str, CatalogAddOn | None] | None,
    ) -> list[SyncWarning]:
        warnings = [
            SyncWarning(
                WarningCode.CURRENCY_MISMATCH,
                f'Add-on "{selection.name}" is priced in {selection.currency.value} while '
                f"the quote uses {draft.currency.value}; it is excluded from the total",
                selection.add_on_id,
            )
            for selection in aggregation.excluded_add_ons
        ]
        if live is None:
            return warnings
        for selection in draft.add_ons:
            record = live.get(selection.add_on_id)
            if record is None:
                warnings.append(
                    SyncWarning(
                        WarningCode.ADD_ON_MISSING,
                        f'Add-on "{selection.name}" is no longer available; '
                        "its quoted price is kept",
                        selection.add_on_id,
                    )
                )
                continue
            if not record.is_active:
                warnings.append(
                    SyncWarning(
                        WarningCode.ADD_ON_INACTIVE,
                        f'Add-on "{selection.name}" is currently inactive and may not '
                        "be available",
                        selection.add_on_id,
                    )
                )
            if (
                record.unit_price_cents != selection.unit_price_cents
                or record.currency != selection.currency
            ):
                warnings.append(
                    SyncWarning(
                        WarningCode.PRICE_DRIFT,
                        f'Add-on "{selection.name}" now costs '
                        f"{format_money(record.unit_price_cents)} {record.currency.value} "
                        f"(quoted {format_money(selection.unit_price_cents)} "
                        f"{selection.currency.value})",
                        selection.add_on_id,
                    )
                )
        return warnings


__all__ = [
    "PriceComparison",
    "QuoteSyncController",
    "RecalculationOutcome",
    "SyncResult",
]
