"""Synchronization status state machine for a quote total."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.pricing.money import within_tolerance
from app.pricing.types import PackageBase, QuoteDraft, SyncStatus

logger = logging.getLogger(__name__)

_HOLDS_TOTAL = (SyncStatus.CUSTOM, SyncStatus.ERROR)


@dataclass(frozen=True, slots=True)
class Transition:
    """Outcome of a state machine step."""

    status: SyncStatus
    total_price_cents: int


class OverrideDetector:
    """Decides the sync status and displayed total after each change.

    ``Custom`` and ``Error`` both hold the current total: a custom override
    survives unrelated edits and an errored quote keeps its last good total
    until the operator enters one or a recalculation succeeds.
    """

    @staticmethod
    def classify(total_cents: int, expected_cents: int) -> SyncStatus:
        if within_tolerance(total_cents, expected_cents):
            return SyncStatus.SYNCED
        return SyncStatus.CUSTOM

    @staticmethod
    def effective_status(draft: QuoteDraft) -> SyncStatus:
        """Status the draft had before an in-flight recalculation began."""
        if draft.sync_status is SyncStatus.CALCULATING:
            return draft.status_before_calculation or SyncStatus.SYNCED
        return draft.sync_status

    @staticmethod
    def structural_change_pending(draft: QuoteDraft) -> bool:
        """True when a package-based quote changed since its last recalculation."""
        if not isinstance(draft.base_source, PackageBase):
            return False
        return draft.synced_inputs != draft.structural_inputs()

    def on_inputs_changed(self, draft: QuoteDraft, expected_cents: int) -> Transition:
        """Add-on, group size or currency edits."""
        prior = self.effective_status(draft)
        if prior in _HOLDS_TOTAL:
            total = draft.total_price_cents
            status = prior
        else:
            total = expected_cents
            status = (
                SyncStatus.OUT_OF_SYNC
                if self.structural_change_pending(draft)
                else SyncStatus.SYNCED
            )
        if draft.sync_status is SyncStatus.CALCULATING:
            status = SyncStatus.CALCULATING
        return Transition(status, total)

    def on_recalculated(
        self, draft: QuoteDraft, expected_cents: int, *, force: bool = False
    ) -> Transition:
        """A recalculation finished with a usable expected total."""
        prior = self.effective_status(draft)
        if force or prior is not SyncStatus.CUSTOM:
            return Transition(SyncStatus.SYNCED, expected_cents)
        status = self.classify(draft.total_price_cents, expected_cents)
        return Transition(status, draft.total_price_cents)

    def on_recalculation_failed(self, draft: QuoteDraft) -> Transition:
        logger.debug("Recalculation failed; holding total at %s", draft.total_price_cents)
        return Transition(SyncStatus.ERROR, draft.total_price_cents)

    def on_manual_total(
        self, draft: QuoteDraft, total_cents: int, expected_cents: int
    ) -> Transition:
        """The operator typed a total."""
        if self.effective_status(draft) is SyncStatus.ERROR:
            return Transition(SyncStatus.CUSTOM, total_cents)
        status = self.classify(total_cents, expected_cents)
        if status is SyncStatus.SYNCED and self.structural_change_pending(draft):
            status = SyncStatus.OUT_OF_SYNC
        return Transition(status, total_cents)


__all__ = ["OverrideDetector", "Transition"]
