"""Append-only price history for quotes."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import Callable

from app.pricing.money import format_money
from app.pricing.types import PriceChangeReason, PriceHistoryEntry, QuoteDraft

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class HistoryRecorder:
    """Appends an entry when the total moves or an add-on was added/removed."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    @staticmethod
    def should_record(
        draft: QuoteDraft, new_price_cents: int, reason: PriceChangeReason
    ) -> bool:
        return reason.is_structural or new_price_cents != draft.total_price_cents

    def record(
        self,
        draft: QuoteDraft,
        new_price_cents: int,
        reason: PriceChangeReason,
        actor_id: str,
    ) -> QuoteDraft:
        """Return ``draft`` with one more history entry, or unchanged.

        Must be called before ``draft.total_price_cents`` is updated.
        """
        if not self.should_record(draft, new_price_cents, reason):
            return draft
        entry = PriceHistoryEntry(
            price_cents=new_price_cents,
            reason=reason,
            timestamp=self._clock(),
            actor_id=actor_id,
        )
        logger.info(
            "Price history: quote=%s reason=%s price=%s actor=%s",
            draft.quote_id,
            reason.value,
            format_money(new_price_cents),
            actor_id,
        )
        return replace(draft, price_history=draft.price_history + (entry,))


__all__ = ["Clock", "HistoryRecorder", "utcnow"]
