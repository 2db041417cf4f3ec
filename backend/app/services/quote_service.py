"""Quote persistence and event application on top of the pricing engine."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.models import Quote
from app.pricing.controller import QuoteSyncController, SyncResult
from app.pricing.events import QuoteEvent, Recalculate, ResetToCalculated
from app.pricing.serialization import build_summary, draft_from_record, draft_to_record
from app.pricing.types import QuoteDraft
from app.schemas.quote import QuoteCreate
from app.services.catalog_service import SqlCatalog

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

_SYNC_STATE_KEYS = (
    "recalc_token",
    "status_before_calculation",
    "synced_inputs",
    "sync_error",
    "recalculated_at",
)


def build_controller(session: AsyncSession) -> QuoteSyncController:
    """Controller wired to the SQL catalog and the configured limits."""
    settings = get_settings()
    return QuoteSyncController(
        SqlCatalog(session),
        timeout=settings.catalog_timeout_seconds,
        auto_recalculate=settings.auto_recalculate,
    )


def load_draft(quote: Quote) -> QuoteDraft:
    """Rebuild the engine draft stored on ``quote``."""
    state = quote.sync_state or {}
    record: dict[str, Any] = {
        "quote_id": str(quote.id),
        "group_size": quote.group_size,
        "currency": quote.currency,
        "base_price": quote.base_price,
        "base_source": quote.base_source,
        "add_ons": quote.add_ons,
        "total_price": quote.total_price,
        "expected_total": quote.expected_total,
        "sync_status": quote.sync_status,
        "price_history": quote.price_history,
    }
    record.update({key: state.get(key) for key in _SYNC_STATE_KEYS})
    return draft_from_record(record)


def store_draft(quote: Quote, draft: QuoteDraft) -> None:
    """Copy ``draft`` onto the ORM row; the caller commits."""
    record = draft_to_record(draft)
    quote.group_size = draft.group_size
    quote.currency = draft.currency
    quote.base_price = draft.base_price
    quote.base_source = record["base_source"]
    quote.add_ons = record["add_ons"]
    quote.total_price = draft.total_price
    quote.expected_total = draft.expected_total
    quote.sync_status = draft.sync_status
    quote.price_history = record["price_history"]
    quote.sync_state = {key: record[key] for key in _SYNC_STATE_KEYS}


def quote_payload(quote: Quote) -> dict[str, Any]:
    """Plain representation matching ``QuoteRead``."""
    state = quote.sync_state or {}
    return {
        "id": quote.id,
        "title": quote.title,
        "group_size": quote.group_size,
        "currency": quote.currency,
        "base_price": quote.base_price,
        "base_source": quote.base_source or {"kind": "none"},
        "add_ons": quote.add_ons or [],
        "total_price": quote.total_price,
        "expected_total": quote.expected_total,
        "sync_status": quote.sync_status,
        "sync_error": state.get("sync_error"),
        "recalculated_at": state.get("recalculated_at"),
        "price_history": quote.price_history or [],
    }


async def create_quote(session: AsyncSession, *, payload: QuoteCreate) -> Quote:
    settings = get_settings()
    quote_id = uuid.uuid4()
    draft = QuoteDraft(
        group_size=payload.group_size,
        currency=payload.currency or settings.default_currency,
        quote_id=str(quote_id),
    )
    quote = Quote(id=quote_id, title=payload.title)
    store_draft(quote, draft)
    session.add(quote)
    await session.commit()
    await session.refresh(quote)
    logger.info("Created quote %s for %s travelers", quote.id, quote.group_size)
    return quote


async def get_quote(
    session: AsyncSession, *, quote_id: uuid.UUID, for_update: bool = False
) -> Quote | None:
    stmt = select(Quote).where(Quote.id == quote_id)
    if for_update:
        # events on one quote are applied one at a time
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def apply_event(
    session: AsyncSession,
    *,
    quote: Quote,
    event: QuoteEvent,
    actor_id: str,
) -> SyncResult:
    """Apply ``event`` and persist the next draft.

    Nothing is written when the controller rejects the event.
    """
    controller = build_controller(session)
    draft = load_draft(quote)
    try:
        result = await controller.apply(event, draft, actor_id=actor_id)
    except Exception:
        await session.rollback()
        raise
    store_draft(quote, result.draft)
    await session.commit()
    await session.refresh(quote)
    if result.warnings:
        logger.info(
            "Quote %s has %d pricing warning(s): %s",
            quote.id,
            len(result.warnings),
            ", ".join(warning.code.value for warning in result.warnings),
        )
    return result


async def recalculate(session: AsyncSession, *, quote: Quote, actor_id: str) -> SyncResult:
    return await apply_event(session, quote=quote, event=Recalculate(), actor_id=actor_id)


async def reset_to_calculated(
    session: AsyncSession, *, quote: Quote, actor_id: str
) -> SyncResult:
    return await apply_event(
        session, quote=quote, event=ResetToCalculated(), actor_id=actor_id
    )


def render_summary_text(summary: dict[str, Any]) -> str:
    template = _ENV.get_template("quote_summary.txt")
    return template.render(**summary)


def summarize(quote: Quote) -> dict[str, Any]:
    """Itemized summary of ``quote`` with a plain-text rendering."""
    summary = build_summary(load_draft(quote))
    summary["title"] = quote.title
    summary["text"] = render_summary_text(summary)
    return summary


__all__ = [
    "apply_event",
    "build_controller",
    "create_quote",
    "get_quote",
    "load_draft",
    "quote_payload",
    "recalculate",
    "render_summary_text",
    "reset_to_calculated",
    "store_draft",
    "summarize",
]
