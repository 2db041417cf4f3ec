"""Quote pricing endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.models import Quote
from app.pricing.controller import SyncResult
from app.pricing.errors import (
    AddOnNotFoundError,
    CatalogUnavailableError,
    PackageNotFoundError,
    QuotePriceError,
    QuoteValidationError,
)
from app.pricing.money import from_cents
from app.schemas.quote import (
    PriceComparisonRead,
    QuoteCreate,
    QuoteEventBody,
    QuoteRead,
    QuoteSummaryRead,
    QuoteSyncResponse,
    SyncWarningRead,
)
from app.services import quote_service

router = APIRouter(prefix="/quotes")


def _raise_http(exc: QuotePriceError) -> NoReturn:
    detail: dict[str, object] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, QuoteValidationError):
        detail["fields"] = exc.fields
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, (AddOnNotFoundError, PackageNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, CatalogUnavailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=detail) from exc


async def _get_or_404(
    session: AsyncSession, quote_id: uuid.UUID, *, for_update: bool = False
) -> Quote:
    quote = await quote_service.get_quote(
        session, quote_id=quote_id, for_update=for_update
    )
    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found"
        )
    return quote


def _sync_response(quote: Quote, result: SyncResult) -> QuoteSyncResponse:
    comparison = None
    if result.comparison is not None:
        comparison = PriceComparisonRead(
            old_price=from_cents(result.comparison.old_price_cents),
            new_price=from_cents(result.comparison.new_price_cents),
            price_difference=from_cents(result.comparison.price_difference_cents),
            percentage_change=result.comparison.percentage_change,
            currency=result.draft.currency,
        )
    return QuoteSyncResponse(
        quote=QuoteRead.model_validate(quote_service.quote_payload(quote)),
        warnings=[SyncWarningRead.model_validate(item) for item in result.warnings],
        comparison=comparison,
    )


@router.post(
    "",
    response_model=QuoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create quote",
)
async def create_quote(
    payload: QuoteCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> QuoteRead:
    quote = await quote_service.create_quote(session, payload=payload)
    return QuoteRead.model_validate(quote_service.quote_payload(quote))


@router.get("/{quote_id}", response_model=QuoteRead, summary="Get quote")
async def get_quote(
    quote_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> QuoteRead:
    quote = await _get_or_404(session, quote_id)
    return QuoteRead.model_validate(quote_service.quote_payload(quote))


@router.post(
    "/{quote_id}/events",
    response_model=QuoteSyncResponse,
    summary="Apply a pricing event",
)
async def apply_quote_event(
    quote_id: uuid.UUID,
    payload: QuoteEventBody,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    actor_id: Annotated[str, Depends(deps.get_actor_id)],
) -> QuoteSyncResponse:
    quote = await _get_or_404(session, quote_id, for_update=True)
    try:
        result = await quote_service.apply_event(
            session, quote=quote, event=payload.to_event(), actor_id=actor_id
        )
    except QuotePriceError as exc:
        _raise_http(exc)
    return _sync_response(quote, result)


@router.post(
    "/{quote_id}/recalculate",
    response_model=QuoteSyncResponse,
    summary="Recalculate the quote total",
)
async def recalculate_quote(
    quote_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    actor_id: Annotated[str, Depends(deps.get_actor_id)],
) -> QuoteSyncResponse:
    quote = await _get_or_404(session, quote_id, for_update=True)
    try:
        result = await quote_service.recalculate(session, quote=quote, actor_id=actor_id)
    except QuotePriceError as exc:
        _raise_http(exc)
    return _sync_response(quote, result)


@router.post(
    "/{quote_id}/reset",
    response_model=QuoteSyncResponse,
    summary="Drop a custom total in favour of the calculated one",
)
async def reset_quote_total(
    quote_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    actor_id: Annotated[str, Depends(deps.get_actor_id)],
) -> QuoteSyncResponse:
    quote = await _get_or_404(session, quote_id, for_update=True)
    try:
        result = await quote_service.reset_to_calculated(
            session, quote=quote, actor_id=actor_id
        )
    except QuotePriceError as exc:
        _raise_http(exc)
    return _sync_response(quote, result)


@router.get(
    "/{quote_id}/summary", response_model=QuoteSummaryRead, summary="Quote summary"
)
async def get_quote_summary(
    quote_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> QuoteSummaryRead:
    quote = await _get_or_404(session, quote_id)
    return QuoteSummaryRead.model_validate(quote_service.summarize(quote))


@router.get(
    "/{quote_id}/summary.txt",
    response_class=PlainTextResponse,
    summary="Plain-text quote summary",
)
async def get_quote_summary_text(
    quote_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> str:
    quote = await _get_or_404(session, quote_id)
    return quote_service.summarize(quote)["text"]
