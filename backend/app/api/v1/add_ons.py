"""Catalog add-on endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.schemas.catalog import AddOnCreate, AddOnRead, AddOnUpdate
from app.services import catalog_service

router = APIRouter(prefix="/add-ons")


async def _get_or_404(session: AsyncSession, add_on_id: uuid.UUID):
    item = await catalog_service.get_add_on(session, add_on_id=add_on_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Add-on not found"
        )
    return item


@router.get("", response_model=list[AddOnRead], summary="List add-ons")
async def list_add_ons(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    active: bool | None = Query(default=None),
) -> list[AddOnRead]:
    items = await catalog_service.list_add_ons(session, active=active)
    return [AddOnRead.model_validate(item) for item in items]


@router.post(
    "",
    response_model=AddOnRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create add-on",
)
async def create_add_on(
    payload: AddOnCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AddOnRead:
    item = await catalog_service.create_add_on(session, payload=payload)
    return AddOnRead.model_validate(item)


@router.get("/{add_on_id}", response_model=AddOnRead, summary="Get add-on")
async def get_add_on(
    add_on_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AddOnRead:
    item = await _get_or_404(session, add_on_id)
    return AddOnRead.model_validate(item)


@router.patch("/{add_on_id}", response_model=AddOnRead, summary="Update add-on")
async def update_add_on(
    add_on_id: uuid.UUID,
    payload: AddOnUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AddOnRead:
    item = await _get_or_404(session, add_on_id)
    updated = await catalog_service.update_add_on(session, item=item, payload=payload)
    return AddOnRead.model_validate(updated)


@router.delete(
    "/{add_on_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete add-on"
)
async def delete_add_on(
    add_on_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> None:
    item = await _get_or_404(session, add_on_id)
    await catalog_service.delete_add_on(session, item=item)
