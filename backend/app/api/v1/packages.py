"""Travel package endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.schemas.catalog import TravelPackageCreate, TravelPackageRead
from app.services import catalog_service

router = APIRouter(prefix="/packages")


@router.get("", response_model=list[TravelPackageRead], summary="List packages")
async def list_packages(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    active: bool | None = Query(default=None),
) -> list[TravelPackageRead]:
    packages = await catalog_service.list_packages(session, active=active)
    return [TravelPackageRead.model_validate(pkg) for pkg in packages]


@router.post(
    "",
    response_model=TravelPackageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create package",
)
async def create_package(
    payload: TravelPackageCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> TravelPackageRead:
    package = await catalog_service.create_package(session, payload=payload)
    return TravelPackageRead.model_validate(package)


@router.get(
    "/{package_id}", response_model=TravelPackageRead, summary="Get package"
)
async def get_package(
    package_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> TravelPackageRead:
    package = await catalog_service.get_package(session, package_id=package_id)
    if package is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Package not found"
        )
    return TravelPackageRead.model_validate(package)
