"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session

DEFAULT_ACTOR_ID = "system"


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_actor_id(
    x_actor_id: Annotated[str | None, Header(max_length=200)] = None,
) -> str:
    """Identify who made a price change; the operator id comes from the caller."""
    if x_actor_id is None or not x_actor_id.strip():
        return DEFAULT_ACTOR_ID
    return x_actor_id.strip()
