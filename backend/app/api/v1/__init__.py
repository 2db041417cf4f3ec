"""Versioned API router."""

from fastapi import APIRouter

from . import add_ons, health, packages, quotes

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(add_ons.router, tags=["add-ons"])
router.include_router(packages.router, tags=["packages"])
router.include_router(quotes.router, tags=["quotes"])

__all__ = ["router"]
