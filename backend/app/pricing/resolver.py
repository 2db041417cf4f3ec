"""Resolve add-on ids against the live catalog."""

from __future__ import annotations

import logging
from typing import Iterable

from app.pricing.catalog import CatalogAddOn, CatalogClient, call_catalog
from app.pricing.errors import AddOnNotFoundError

logger = logging.getLogger(__name__)


class AddOnResolver:
    """Batch lookups of add-on ids.

    Inactive add-ons are returned with ``is_active=False`` rather than being
    treated as failures; only ids without any catalog record are reported as
    missing.
    """

    def __init__(self, catalog: CatalogClient, *, timeout: float | None = None) -> None:
        self._catalog = catalog
        self._timeout = timeout

    async def resolve_many(self, ids: Iterable[str]) -> dict[str, CatalogAddOn | None]:
        """Resolve ``ids`` in one catalog call; missing ids map to None."""
        unique = list(dict.fromkeys(ids))
        if not unique:
            return {}
        records = await call_catalog(self._catalog.lookup_add_ons(unique), self._timeout)
        found = {record.id: record for record in records}
        missing = [item for item in unique if item not in found]
        if missing:
            logger.debug("Catalog has no record for add-ons %s", missing)
        return {item: found.get(item) for item in unique}

    async def resolve(self, add_on_id: str) -> CatalogAddOn:
        resolved = await self.resolve_many([add_on_id])
        record = resolved.get(add_on_id)
        if record is None:
            raise AddOnNotFoundError(add_on_id)
        return record


__all__ = ["AddOnResolver"]
