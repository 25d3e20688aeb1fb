"""Read access to the seeded product categories."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from catalog_api.config import settings
from catalog_api.models.category import Category
from catalog_api.services.storage.gateway import OrderBy, PersistenceGateway, RowFilter
from catalog_api.services.storage.supabase_gateway import GatewayDependency

logger = logging.getLogger(__name__)


class CategoriesService:
    """Lists categories and answers existence checks for the product gates."""

    def __init__(self, gateway: PersistenceGateway, table: str | None = None) -> None:
        self._gateway = gateway
        self._table = table or settings.CATEGORIES_TABLE

    async def list_categories(self) -> list[Category]:
        """Return every category ordered alphabetically by name."""
        rows = await self._gateway.find_many(
            self._table,
            RowFilter(),
            columns="id,name",
            order=(OrderBy("name", ascending=True),),
        )
        logger.debug("Fetched %d categories", len(rows))
        return [Category.model_validate(row) for row in rows]

    async def category_exists(self, category_id: str) -> bool:
        row = await self._gateway.find_one(
            self._table,
            RowFilter(equals={"id": category_id}),
            columns="id",
        )
        return row is not None


def get_categories_service(gateway: GatewayDependency) -> CategoriesService:
    return CategoriesService(gateway)


CategoriesDependency = Annotated[CategoriesService, Depends(get_categories_service)]
