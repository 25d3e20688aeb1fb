"""Routes exposing the predefined product categories."""

from __future__ import annotations

from fastapi import APIRouter

from catalog_api.models.category import CategoryListResponse
from catalog_api.services.categories import CategoriesDependency

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List all product categories",
)
async def list_categories(categories: CategoriesDependency) -> CategoryListResponse:
    """Return every category, ordered alphabetically by name."""

    items = await categories.list_categories()
    return CategoryListResponse(categories=items)
