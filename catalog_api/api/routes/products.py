"""Routes for managing the current owner's products."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from catalog_api.config import settings
from catalog_api.errors import ProductNotFound
from catalog_api.models.product import (
    ErrorResponse,
    ProductListResponse,
    ProductMutationResponse,
    ProductPayload,
    ProductResponse,
)
from catalog_api.services.identity import OwnerDependency
from catalog_api.services.products import ProductsDependency

router = APIRouter(
    prefix="/products",
    tags=["products"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=ProductMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    payload: ProductPayload,
    owner_id: OwnerDependency,
    products: ProductsDependency,
) -> ProductMutationResponse:
    product = await products.create_product(owner_id, payload.name, payload.category_id)
    return ProductMutationResponse(message="Product created successfully", product=product)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products with pagination, filtering and sorting",
)
async def list_products(
    owner_id: OwnerDependency,
    products: ProductsDependency,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    filter: str | None = Query(
        None,
        description='JSON object, e.g. {"category_id": "...", "name": "milk"}',
    ),
    sort: str | None = Query(
        None,
        pattern=r"^(name|created_at|updated_at):(asc|desc)$",
        description="field:direction, defaults to created_at:desc",
    ),
) -> ProductListResponse:
    """Return one page of products owned by the current user."""

    items, pagination = await products.list_products(
        owner_id,
        page=page,
        limit=limit,
        filter_input=filter,
        sort_input=sort,
    )
    return ProductListResponse(products=items, pagination=pagination)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Fetch a single product",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_product(
    product_id: uuid.UUID,
    owner_id: OwnerDependency,
    products: ProductsDependency,
) -> ProductResponse:
    product = await products.get_product_by_id(owner_id, str(product_id))
    if product is None:
        raise ProductNotFound()
    return ProductResponse(product=product)


@router.put(
    "/{product_id}",
    response_model=ProductMutationResponse,
    summary="Update a product's name and category",
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductPayload,
    owner_id: OwnerDependency,
    products: ProductsDependency,
) -> ProductMutationResponse:
    product = await products.update_product(
        owner_id, str(product_id), payload.name, payload.category_id
    )
    return ProductMutationResponse(message="Product updated successfully", product=product)
