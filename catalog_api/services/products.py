"""Business logic for creating, listing, reading and updating products."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError

from catalog_api.config import settings
from catalog_api.errors import (
    CategoryNotFound,
    ConstraintViolation,
    DuplicateProductName,
    InvalidFilterFormat,
    InvalidSortFormat,
    PersistenceError,
    ProductNotFound,
    ValidationError,
)
from catalog_api.models.product import (
    PaginationMeta,
    Product,
    ProductFilter,
    ProductSort,
    SortField,
    SortOrder,
)
from catalog_api.services.categories import CategoriesService
from catalog_api.services.storage.gateway import OrderBy, PersistenceGateway, RowFilter
from catalog_api.services.storage.supabase_gateway import GatewayDependency

logger = logging.getLogger(__name__)

DEFAULT_SORT = ProductSort(field=SortField.CREATED_AT, order=SortOrder.DESC)


def parse_filter(filter_input: str | None) -> ProductFilter | None:
    """Decode the JSON ``filter`` query parameter.

    Raises:
        InvalidFilterFormat: If the value is not a JSON object with string
            ``category_id`` / ``name`` entries, or if
            ``category_id`` is not a UUID.
    """
    if not filter_input:
        return None

    try:
        decoded: Any = json.loads(filter_input)
    except json.JSONDecodeError as exc:
        raise InvalidFilterFormat() from exc

    if not isinstance(decoded, dict):
        raise InvalidFilterFormat("Filter parameter must be a JSON object")

    try:
        return ProductFilter.model_validate(decoded)
    except PydanticValidationError as exc:
        raise InvalidFilterFormat(
            "Filter values must be strings and category_id must be a UUID"
        ) from exc


def parse_sort(sort_input: str | None) -> ProductSort | None:
    """Decode a ``field:direction`` sort parameter.

    Raises:
        InvalidSortFormat: If the field or direction is not one of the
            allowed values.
    """
    if not sort_input:
        return None

    field_name, separator, order_name = sort_input.partition(":")
    if not separator:
        raise InvalidSortFormat("Sort parameter must look like 'field:direction'")

    try:
        field = SortField(field_name)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in SortField)
        raise InvalidSortFormat(f"Sort field must be one of: {allowed}") from exc
    try:
        order = SortOrder(order_name)
    except ValueError as exc:
        raise InvalidSortFormat("Sort direction must be 'asc' or 'desc'") from exc

    return ProductSort(field=field, order=order)


def calculate_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class ProductsService:
    """Owner-scoped product operations on top of the persistence gateway.

    The duplicate-name lookup and the following write are separate round
    trips; the unique constraint on ``(owner_id, name)`` in the database is
    what actually prevents duplicates, and its violation is reported as
    ``DuplicateProductName`` as well.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        categories: CategoriesService | None = None,
        *,
        table: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._gateway = gateway
        self._categories = categories or CategoriesService(gateway)
        self._table = table or settings.PRODUCTS_TABLE
        self._clock = clock or (lambda: datetime.now(UTC))

    async def create_product(
        self, owner_id: str, name: str, category_id: str
    ) -> Product:
        """Create a product for ``owner_id``.

        Raises:
            CategoryNotFound: If the category does not exist.
            DuplicateProductName: If the owner already has a product with
                this exact name.
            PersistenceError: If the backend fails.
        """
        await self._ensure_category(category_id)
        await self._ensure_unique_name(owner_id, name)

        timestamp = self._clock().isoformat()
        try:
            row = await self._gateway.insert(
                self._table,
                {
                    "owner_id": owner_id,
                    "name": name,
                    "category_id": category_id,
                    "created_at": timestamp,
                    "updated_at": timestamp,
                },
            )
        except ConstraintViolation as exc:
            self._raise_for_constraint(exc)
            raise

        product = Product.model_validate(row)
        logger.info(
            "Created product %s",
            product.id,
            extra={"owner_id": owner_id, "category_id": category_id},
        )
        return product

    async def list_products(
        self,
        owner_id: str,
        page: int = 1,
        limit: int = 20,
        filter_input: str | None = None,
        sort_input: str | None = None,
    ) -> tuple[list[Product], PaginationMeta]:
        """Return one page of the owner's products plus pagination metadata."""
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")

        product_filter = parse_filter(filter_input)
        sort = parse_sort(sort_input) or DEFAULT_SORT
        row_filter = self._listing_filter(owner_id, product_filter)

        total = await self._gateway.count(self._table, row_filter)
        if total == 0:
            return [], calculate_pagination(page, limit, 0)

        offset = (page - 1) * limit
        if offset >= total:
            # page past the end
            return [], calculate_pagination(page, limit, total)

        end_index = min(offset + limit - 1, total - 1)
        rows = await self._gateway.find_many(
            self._table,
            row_filter,
            order=(OrderBy(sort.field.value, ascending=sort.ascending),),
            window=(offset, end_index),
        )

        products = [Product.model_validate(row) for row in rows]
        logger.debug(
            "Listed %d of %d products for owner %s (page=%d, limit=%d)",
            len(products),
            total,
            owner_id,
            page,
            limit,
        )
        return products, calculate_pagination(page, limit, total)

    async def get_product_by_id(self, owner_id: str, product_id: str) -> Product | None:
        """Return the owner's product, or None when it does not exist."""
        row = await self._gateway.find_one(
            self._table,
            RowFilter(equals={"id": product_id, "owner_id": owner_id}),
        )
        if row is None:
            return None
        return Product.model_validate(row)

    async def update_product(
        self, owner_id: str, product_id: str, name: str, category_id: str
    ) -> Product:
        """Rename and/or recategorise one of the owner's products.

        Raises:
            ProductNotFound: If the owner has no product with this id.
            CategoryNotFound: If the category does not exist.
            DuplicateProductName: If another product of the owner already
                uses this name.
            PersistenceError: If the backend fails.
        """
        scope = RowFilter(equals={"id": product_id, "owner_id": owner_id})
        if await self._gateway.find_one(self._table, scope, columns="id") is None:
            raise ProductNotFound()

        await self._ensure_category(category_id)
        await self._ensure_unique_name(owner_id, name, exclude_id=product_id)

        try:
            rows = await self._gateway.update(
                self._table,
                scope,
                {
                    "name": name,
                    "category_id": category_id,
                    "updated_at": self._clock().isoformat(),
                },
            )
        except ConstraintViolation as exc:
            self._raise_for_constraint(exc)
            raise

        if not rows:
            raise ProductNotFound()

        product = Product.model_validate(rows[0])
        logger.info(
            "Updated product %s",
            product.id,
            extra={"owner_id": owner_id, "category_id": category_id},
        )
        return product

    async def _ensure_category(self, category_id: str) -> None:
        try:
            exists = await self._categories.category_exists(category_id)
        except PersistenceError as exc:
            logger.warning("Category lookup for %s failed: %s", category_id, exc)
            raise CategoryNotFound() from exc

        if not exists:
            logger.warning("Rejected unknown category %s", category_id)
            raise CategoryNotFound()

    async def _ensure_unique_name(
        self, owner_id: str, name: str, exclude_id: str | None = None
    ) -> None:
        row_filter = RowFilter(
            equals={"owner_id": owner_id, "name": name},
            not_equals={"id": exclude_id} if exclude_id else {},
        )
        existing = await self._gateway.find_one(self._table, row_filter, columns="id")
        if existing is not None:
            logger.warning("Rejected duplicate product name for owner %s", owner_id)
            raise DuplicateProductName()

    @staticmethod
    def _listing_filter(owner_id: str, product_filter: ProductFilter | None) -> RowFilter:
        equals = {"owner_id": owner_id}
        contains: dict[str, str] = {}
        if product_filter is not None:
            if product_filter.category_id:
                equals["category_id"] = product_filter.category_id
            if product_filter.name:
                contains["name"] = product_filter.name
        return RowFilter(equals=equals, contains=contains)

    @staticmethod
    def _raise_for_constraint(exc: ConstraintViolation) -> None:
        if exc.is_unique_violation:
            raise DuplicateProductName() from exc
        if exc.is_foreign_key_violation:
            raise CategoryNotFound() from exc


def get_products_service(gateway: GatewayDependency) -> ProductsService:
    """FastAPI dependency factory."""

    return ProductsService(gateway)


ProductsDependency = Annotated[ProductsService, Depends(get_products_service)]
