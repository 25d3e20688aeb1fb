"""Product domain models and API schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)

ProductName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
]


class SortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Product(BaseModel):
    """Product as returned to API callers."""

    id: str = Field(..., description="Unique identifier of the product")
    name: str
    category_id: str
    owner_id: str = Field(..., description="User the product belongs to")
    created_at: datetime
    updated_at: datetime


class ProductPayload(BaseModel):
    """Body accepted when creating or updating a product."""

    name: ProductName = Field(..., description="Product name, trimmed")
    category_id: str = Field(..., description="UUID of an existing category")

    @field_validator("category_id")
    @classmethod
    def _validate_category_id(cls, value: str) -> str:
        try:
            return str(uuid.UUID(value))
        except ValueError as exc:
            raise ValueError("Invalid UUID format for category_id") from exc


class ProductFilter(BaseModel):
    """Decoded value of the ``filter`` query parameter."""

    model_config = ConfigDict(extra="ignore")

    category_id: str | None = None
    name: str | None = Field(
        None,
        validation_alias=AliasChoices("name", "product_name"),
        description="Case-insensitive substring of the product name",
    )

    @field_validator("category_id")
    @classmethod
    def _validate_category_id(cls, value: str | None) -> str | None:
        if not value:
            return value
        try:
            return str(uuid.UUID(value))
        except ValueError as exc:
            raise ValueError("Invalid UUID format for category_id") from exc


class ProductSort(BaseModel):
    """Decoded value of the ``sort`` query parameter."""

    field: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC

    @property
    def ascending(self) -> bool:
        return self.order is SortOrder.ASC


class PaginationMeta(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool


class ProductListResponse(BaseModel):
    """Response body for GET /products."""

    products: list[Product] = Field(default_factory=list)
    pagination: PaginationMeta


class ProductResponse(BaseModel):
    """Response body for GET /products/{id}."""

    product: Product


class ProductMutationResponse(BaseModel):
    """Response body for product create and update."""

    message: str
    product: Product


class ErrorResponse(BaseModel):
    """Body returned by every failing request."""

    error: str
    details: dict[str, list[str]] | None = None
