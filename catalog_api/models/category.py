"""Category schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Category(BaseModel):
    """A product category seeded outside of this service."""

    id: str = Field(..., description="Unique identifier of the category")
    name: str


class CategoryListResponse(BaseModel):
    """Response body for GET /categories."""

    categories: list[Category] = Field(default_factory=list)
