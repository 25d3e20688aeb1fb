"""Typed errors raised by the catalog services.

Every error carries an explicit ``ErrorKind`` so the HTTP layer can choose a
status code without inspecting the human-readable message.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    INVALID_FILTER = "invalid_filter"
    INVALID_SORT = "invalid_sort"
    CATEGORY_NOT_FOUND = "category_not_found"
    DUPLICATE_PRODUCT_NAME = "duplicate_product_name"
    PRODUCT_NOT_FOUND = "product_not_found"
    PERSISTENCE = "persistence"


class CatalogError(Exception):
    """Base class for all catalog errors."""

    kind: ErrorKind = ErrorKind.PERSISTENCE
    default_message = "Catalog error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"


class InvalidFilterFormat(CatalogError):
    kind = ErrorKind.INVALID_FILTER
    default_message = "Invalid JSON format in filter parameter"


class InvalidSortFormat(CatalogError):
    kind = ErrorKind.INVALID_SORT
    default_message = "Invalid sort parameter"


class CategoryNotFound(CatalogError):
    kind = ErrorKind.CATEGORY_NOT_FOUND
    default_message = "Category does not exist"


class DuplicateProductName(CatalogError):
    kind = ErrorKind.DUPLICATE_PRODUCT_NAME
    default_message = "A product with this name already exists"


class ProductNotFound(CatalogError):
    kind = ErrorKind.PRODUCT_NOT_FOUND
    default_message = "Product not found"


class PersistenceError(CatalogError):
    """The backend failed; ``message`` holds its diagnostics."""

    kind = ErrorKind.PERSISTENCE
    default_message = "Backend request failed"


class ConstraintViolation(PersistenceError):
    """The backend rejected a write because of a table constraint."""

    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code == self.UNIQUE_VIOLATION

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.code == self.FOREIGN_KEY_VIOLATION
