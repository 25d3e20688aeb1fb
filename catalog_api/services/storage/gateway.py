"""Persistence gateway abstraction shared by the catalog services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

Row = dict[str, Any]


@dataclass(frozen=True)
class RowFilter:
    """Predicates combined with logical AND.

    ``contains`` matches a case-insensitive substring of the column value.
    """

    equals: dict[str, str] = field(default_factory=dict)
    not_equals: dict[str, str] = field(default_factory=dict)
    contains: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


class PersistenceGateway(ABC):
    """Abstract interface over the tables backing the catalog.

    Implementations raise ``PersistenceError`` for any backend failure and
    ``ConstraintViolation`` when a write breaks a table constraint.
    """

    @abstractmethod
    async def find_one(
        self, table: str, row_filter: RowFilter, columns: str = "*"
    ) -> Row | None:
        """Return the first row matching the filter, or None."""

    @abstractmethod
    async def find_many(
        self,
        table: str,
        row_filter: RowFilter,
        *,
        columns: str = "*",
        order: Sequence[OrderBy] = (),
        window: tuple[int, int] | None = None,
    ) -> list[Row]:
        """Return matching rows; ``window`` is an inclusive (start, end) slice."""

    @abstractmethod
    async def count(self, table: str, row_filter: RowFilter) -> int:
        """Return how many rows match without fetching them."""

    @abstractmethod
    async def insert(self, table: str, values: Row) -> Row:
        """Insert a row and return it as stored."""

    @abstractmethod
    async def update(self, table: str, row_filter: RowFilter, values: Row) -> list[Row]:
        """Update matching rows and return them as stored."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the backend answers."""
