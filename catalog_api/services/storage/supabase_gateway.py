"""Supabase (PostgREST) implementation of the persistence gateway."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Annotated, Any

import httpx
from fastapi import Depends

from catalog_api.config import settings
from catalog_api.errors import ConstraintViolation, PersistenceError
from catalog_api.services.storage.gateway import OrderBy, PersistenceGateway, Row, RowFilter

logger = logging.getLogger(__name__)

_REST_PREFIX = "/rest/v1"
_CONSTRAINT_CODES = {
    ConstraintViolation.UNIQUE_VIOLATION,
    ConstraintViolation.FOREIGN_KEY_VIOLATION,
}


class SupabaseGateway(PersistenceGateway):
    """Talks to the Supabase REST API through a shared async HTTP client."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def find_one(
        self, table: str, row_filter: RowFilter, columns: str = "*"
    ) -> Row | None:
        rows = await self.find_many(table, row_filter, columns=columns, window=(0, 0))
        return rows[0] if rows else None

    async def find_many(
        self,
        table: str,
        row_filter: RowFilter,
        *,
        columns: str = "*",
        order: Sequence[OrderBy] = (),
        window: tuple[int, int] | None = None,
    ) -> list[Row]:
        params = self._filter_params(row_filter)
        params["select"] = columns
        if order:
            params["order"] = ",".join(
                f"{item.column}.{'asc' if item.ascending else 'desc'}" for item in order
            )
        if window is not None:
            start, end = window
            params["offset"] = str(start)
            params["limit"] = str(end - start + 1)

        response = await self._send("GET", table, params=params)
        return list(self._json(response))

    async def count(self, table: str, row_filter: RowFilter) -> int:
        params = self._filter_params(row_filter)
        params["select"] = "*"
        response = await self._send(
            "HEAD",
            table,
            params=params,
            headers={"Prefer": "count=exact"},
        )
        return self._parse_total(response)

    async def insert(self, table: str, values: Row) -> Row:
        response = await self._send(
            "POST",
            table,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = self._json(response)
        if not rows:
            raise PersistenceError(f"Insert into {table} returned no row")
        return rows[0]

    async def update(self, table: str, row_filter: RowFilter, values: Row) -> list[Row]:
        response = await self._send(
            "PATCH",
            table,
            params=self._filter_params(row_filter),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return list(self._json(response))

    async def ping(self) -> bool:
        try:
            response = await self._client.get(f"{_REST_PREFIX}/", timeout=5.0)
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"{_REST_PREFIX}/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.error("Supabase %s %s failed: %s", method, table, exc)
            raise PersistenceError(f"Supabase request failed: {exc}") from exc

        if response.is_error:
            raise self._translate_error(method, table, response)
        return response

    @staticmethod
    def _filter_params(row_filter: RowFilter) -> dict[str, str]:
        params: dict[str, str] = {}
        for column, value in row_filter.equals.items():
            params[column] = f"eq.{value}"
        for column, value in row_filter.not_equals.items():
            params[column] = f"neq.{value}"
        for column, value in row_filter.contains.items():
            params[column] = f"ilike.%{_escape_like(value)}%"
        return params

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "Supabase returned a non-JSON body for %s %s",
                response.request.method,
                response.request.url.path,
            )
            raise PersistenceError("Supabase returned a non-JSON response") from exc

    @staticmethod
    def _parse_total(response: httpx.Response) -> int:
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total or total == "*":
            raise PersistenceError("Supabase count response is missing a total")
        try:
            return int(total)
        except ValueError as exc:
            raise PersistenceError(
                f"Unexpected Content-Range header: {content_range}"
            ) from exc

    @staticmethod
    def _translate_error(
        method: str, table: str, response: httpx.Response
    ) -> PersistenceError:
        code: str | None = None
        message = response.text or response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message

        logger.error(
            "Supabase %s %s returned %s: %s",
            method,
            table,
            response.status_code,
            message,
            extra={"status_code": response.status_code, "pg_code": code},
        )
        if code in _CONSTRAINT_CODES:
            return ConstraintViolation(message, code=code)
        return PersistenceError(message)


def _escape_like(value: str) -> str:
    """Make LIKE metacharacters in ``value`` match literally.

    PostgREST rewrites every ``*`` into ``%``, so a literal asterisk cannot be
    escaped and is matched with the single-character wildcard instead.
    """
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "_")


def create_supabase_gateway() -> SupabaseGateway:
    """Factory function to create a gateway from the global settings."""
    if not settings.backend_configured:
        logger.warning("SUPABASE_URL or SUPABASE_KEY not set in environment.")

    client = httpx.AsyncClient(
        base_url=settings.SUPABASE_URL or "",
        headers={
            "apikey": settings.SUPABASE_KEY or "",
            "Authorization": f"Bearer {settings.SUPABASE_KEY or ''}",
            "Content-Type": "application/json",
        },
        timeout=settings.SUPABASE_TIMEOUT_SECONDS,
    )
    return SupabaseGateway(client)


_gateway: SupabaseGateway | None = None


def get_gateway() -> PersistenceGateway:
    """Return a singleton gateway for the current process."""

    global _gateway
    if _gateway is None:
        _gateway = create_supabase_gateway()
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None


GatewayDependency = Annotated[PersistenceGateway, Depends(get_gateway)]
