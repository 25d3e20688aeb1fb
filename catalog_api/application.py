"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_api.api.routes import include_api_routes
from catalog_api.config import settings
from catalog_api.errors import CatalogError, ErrorKind
from catalog_api.services.storage.supabase_gateway import close_gateway

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_FILTER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_SORT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CATEGORY_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_PRODUCT_NAME: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    if not settings.backend_configured:
        logger.warning("Supabase is not configured, backend calls will fail")
    yield
    await close_gateway()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Product Catalog API",
        description="Owner-scoped products and categories backed by Supabase",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    _register_error_handlers(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Render every failure as a JSON body with an ``error`` field."""

    app.add_exception_handler(CatalogError, _handle_catalog_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


async def _handle_catalog_error(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Backend failure while handling %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            extra={"error_kind": exc.kind.value},
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": "Internal server error"},
        )

    logger.info(
        "Rejected %s %s: %s",
        request.method,
        request.url.path,
        exc.message,
        extra={"error_kind": exc.kind.value},
    )
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON body"},
        )

    details: dict[str, list[str]] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc", ())]
        field = ".".join(location[1:]) or (location[0] if location else "request")
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))

    logger.info("Validation failed for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Input validation failed", "details": details},
    )


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error while handling %s %s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
