"""System-level routes such as health checks."""

from __future__ import annotations

from fastapi import APIRouter

from catalog_api.config import settings
from catalog_api.services.storage.supabase_gateway import GatewayDependency

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Banner endpoint used by smoke tests."""

    return {"message": "Product Catalog API"}


@router.get("/health")
async def health_check(gateway: GatewayDependency) -> dict[str, str]:
    """Health check endpoint with backend connectivity check."""

    backend_status = "connected" if await gateway.ping() else "disconnected"

    return {
        "status": "healthy",
        "database": backend_status,
        "environment": settings.ENVIRONMENT,
    }
