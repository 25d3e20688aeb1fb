"""Resolution of the owner identity for incoming requests."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from catalog_api.config import settings


def get_current_owner_id() -> str:
    """FastAPI dependency returning the owner every request acts as.

    Authentication is not wired yet, so this is the configured placeholder
    owner. Routes still pass it explicitly into the services.
    """

    return settings.DEFAULT_OWNER_ID


OwnerDependency = Annotated[str, Depends(get_current_owner_id)]
