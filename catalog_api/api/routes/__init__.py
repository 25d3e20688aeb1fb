"""API route registration."""

from fastapi import FastAPI

from catalog_api.api.routes import categories, products, system


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(categories.router)
    app.include_router(products.router)
