"""Pytest configuration and fixtures for the catalog service."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from catalog_api.config import settings
from catalog_api.services.categories import CategoriesService
from catalog_api.services.products import ProductsService
from catalog_api.services.storage.supabase_gateway import get_gateway
from tests.fakes import CATEGORY_IDS, InMemoryGateway, TickingClock


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


@pytest.fixture()
def gateway() -> InMemoryGateway:
    """Fake backend seeded with a few categories, in non-alphabetical order."""
    fake = InMemoryGateway(unique={settings.PRODUCTS_TABLE: [("owner_id", "name")]})
    fake.seed(
        settings.CATEGORIES_TABLE,
        [{"id": category_id, "name": name} for name, category_id in CATEGORY_IDS.items()],
    )
    return fake


@pytest.fixture()
def categories_service(gateway) -> CategoriesService:
    return CategoriesService(gateway)


@pytest.fixture()
def service(gateway) -> ProductsService:
    return ProductsService(gateway, clock=TickingClock())


@pytest_asyncio.fixture()
async def client(gateway):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from catalog_api.main import app

    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_gateway, None)


@pytest_asyncio.fixture()
async def lenient_client(gateway):
    """Like ``client``, but returns 500 responses instead of re-raising app errors."""
    from catalog_api.main import app

    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_gateway, None)
