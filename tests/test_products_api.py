"""Tests for the /products endpoints."""

from __future__ import annotations

import json

import pytest

from catalog_api.config import settings
from catalog_api.errors import PersistenceError
from tests.fakes import CATEGORY_IDS, OTHER_OWNER_ID, OWNER_ID, UNKNOWN_CATEGORY_ID

DAIRY = CATEGORY_IDS["Dairy"]
BREAD = CATEGORY_IDS["Bread"]


async def _create(client, name: str, category_id: str = DAIRY) -> dict:
    response = await client.post(
        "/products", json={"name": name, "category_id": category_id}
    )
    assert response.status_code == 201, response.text
    return response.json()["product"]


@pytest.mark.asyncio
async def test_create_product(client):
    response = await client.post(
        "/products", json={"name": "  Whole Milk  ", "category_id": DAIRY}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Product created successfully"
    assert data["product"]["name"] == "Whole Milk"
    assert data["product"]["category_id"] == DAIRY
    assert data["product"]["owner_id"] == OWNER_ID


@pytest.mark.asyncio
async def test_create_product_rejects_malformed_json(client):
    response = await client.post(
        "/products",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON body"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"category_id": DAIRY}, "name"),
        ({"name": "   ", "category_id": DAIRY}, "name"),
        ({"name": "x" * 256, "category_id": DAIRY}, "name"),
        ({"name": "Whole Milk", "category_id": "not-a-uuid"}, "category_id"),
    ],
)
async def test_create_product_rejects_invalid_payload(client, payload, field):
    response = await client.post("/products", json=payload)

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Input validation failed"
    assert field in data["details"]


@pytest.mark.asyncio
async def test_create_product_with_unknown_category(client):
    response = await client.post(
        "/products", json={"name": "Whole Milk", "category_id": UNKNOWN_CATEGORY_ID}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Category does not exist"}


@pytest.mark.asyncio
async def test_create_duplicate_product(client):
    await _create(client, "Whole Milk")

    response = await client.post(
        "/products", json={"name": "Whole Milk", "category_id": BREAD}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "A product with this name already exists"}


@pytest.mark.asyncio
async def test_create_product_backend_failure(client, gateway):
    gateway.fail("insert", settings.PRODUCTS_TABLE)

    response = await client.post(
        "/products", json={"name": "Whole Milk", "category_id": DAIRY}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_list_products_with_pagination(client):
    for index in range(3):
        await _create(client, f"Product {index}")

    response = await client.get("/products", params={"page": 2, "limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert len(data["products"]) == 1
    assert data["pagination"] == {
        "page": 2,
        "limit": 2,
        "total": 3,
        "total_pages": 2,
        "has_next": False,
        "has_prev": True,
    }


@pytest.mark.asyncio
async def test_list_products_defaults(client):
    response = await client.get("/products")

    assert response.status_code == 200
    data = response.json()
    assert data["products"] == []
    assert data["pagination"]["limit"] == settings.DEFAULT_PAGE_SIZE
    assert data["pagination"]["total_pages"] == 0


@pytest.mark.asyncio
async def test_list_products_with_filter_and_sort(client):
    await _create(client, "Whole Milk")
    await _create(client, "Oat milk")
    await _create(client, "Milk Bread", BREAD)

    response = await client.get(
        "/products",
        params={
            "filter": json.dumps({"category_id": DAIRY, "name": "milk"}),
            "sort": "name:asc",
        },
    )

    assert response.status_code == 200
    assert [p["name"] for p in response.json()["products"]] == ["Oat milk", "Whole Milk"]


@pytest.mark.asyncio
async def test_list_products_rejects_malformed_filter(client):
    response = await client.get("/products", params={"filter": "{bad"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON format in filter parameter"}


@pytest.mark.asyncio
async def test_list_products_rejects_non_uuid_category_filter(client):
    response = await client.get("/products", params={"filter": json.dumps({"category_id": "abc"})})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Filter values must be strings and category_id must be a UUID"
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"limit": 0}, {"page": 0}, {"limit": 1000}, {"sort": "price:asc"}, {"page": "one"}],
)
async def test_list_products_rejects_invalid_query(client, params):
    response = await client.get("/products", params=params)

    assert response.status_code == 400
    assert "details" in response.json()


@pytest.mark.asyncio
async def test_get_product(client):
    created = await _create(client, "Whole Milk")

    response = await client.get(f"/products/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"product": created}


@pytest.mark.asyncio
async def test_get_product_not_found(client):
    response = await client.get(f"/products/{UNKNOWN_CATEGORY_ID}")

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


@pytest.mark.asyncio
async def test_get_product_owned_by_someone_else(client, gateway):
    gateway.seed(
        settings.PRODUCTS_TABLE,
        [
            {
                "id": "9b7e1a52-7c1f-4b0e-a2a4-0f4d3c2b1a00",
                "name": "Secret",
                "category_id": DAIRY,
                "owner_id": OTHER_OWNER_ID,
                "created_at": "2025-01-01T00:00:00+00:00",
                "updated_at": "2025-01-01T00:00:00+00:00",
            }
        ],
    )

    response = await client.get("/products/9b7e1a52-7c1f-4b0e-a2a4-0f4d3c2b1a00")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_product_invalid_id(client):
    response = await client.get("/products/not-a-uuid")

    assert response.status_code == 400
    assert "product_id" in response.json()["details"]


@pytest.mark.asyncio
async def test_update_product(client):
    created = await _create(client, "Whole Milk")

    response = await client.put(
        f"/products/{created['id']}",
        json={"name": "Skimmed Milk", "category_id": BREAD},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Product updated successfully"
    assert data["product"]["id"] == created["id"]
    assert data["product"]["name"] == "Skimmed Milk"
    assert data["product"]["category_id"] == BREAD
    assert data["product"]["created_at"] == created["created_at"]


@pytest.mark.asyncio
async def test_update_product_not_found(client):
    response = await client.put(
        f"/products/{UNKNOWN_CATEGORY_ID}",
        json={"name": "Skimmed Milk", "category_id": DAIRY},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


@pytest.mark.asyncio
async def test_update_product_to_duplicate_name(client):
    await _create(client, "Whole Milk")
    butter = await _create(client, "Butter")

    response = await client.put(
        f"/products/{butter['id']}",
        json={"name": "Whole Milk", "category_id": DAIRY},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "A product with this name already exists"}


@pytest.mark.asyncio
async def test_update_product_rejects_invalid_payload(client):
    created = await _create(client, "Whole Milk")

    response = await client.put(f"/products/{created['id']}", json={"name": ""})

    assert response.status_code == 400
    details = response.json()["details"]
    assert "name" in details
    assert "category_id" in details


@pytest.mark.asyncio
async def test_list_products_backend_failure(client, gateway):
    gateway.fail("count", error=PersistenceError("connection reset"))

    response = await client.get("/products")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
