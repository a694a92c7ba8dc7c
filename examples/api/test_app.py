"""Tests for the API example — CRUD, JSON, path params, query params."""

from perch.testing import TestClient


class TestListItems:
    """GET /api/items — list with limit and offset."""

    async def test_empty_list(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/items")
            assert response.status == 200
            data = response.json()
            assert data["data"] == []
            assert data["meta"]["total"] == 0

    async def test_list_with_limit_offset(self, example_app) -> None:
        async with TestClient(example_app) as client:
            for i in range(3):
                await client.post("/api/items", json={"title": f"Item {i}"})

            response = await client.get("/api/items?limit=2&offset=1")
            data = response.json()
            assert [item["title"] for item in data["data"]] == ["Item 1", "Item 2"]
            assert data["meta"] == {"limit": 2, "offset": 1, "total": 3}

    async def test_bad_limit_falls_back(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/items?limit=lots")
            assert response.json()["meta"]["limit"] == 50


class TestItemLifecycle:
    async def test_create_get_update_delete(self, example_app) -> None:
        async with TestClient(example_app) as client:
            create = await client.post("/api/items", json={"title": "Write docs"})
            assert create.status == 201
            item = create.json()
            assert item == {"id": 1, "title": "Write docs", "done": False}
            assert create.header("location") == "/api/items/1"

            fetched = await client.get("/api/items/1")
            assert fetched.json() == item

            updated = await client.put("/api/items/1", body=b'{"done": true}')
            assert updated.json()["done"] is True

            deleted = await client.delete("/api/items/1")
            assert deleted.status == 204
            assert deleted.body_bytes == b""

            assert (await client.get("/api/items/1")).status == 404

    async def test_create_requires_title(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/api/items", json={"title": "  "})
            assert response.status == 422

    async def test_invalid_id(self, example_app) -> None:
        async with TestClient(example_app) as client:
            assert (await client.get("/api/items/abc")).status == 400

    async def test_malformed_json_is_500(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/api/items", body=b"{not json")
            assert response.status == 500
            assert response.text == "Internal Server Error"


class TestCorsAndDocs:
    async def test_preflight(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.options("/api/items")
            assert response.status == 204
            assert response.header("access-control-allow-origin") == "*"

    async def test_docs_index(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/docs/")
            assert response.status == 200
            assert "Items API" in response.text
