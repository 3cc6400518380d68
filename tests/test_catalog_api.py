"""HTTP tests for the poster catalog: public browsing and admin maintenance."""

import pytest

from conftest import stock_of


def _poster(**overrides):
    body = {
        "title": "Great Wave",
        "description": "Woodblock print reproduction",
        "price": 349.0,
        "stock": 12,
        "category": "Japanese",
        "dimensions": "A2",
        "material": "Matte paper",
        "tags": ["ukiyo-e", "sea"],
    }
    body.update(overrides)
    return body


class TestAdminCatalog:

    async def test_create_item(self, client, admin_headers):
        resp = await client.post("/catalog/", json=_poster(), headers=admin_headers)

        assert resp.status_code == 201
        body = resp.json()
        assert body["title"] == "Great Wave"
        assert body["tags"] == ["ukiyo-e", "sea"]
        assert body["is_available"] is True

    async def test_duplicate_title_conflicts(self, client, admin_headers):
        await client.post("/catalog/", json=_poster(), headers=admin_headers)

        resp = await client.post("/catalog/", json=_poster(title="  Great Wave "), headers=admin_headers)

        assert resp.status_code == 409
        assert resp.json()["code"] == "CONFLICT"

    @pytest.mark.parametrize("field, value", [("price", -1), ("stock", -3), ("title", "")])
    async def test_create_rejects_bad_fields(self, client, admin_headers, field, value):
        resp = await client.post("/catalog/", json=_poster(**{field: value}), headers=admin_headers)

        assert resp.status_code == 422

    async def test_customers_cannot_edit_catalog(self, client, customer_headers, make_item):
        poster = await make_item()

        created = await client.post("/catalog/", json=_poster(), headers=customer_headers)
        updated = await client.put(f"/catalog/{poster.id}", json={"price": 1}, headers=customer_headers)
        anonymous = await client.post("/catalog/", json=_poster())

        assert created.status_code == 403
        assert updated.status_code == 403
        assert anonymous.status_code == 401

    async def test_partial_update(self, client, admin_headers, make_item):
        poster = await make_item(price=200.0, stock=5)

        resp = await client.put(f"/catalog/{poster.id}", json={"price": 249.0}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["price"] == 249.0
        assert resp.json()["stock"] == 5
        assert resp.json()["title"] == poster.title

    async def test_update_rejects_negative_stock(self, client, admin_headers, make_item):
        poster = await make_item()

        resp = await client.put(f"/catalog/{poster.id}", json={"stock": -1}, headers=admin_headers)

        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_INPUT"

    async def test_update_to_taken_title_conflicts(self, client, admin_headers, make_item):
        await make_item(title="Starry Night")
        other = await make_item(title="Sunflowers")

        resp = await client.put(f"/catalog/{other.id}", json={"title": "Starry Night"}, headers=admin_headers)

        assert resp.status_code == 409

    async def test_restock_adds_units(self, app, client, admin_headers, make_item):
        poster = await make_item(stock=2)

        resp = await client.post(f"/catalog/{poster.id}/restock", json={"quantity": 8}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["stock"] == 10
        assert await stock_of(app, poster.id) == 10

    async def test_restock_missing_item(self, client, admin_headers):
        resp = await client.post("/catalog/999/restock", json={"quantity": 1}, headers=admin_headers)

        assert resp.status_code == 404

    async def test_soft_delete_hides_item(self, client, admin_headers, make_item):
        poster = await make_item()

        resp = await client.delete(f"/catalog/{poster.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["is_available"] is False

        still_there = await client.get(f"/catalog/{poster.id}")
        assert still_there.status_code == 200

    async def test_hard_delete_removes_item(self, client, admin_headers, make_item):
        poster = await make_item()

        resp = await client.delete(f"/catalog/{poster.id}/hard", headers=admin_headers)
        assert resp.status_code == 204

        gone = await client.get(f"/catalog/{poster.id}")
        assert gone.status_code == 404

        again = await client.delete(f"/catalog/{poster.id}/hard", headers=admin_headers)
        assert again.status_code == 404


class TestBrowseCatalog:

    @pytest.fixture
    async def shelf(self, make_item):
        return [
            await make_item(title="Starry Night", price=200.0, category="Impressionism", description="Swirling sky"),
            await make_item(title="Water Lilies", price=150.0, category="Impressionism"),
            await make_item(title="The Scream", price=300.0, category="Expressionism", stock=0),
            await make_item(title="Guernica", price=450.0, category="Cubism", is_available=False),
        ]

    async def test_get_single_item(self, client, shelf):
        resp = await client.get(f"/catalog/{shelf[0].id}")

        assert resp.status_code == 200
        assert resp.json()["title"] == "Starry Night"

    async def test_missing_item(self, client):
        resp = await client.get("/catalog/12345")

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Catalog item not found"

    async def test_pagination(self, client, shelf):
        resp = await client.get("/catalog/", params={"page": 2, "limit": 3, "sort_by": "title", "sort_order": "asc"})

        body = resp.json()
        assert [i["title"] for i in body["items"]] == ["Water Lilies"]
        assert body["pagination"] == {
            "page": 2,
            "limit": 3,
            "total": 4,
            "pages": 2,
            "has_next": False,
            "has_prev": True,
        }

    async def test_category_filter_ignores_case(self, client, shelf):
        resp = await client.get("/catalog/", params={"category": "impressionism", "sort_by": "price", "sort_order": "asc"})

        assert [i["title"] for i in resp.json()["items"]] == ["Water Lilies", "Starry Night"]

    async def test_search_matches_title_or_description(self, client, shelf):
        by_title = await client.get("/catalog/", params={"search": "scream"})
        by_description = await client.get("/catalog/", params={"search": "swirling"})

        assert [i["title"] for i in by_title.json()["items"]] == ["The Scream"]
        assert [i["title"] for i in by_description.json()["items"]] == ["Starry Night"]

    async def test_price_range_and_availability(self, client, shelf):
        resp = await client.get("/catalog/", params={"min_price": 150, "max_price": 300, "is_available": "true"})

        assert {i["title"] for i in resp.json()["items"]} == {"Starry Night", "Water Lilies", "The Scream"}

    @pytest.mark.parametrize("params", [
        {"min_price": 500, "max_price": 100},
        {"min_price": -1},
        {"limit": 101},
        {"page": 0},
    ])
    async def test_invalid_listing_params(self, client, params):
        resp = await client.get("/catalog/", params=params)

        assert resp.status_code == 400

    async def test_filter_options(self, client, shelf, make_item):
        await make_item(title="Mona Lisa", category="Renaissance", material="Canvas", dimensions="A2")
        await make_item(title="Last Supper", category="Renaissance", material="Canvas", dimensions="A1")

        resp = await client.get("/catalog/filters")

        assert resp.status_code == 200
        assert resp.json() == {
            "categories": [
                {"category": "Cubism", "count": 1},
                {"category": "Expressionism", "count": 1},
                {"category": "Impressionism", "count": 2},
                {"category": "Renaissance", "count": 2},
            ],
            "materials": ["Canvas"],
            "dimensions": ["A1", "A2"],
        }

    async def test_featured_lists_available_items(self, client, shelf):
        resp = await client.get("/catalog/featured")

        assert resp.status_code == 200
        titles = [i["title"] for i in resp.json()]
        assert "Guernica" not in titles
        assert len(titles) == 3
