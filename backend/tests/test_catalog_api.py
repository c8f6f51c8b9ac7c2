"""
Catalog API tests.

Verifies:
- Manager create/update/restock/delete round trip through HTTP
- Field allowlist and validation errors surface as 400
- Search and low-stock filters
"""

import pytest

from conftest import login_manager


@pytest.fixture
def manager(client):
    login_manager(client)
    return client


class TestListProducts:

    def test_search_query(self, manager):
        resp = manager.get("/api/products?q=MILK")
        assert [p["name"] for p in resp.json["items"]] == ["Milk 1L"]

    def test_search_by_barcode(self, manager):
        resp = manager.get("/api/products?q=3003")
        assert [p["id"] for p in resp.json["items"]] == ["3"]

    def test_low_stock_filter(self, manager):
        manager.put("/api/products/2", json={"quantity": 9})
        resp = manager.get("/api/products?low_stock=true")
        assert [p["id"] for p in resp.json["items"]] == ["2"]
        assert resp.json["items"][0]["isLowStock"] is True

    def test_get_one(self, manager):
        resp = manager.get("/api/products/1")
        assert resp.status_code == 200
        assert resp.json["localCode"] == "COF01"
        assert resp.json["price"] == 15.5

    def test_get_missing(self, manager):
        assert manager.get("/api/products/404").status_code == 404


class TestManageProducts:

    def test_create(self, manager):
        resp = manager.post("/api/products", json={
            "name": "Tea", "localCode": "TEA01", "barCode": None, "quantity": 12, "price": 4.25,
        })
        assert resp.status_code == 201
        assert resp.json["barCode"] == ""
        assert resp.json["price"] == 4.25
        assert manager.get("/api/products").json["count"] == 4

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Tea"},
            {"name": "Tea", "localCode": "T", "quantity": 1.5},
            {"name": "Tea", "localCode": "T", "quantity": "1e3"},
            {"name": "Tea", "localCode": "T", "price": -1},
            {"name": "Tea", "localCode": "T", "price": 10000000},
            {"name": "Tea", "localCode": "T", "sku": "nope"},
            {"name": "", "localCode": "T"},
            {"name": "Tea", "localCode": "cof01"},
        ],
    )
    def test_create_rejected(self, manager, payload):
        resp = manager.post("/api/products", json=payload)
        assert resp.status_code == 400
        assert "error" in resp.json

    def test_update(self, manager):
        resp = manager.put("/api/products/3", json={"price": "1.35", "name": "Sugar 1 kg"})
        assert resp.status_code == 200
        assert resp.json["price"] == 1.35
        assert resp.json["name"] == "Sugar 1 kg"

    def test_update_missing(self, manager):
        assert manager.put("/api/products/404", json={"name": "X"}).status_code == 404

    def test_restock(self, manager):
        resp = manager.post("/api/products/2/restock", json={"amount": 20})
        assert resp.status_code == 200
        assert resp.json["quantity"] == 50

    @pytest.mark.parametrize("payload", [{}, {"amount": 0}, {"amount": -2}, {"amount": 1.5}])
    def test_restock_rejected(self, manager, payload):
        assert manager.post("/api/products/2/restock", json=payload).status_code == 400

    def test_delete(self, manager):
        assert manager.delete("/api/products/3").status_code == 200
        assert manager.get("/api/products/3").status_code == 404
        assert manager.delete("/api/products/3").status_code == 404
