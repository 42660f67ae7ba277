"""
Tests for the HTTP adapter.

The app is built around the seeded test engine; no lifespan is run, so the
engine is never replaced from the environment.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from engine.state_engine import StateEngine


@pytest.fixture
def client(engine: StateEngine) -> TestClient:
    return TestClient(create_app(engine=engine))


class TestReads:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_state_is_camel_case(self, client):
        data = client.get("/state").json()

        assert set(data) == {"categories", "products", "sales", "notifications", "settings"}
        assert data["settings"] == {"notificationEmail": "admin@example.com"}
        assert "salePrice" in data["products"][0]

    def test_lists(self, client):
        assert len(client.get("/categories").json()) == 4
        assert len(client.get("/products").json()) == 6
        assert client.get("/sales").json() == []

    def test_engine_missing(self):
        client = TestClient(create_app())

        assert client.get("/products").status_code == 503


class TestSales:

    def test_record_sale(self, client):
        response = client.post("/sales", json={"productId": "p3", "quantity": 3})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["record"]["productName"] == "Piles AA (paquet de 4)"
        assert body["record"]["total"] == 450
        assert [n["type"] for n in body["notifications"]] == ["success", "warning", "info"]

    def test_insufficient_stock(self, client, engine):
        response = client.post("/sales", json={"productId": "p3", "quantity": 9})

        assert response.status_code == 409
        assert response.json()["error"] == "insufficient_stock"
        assert engine.get_product("p3").stock == 8

    def test_unknown_product(self, client):
        response = client.post("/sales", json={"productId": "ghost", "quantity": 1})

        assert response.status_code == 404

    def test_invalid_quantity(self, client, engine):
        response = client.post("/sales", json={"productId": "p3", "quantity": 0})

        assert response.status_code == 422
        assert engine.sales == ()


class TestCatalog:

    def test_add_category(self, client):
        response = client.post("/categories", json={"name": "Hygiène", "icon": "🧴"})

        assert response.status_code == 200
        assert response.json()["record"]["name"] == "Hygiène"

    def test_delete_category_in_use(self, client):
        assert client.delete("/categories/1").status_code == 409

    def test_delete_unknown_category(self, client):
        assert client.delete("/categories/nope").status_code == 404

    def test_add_product(self, client):
        response = client.post("/products", json={
            "name": "Savon", "categoryId": "3", "stock": 12,
            "salePrice": 60, "purchasePrice": 40,
        })

        assert response.status_code == 200
        assert response.json()["record"]["totalSales"] == 0

    def test_update_product(self, client, engine):
        product = client.get("/products").json()[0]
        product["salePrice"] = 80

        response = client.put(f"/products/{product['id']}", json=product)

        assert response.status_code == 200
        assert engine.get_product(product["id"]).sale_price == 80

    def test_update_id_mismatch(self, client):
        product = client.get("/products").json()[0]

        assert client.put("/products/other", json=product).status_code == 400

    def test_update_unknown_product(self, client):
        product = client.get("/products").json()[0]
        product["id"] = "ghost"

        assert client.put("/products/ghost", json=product).status_code == 404

    def test_delete_product(self, client, engine):
        assert client.delete("/products/p5").status_code == 200
        assert engine.get_product("p5") is None

    def test_delete_unknown_product_is_silent(self, client, engine):
        before = len(engine.notifications)

        response = client.delete("/products/ghost")

        assert response.status_code == 404
        assert response.json()["notifications"] == []
        assert len(engine.notifications) == before


class TestSettingsAndNotifications:

    def test_update_settings(self, client):
        response = client.put("/settings", json={"notificationEmail": "caisse@boutique.ht"})

        assert response.status_code == 200
        assert client.get("/settings").json() == {"notificationEmail": "caisse@boutique.ht"}

    def test_manual_notification(self, client):
        response = client.post("/notifications", json={"message": "Inventaire demain", "type": "info"})

        assert response.status_code == 200
        assert client.get("/notifications").json()[0]["message"] == "Inventaire demain"

    def test_empty_message_rejected(self, client):
        assert client.post("/notifications", json={"message": ""}).status_code == 422


class TestReports:

    def test_summary(self, client):
        client.post("/sales", json={"productId": "p3", "quantity": 3})

        data = client.get("/reports/summary").json()

        assert data["sales"]["revenue"] == 450
        assert data["lowStock"] == ["p3"]
        assert data["outOfStock"] == ["p5"]
        assert data["topSellers"][0] == "p2"
        assert data["revenueByCategory"] == {"Articles Divers": 450}

    def test_format_currency(self, client):
        response = client.get("/format-currency", params={"amount": 1234.5})

        assert response.json()["formatted"] == "1\u202f234,50\u00a0G"

    @pytest.mark.parametrize("amount", ["nan", "inf", "-inf"])
    def test_format_currency_rejects_non_finite(self, client, amount):
        response = client.get("/format-currency", params={"amount": amount})

        assert response.status_code == 422

    def test_icons(self, client):
        icons = client.get("/icons").json()

        assert icons[:4] == ["🥤", "💊", "📦", "🍞"]
