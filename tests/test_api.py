"""
Testy komponentowe API - prawdziwe routery, serwisy i baza, bez mockow.
Kwoty w JSONie przychodza jako stringi (Decimal), porownujemy przez Decimal.
"""
from decimal import Decimal

import pytest


@pytest.fixture
def widget(client):
    response = client.post(
        "/products",
        json={"name": "Widget", "price": "10.00", "stock_quantity": 5, "category": "Electronics"},
    )
    assert response.status_code == 201
    return response.json()


class TestCartEndpoints:
    def test_scenario_a_over_http(self, client, widget):
        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 3})
        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("30.00")

        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 2})
        data = response.json()
        assert data["items"][0]["quantity"] == 5
        assert Decimal(data["items"][0]["subtotal"]) == Decimal("50.00")

        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["available"] == 5
        assert body["requested"] == 6
        assert body["product_id"] == widget["id"]

    def test_get_cart_without_cart_is_empty_value(self, client):
        response = client.get("/cart/5")

        assert response.status_code == 200
        data = response.json()
        assert data["cart_id"] is None
        assert data["items"] == []
        assert Decimal(data["total_amount"]) == Decimal("0.00")

    def test_update_to_zero_then_clear(self, client, widget):
        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 2})

        response = client.put(f"/cart/1/items/{widget['id']}", json={"quantity": 0})
        assert response.status_code == 200
        assert response.json()["items"] == []

        response = client.delete("/cart/1")
        assert response.status_code == 200
        assert response.json()["cart_id"] is None

        response = client.delete("/cart/1")
        assert response.status_code == 404
        assert response.json()["code"] == "CART_NOT_FOUND"

    def test_remove_absent_item(self, client, widget):
        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})
        client.delete(f"/cart/1/items/{widget['id']}")

        response = client.delete(f"/cart/1/items/{widget['id']}")
        assert response.status_code == 404
        assert response.json() == {
            "error": f"Product '{widget['id']}' is not in the cart of customer '1'",
            "code": "CART_ITEM_NOT_FOUND",
            "customer_id": 1,
            "product_id": widget["id"],
        }

    def test_unknown_product(self, client):
        response = client.post("/cart/1/items", json={"product_id": 999, "quantity": 1})

        assert response.status_code == 404
        assert response.json()["code"] == "PRODUCT_NOT_FOUND"
        assert client.get("/cart/1").json()["cart_id"] is None

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity(self, client, widget, quantity):
        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": quantity})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_QUANTITY"

    def test_non_integer_quantity_rejected_by_schema(self, client, widget):
        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1.5})

        assert response.status_code == 422

    @pytest.mark.parametrize("quantity", [True, "3", 2.0])
    def test_quantity_must_be_a_json_integer(self, client, widget, quantity):
        added = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": quantity})
        assert added.status_code == 422

        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})
        updated = client.put(f"/cart/1/items/{widget['id']}", json={"quantity": quantity})
        assert updated.status_code == 422

        cart = client.get("/cart/1").json()
        assert [i["quantity"] for i in cart["items"]] == [1]

    def test_locked_cart_returns_conflict(self, client, widget, lock_service):
        lock_service.acquire_cart_lock(1, "someone-else")

        response = client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})

        assert response.status_code == 409
        assert response.json()["code"] == "CONCURRENCY_CONFLICT"
        assert response.headers["Retry-After"] == "1"


class TestCheckoutEndpoints:
    def test_checkout_and_cancel(self, client, widget):
        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 4})

        response = client.post("/cart/1/checkout")
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "PLACED"
        assert Decimal(order["total_amount"]) == Decimal("40.00")
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 1

        assert client.get(f"/orders/{order['id']}").json()["id"] == order["id"]

        response = client.post(f"/orders/{order['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert client.get(f"/products/{widget['id']}").json()["stock_quantity"] == 5

        response = client.post(f"/orders/{order['id']}/cancel")
        assert response.status_code == 409
        assert response.json()["code"] == "ORDER_NOT_CANCELLABLE"

    def test_checkout_empty(self, client, widget):
        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})
        client.put(f"/cart/1/items/{widget['id']}", json={"quantity": 0})

        response = client.post("/cart/1/checkout")
        assert response.status_code == 400
        assert response.json()["code"] == "EMPTY_CART"

    def test_unknown_order(self, client):
        assert client.get("/orders/77").status_code == 404


class TestProductEndpoints:
    def test_crud(self, client, widget):
        response = client.put(f"/products/{widget['id']}", json={"price": "11.00"})
        assert response.status_code == 200
        assert Decimal(response.json()["price"]) == Decimal("11.00")

        assert client.delete(f"/products/{widget['id']}").status_code == 204
        assert client.get(f"/products/{widget['id']}").status_code == 404

    def test_negative_price_rejected(self, client):
        response = client.post("/products", json={"name": "Bad", "price": "-1.00"})

        assert response.status_code == 422

    def test_delete_in_use(self, client, widget):
        client.post("/cart/1/items", json={"product_id": widget["id"], "quantity": 1})

        response = client.delete(f"/products/{widget['id']}")
        assert response.status_code == 409
        assert response.json()["code"] == "PRODUCT_IN_USE"

    def test_listing_routes(self, client, widget):
        client.post("/products", json={"name": "Desk Lamp", "price": "34.99", "stock_quantity": 0, "category": "Home"})

        assert len(client.get("/products").json()) == 2
        assert [p["name"] for p in client.get("/products/category/Home").json()] == ["Desk Lamp"]
        assert [p["name"] for p in client.get("/products/search", params={"name": "widg"}).json()] == ["Widget"]
        assert [p["name"] for p in client.get("/products/in-stock").json()] == ["Widget"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
