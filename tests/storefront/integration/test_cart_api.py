"""Integration tests for the cart endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import ROUTERS, register_error_handlers

CUSTOMER = {"X-User-Id": "cust-001", "X-User-Role": "CUSTOMER"}
OTHER = {"X-User-Id": "cust-002", "X-User-Role": "CUSTOMER"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


def _add(client, variant, quantity=1, headers=CUSTOMER):
    return client.post("/carts/items", json={"variant_id": variant.id, "quantity": quantity}, headers=headers)


class TestCartEndpoints:
    def test_empty_cart(self, client):
        response = client.get("/carts", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json() == {"id": None, "user_id": "cust-001", "items": [], "sub_total": 0.0}

    def test_add_then_read_with_prices(self, client, variant):
        response = _add(client, variant, 3)
        assert response.status_code == 201

        cart = client.get("/carts", headers=CUSTOMER).json()
        assert cart["items"][0]["id"] == response.json()["item_id"]
        assert cart["items"][0]["price"] == 20.0
        assert cart["items"][0]["line_total"] == 60.0
        assert cart["sub_total"] == 60.0

    def test_cart_price_matches_variant_lookup(self, client, variant):
        _add(client, variant)

        cart_price = client.get("/carts", headers=CUSTOMER).json()["items"][0]["price"]
        assert cart_price == client.get(f"/variants/{variant.id}").json()["price"]

    def test_duplicate_variant_is_400(self, client, variant):
        _add(client, variant)
        assert _add(client, variant).status_code == 400

    def test_update_returns_repriced_cart(self, client, variant):
        item_id = _add(client, variant).json()["item_id"]

        response = client.patch(f"/carts/items/{item_id}", json={"quantity": 2}, headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["sub_total"] == 40.0

    def test_someone_elses_item_is_403(self, client, variant):
        item_id = _add(client, variant).json()["item_id"]

        assert client.patch(f"/carts/items/{item_id}", json={"quantity": 2}, headers=OTHER).status_code == 403
        assert client.delete(f"/carts/items/{item_id}", headers=OTHER).status_code == 403

    def test_remove_and_clear(self, client, variant):
        item_id = _add(client, variant).json()["item_id"]

        assert client.delete(f"/carts/items/{item_id}", headers=CUSTOMER).status_code == 200
        assert client.get("/carts", headers=CUSTOMER).json()["items"] == []

        assert client.delete("/carts", headers=CUSTOMER).status_code == 200
        assert client.get("/carts", headers=CUSTOMER).json()["id"] is None

    def test_requires_identity(self, client):
        assert client.get("/carts").status_code == 401
