"""Integration tests for catalogue, address and voucher endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import ROUTERS, register_error_handlers

CUSTOMER = {"X-User-Id": "cust-001", "X-User-Role": "CUSTOMER"}
ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "ADMIN"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


def _tomorrow():
    return (datetime.now(UTC) + timedelta(days=1)).isoformat()


class TestCatalogueEndpoints:
    def test_admin_builds_catalogue_and_reads_price(self, client):
        material_id = client.post("/materials", json={"name": "Resin", "price_factor": 1.5}, headers=ADMIN).json()[
            "material_id"
        ]
        product_id = client.post(
            "/products",
            json={"name": "Chess Set", "base_price": 100.0, "print_file_volume": 400.0},
            headers=ADMIN,
        ).json()["product_id"]
        response = client.post(
            "/variants",
            json={"product_id": product_id, "material_id": material_id, "name": "Travel", "stock": 2, "volume": 200.0},
            headers=ADMIN,
        )
        assert response.status_code == 201

        variant = client.get(f"/variants/{response.json()['variant_id']}").json()
        assert variant["price"] == 75.0
        assert variant["stock"] == 2

    def test_customer_cannot_create_material(self, client):
        assert client.post("/materials", json={"name": "PLA"}, headers=CUSTOMER).status_code == 403

    def test_stock_adjustment(self, client, variant):
        response = client.patch(f"/variants/{variant.id}/stock", json={"delta": -10}, headers=ADMIN)
        assert response.status_code == 200
        assert client.get(f"/variants/{variant.id}").json()["stock"] == 0

        assert client.patch(f"/variants/{variant.id}/stock", json={"delta": -1}, headers=ADMIN).status_code == 400

    def test_unknown_variant_is_404(self, client):
        assert client.get("/variants/missing").status_code == 404

    def test_register_address(self, client):
        response = client.post(
            "/addresses",
            json={"recipient": "Mai Tran", "line1": "12 Ly Thuong Kiet", "city": "Hanoi"},
            headers=CUSTOMER,
        )
        assert response.status_code == 201
        assert response.json()["address_id"]


class TestVoucherEndpoints:
    def test_issue_and_list(self, client):
        response = client.post(
            "/vouchers",
            json={"code": "SALE10", "discount": 0.1, "expires_at": _tomorrow()},
            headers=ADMIN,
        )
        assert response.status_code == 201

        listed = client.get("/vouchers").json()
        assert [v["code"] for v in listed] == ["SALE10"]

    def test_customer_cannot_issue(self, client):
        response = client.post(
            "/vouchers",
            json={"code": "SALE10", "discount": 0.1, "expires_at": _tomorrow()},
            headers=CUSTOMER,
        )
        assert response.status_code == 403

    def test_invalid_discount_is_400(self, client):
        response = client.post(
            "/vouchers",
            json={"code": "HUGE", "discount": 5, "expires_at": _tomorrow()},
            headers=ADMIN,
        )
        assert response.status_code == 400
        assert "discount" in response.json()["error"]

    def test_deactivated_vouchers_are_listed_separately(self, client):
        voucher_id = client.post(
            "/vouchers",
            json={"code": "SALE10", "discount": 0.1, "expires_at": _tomorrow()},
            headers=ADMIN,
        ).json()["id"]
        client.patch(f"/vouchers/{voucher_id}", json={"is_active": False}, headers=ADMIN)

        assert client.get("/vouchers").json() == []
        assert [v["id"] for v in client.get("/vouchers", params={"is_active": "false"}).json()] == [voucher_id]

    def test_delete(self, client):
        voucher_id = client.post(
            "/vouchers",
            json={"code": "SALE10", "discount": 0.1, "expires_at": _tomorrow()},
            headers=ADMIN,
        ).json()["id"]

        assert client.delete(f"/vouchers/{voucher_id}", headers=ADMIN).status_code == 200
        assert client.get(f"/vouchers/{voucher_id}").status_code == 404
