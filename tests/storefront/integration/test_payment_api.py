"""Integration tests for payment, shipment and VNPay callback endpoints."""

from urllib.parse import parse_qsl, urlsplit

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import ROUTERS, register_error_handlers
from storefront.config import VnPaySettings
from storefront.payment.gateway import VnPayGateway, set_gateway

CUSTOMER = {"X-User-Id": "cust-001", "X-User-Role": "CUSTOMER"}
OTHER = {"X-User-Id": "cust-002", "X-User-Role": "CUSTOMER"}
ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "ADMIN"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def gateway():
    gateway = VnPayGateway(
        VnPaySettings(tmn_code="SHOP01", hash_secret="test-secret", payment_url="https://sandbox.example/pay")
    )
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def order(client, address, variant):
    response = client.post(
        "/order",
        json={"address_id": address.id, "items": [{"variant_id": variant.id, "quantity": 1}]},
        headers=CUSTOMER,
    )
    return response.json()


def _record_payment(client, order, **fields):
    return client.post("/payment", json={"order_id": order["id"], "method": "VNPAY", **fields}, headers=CUSTOMER)


class TestPaymentEndpoints:
    def test_record_and_read(self, client, order):
        response = _record_payment(client, order)

        assert response.status_code == 201
        payment = response.json()
        assert payment["status"] == "UNPAID"
        assert payment["amount"] == order["total_amount"]
        assert client.get(f"/payment/{payment['id']}", headers=CUSTOMER).status_code == 200
        assert client.get(f"/payment/{payment['id']}", headers=OTHER).status_code == 403

    def test_duplicate_payment_is_400(self, client, order):
        _record_payment(client, order)
        response = _record_payment(client, order, method="COD")

        assert response.status_code == 400
        assert response.json() == {"error": {"payment": ["Order already has a payment"]}}

    def test_paid_update_confirms_order(self, client, order):
        payment_id = _record_payment(client, order).json()["id"]

        response = client.patch(f"/payment/{payment_id}", json={"status": "PAID"}, headers=CUSTOMER)

        assert response.json()["status"] == "PAID"
        assert client.get(f"/order/{order['id']}", headers=CUSTOMER).json()["status"] == "CONFIRMED"

    def test_listing_is_scoped(self, client, order):
        _record_payment(client, order)

        assert len(client.get("/payment", headers=CUSTOMER).json()) == 1
        assert client.get("/payment", headers=OTHER).json() == []


class TestVnPayEndpoints:
    def test_checkout_url_is_signed(self, client, order, gateway):
        payment = _record_payment(client, order).json()

        response = client.post(f"/payment/{payment['id']}/vnpay-url", headers=CUSTOMER)

        assert response.status_code == 200
        params = dict(parse_qsl(urlsplit(response.json()["url"]).query))
        assert params["vnp_TxnRef"] == payment["id"]
        assert params["vnp_Amount"] == str(int(round(payment["amount"] * 100)))
        assert gateway.verify(params)

    def test_checkout_url_for_paid_payment_is_400(self, client, order, gateway):
        payment = _record_payment(client, order, status="PAID").json()
        assert client.post(f"/payment/{payment['id']}/vnpay-url", headers=CUSTOMER).status_code == 400

    def _signed(self, gateway, payment, **overrides):
        params = {
            "vnp_TxnRef": payment["id"],
            "vnp_Amount": str(int(round(payment["amount"] * 100))),
            "vnp_ResponseCode": "00",
            "vnp_TransactionStatus": "00",
            "vnp_TransactionNo": "14123456",
            **overrides,
        }
        params["vnp_SecureHash"] = gateway.sign(params)
        return params

    def test_ipn_confirms_payment_once(self, client, order, gateway):
        payment = _record_payment(client, order).json()
        params = self._signed(gateway, payment)

        first = client.get("/payment/vnpay-ipn", params=params)
        second = client.get("/payment/vnpay-ipn", params=params)

        assert first.json() == {"RspCode": "00", "Message": "Confirm Success"}
        assert second.json()["RspCode"] == "00"
        assert client.get(f"/payment/{payment['id']}", headers=CUSTOMER).json()["status"] == "PAID"
        assert client.get(f"/order/{order['id']}", headers=CUSTOMER).json()["status"] == "CONFIRMED"

    def test_ipn_with_bad_signature(self, client, order, gateway):
        payment = _record_payment(client, order).json()
        params = self._signed(gateway, payment)
        params["vnp_SecureHash"] = "0" * 128

        assert client.get("/payment/vnpay-ipn", params=params).json()["RspCode"] == "97"

    def test_return_reports_without_changing_state(self, client, order, gateway):
        payment = _record_payment(client, order).json()

        response = client.get("/payment/vnpay-return", params=self._signed(gateway, payment))

        assert response.json()["success"] is True
        assert response.json()["payment_id"] == payment["id"]
        assert client.get(f"/payment/{payment['id']}", headers=CUSTOMER).json()["status"] == "UNPAID"

    def test_return_with_bad_signature(self, client, order, gateway):
        payment = _record_payment(client, order).json()
        params = self._signed(gateway, payment)
        params["vnp_Amount"] = "1"

        body = client.get("/payment/vnpay-return", params=params).json()
        assert body["success"] is False
        assert body["code"] == "97"


class TestShipmentEndpoints:
    def test_delivered_shipment_freezes_order(self, client, order):
        shipment = client.post(
            "/shipment",
            json={"order_id": order["id"], "carrier": "GHN", "status": "DELIVERED"},
            headers=ADMIN,
        ).json()

        assert client.get(f"/order/{order['id']}", headers=CUSTOMER).json()["status"] == "DELIVERED"
        response = client.patch(f"/shipment/{shipment['id']}", json={"status": "RETURNED"}, headers=ADMIN)
        assert response.status_code == 400
        assert _record_payment(client, order).status_code == 400

    def test_other_customer_cannot_ship(self, client, order):
        response = client.post("/shipment", json={"order_id": order["id"]}, headers=OTHER)
        assert response.status_code == 403
