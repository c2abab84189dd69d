"""Tests for the VNPay adapter's signing and callback parsing."""

from datetime import UTC, datetime
from types import SimpleNamespace
from urllib.parse import parse_qsl, urlsplit

import pytest
from storefront.config import VnPaySettings
from storefront.payment.gateway import VnPayGateway, get_gateway, reset_gateway, set_gateway

SETTINGS = VnPaySettings(
    tmn_code="SHOP01",
    hash_secret="test-secret",
    payment_url="https://sandbox.example/pay",
    return_url="https://shop.example/payment/vnpay-return",
)


@pytest.fixture
def gateway():
    return VnPayGateway(SETTINGS)


def _callback(gateway, **overrides):
    params = {
        "vnp_TxnRef": "pay-001",
        "vnp_Amount": "15900000",
        "vnp_ResponseCode": "00",
        "vnp_TransactionStatus": "00",
        "vnp_TransactionNo": "14123456",
        "vnp_TmnCode": "SHOP01",
    }
    params.update(overrides)
    params["vnp_SecureHash"] = gateway.sign(params)
    return params


class TestSignature:
    def test_signed_params_verify(self, gateway):
        assert gateway.verify(_callback(gateway))

    def test_uppercase_hash_verifies(self, gateway):
        params = _callback(gateway)
        params["vnp_SecureHash"] = params["vnp_SecureHash"].upper()
        assert gateway.verify(params)

    def test_tampered_amount_fails(self, gateway):
        params = _callback(gateway)
        params["vnp_Amount"] = "100"
        assert not gateway.verify(params)

    def test_missing_hash_fails(self, gateway):
        params = _callback(gateway)
        del params["vnp_SecureHash"]
        assert not gateway.verify(params)

    def test_other_secret_fails(self, gateway):
        other = VnPayGateway(VnPaySettings(hash_secret="another-secret"))
        assert not gateway.verify(_callback(other))

    def test_hash_type_and_foreign_params_are_not_signed(self, gateway):
        params = _callback(gateway)
        params["vnp_SecureHashType"] = "HmacSHA512"
        params["utm_source"] = "newsletter"
        assert gateway.verify(params)

    def test_signature_is_sha512_hex(self, gateway):
        assert len(gateway.sign({"vnp_Amount": "100"})) == 128


class TestCheckoutUrl:
    def test_url_carries_signed_checkout_request(self, gateway):
        payment = SimpleNamespace(id="pay-001", order_id="ord-001", amount=159000.0)
        url = gateway.build_checkout_url(payment, "10.0.0.7", now=datetime(2026, 3, 1, 5, 0, tzinfo=UTC))

        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query))

        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == SETTINGS.payment_url
        assert params["vnp_Amount"] == "15900000"
        assert params["vnp_TxnRef"] == "pay-001"
        assert params["vnp_TmnCode"] == "SHOP01"
        assert params["vnp_IpAddr"] == "10.0.0.7"
        assert params["vnp_ReturnUrl"] == SETTINGS.return_url
        # 05:00 UTC is noon in Vietnam; the checkout expires fifteen minutes later
        assert params["vnp_CreateDate"] == "20260301120000"
        assert params["vnp_ExpireDate"] == "20260301121500"
        assert gateway.verify(params)


class TestReadOutcome:
    def test_successful_payment(self, gateway):
        outcome = gateway.read_outcome(_callback(gateway))

        assert outcome.payment_id == "pay-001"
        assert outcome.amount == 159000.0
        assert outcome.transaction_id == "14123456"
        assert outcome.success is True
        assert outcome.response_code == "00"

    def test_declined_payment(self, gateway):
        outcome = gateway.read_outcome(_callback(gateway, vnp_ResponseCode="24", vnp_TransactionStatus="02"))

        assert outcome.success is False
        assert outcome.response_code == "24"

    def test_success_needs_transaction_status_too(self, gateway):
        outcome = gateway.read_outcome(_callback(gateway, vnp_TransactionStatus="01"))
        assert outcome.success is False

    def test_unreadable_amount(self, gateway):
        assert gateway.read_outcome(_callback(gateway, vnp_Amount="abc")).amount is None


class TestGatewayFactory:
    def test_default_gateway_is_vnpay(self):
        reset_gateway()
        assert isinstance(get_gateway(), VnPayGateway)

    def test_override(self, gateway):
        set_gateway(gateway)
        assert get_gateway() is gateway
