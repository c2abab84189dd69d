"""Tests for the Payment and Shipment aggregates."""

import pytest
from protean.exceptions import ValidationError
from storefront.payment.payment import Payment, PaymentStatus
from storefront.shipment.shipment import Shipment, ShipmentStatus


def _payment(**overrides):
    fields = {"order_id": "ord-001", "method": "VNPAY", "amount": 100.0}
    fields.update(overrides)
    payment = Payment.record(**fields)
    payment._events.clear()
    return payment


class TestPaymentRecord:
    def test_defaults_to_unpaid(self):
        payment = Payment.record(order_id="ord-001", method="COD", amount=100.0)

        assert payment.status == PaymentStatus.UNPAID.value
        assert payment.paid_at is None
        assert payment._events[0].__class__.__name__ == "PaymentRecorded"

    def test_recorded_as_paid_is_stamped(self):
        payment = Payment.record(order_id="ord-001", method="COD", amount=100.0, status="PAID")

        assert payment.is_paid
        assert payment.paid_at is not None

    def test_unknown_method_is_rejected(self):
        with pytest.raises(ValidationError):
            Payment.record(order_id="ord-001", method="BARTER", amount=100.0)


class TestPaymentRevise:
    def test_becoming_paid_is_reported(self):
        payment = _payment()

        assert payment.revise(status="PAID", transaction_id="txn-1") is True
        assert payment.paid_at is not None
        assert payment._events[0].__class__.__name__ == "PaymentSucceeded"

    def test_other_changes_are_not_reported_as_paid(self):
        payment = _payment()

        assert payment.revise(method="COD", amount=120.0) is False
        assert payment.method == "COD"
        assert payment.amount == 120.0

    def test_paid_payment_status_is_final(self):
        payment = _payment(status="PAID")
        with pytest.raises(ValidationError):
            payment.revise(status="REFUNDED")

    def test_failed_payment_can_be_retried(self):
        payment = _payment()
        payment.mark_failed("declined")

        assert payment.status == PaymentStatus.FAILED.value
        assert payment.revise(status="PAID") is True

    def test_mark_failed_leaves_paid_payment_alone(self):
        payment = _payment(status="PAID")
        payment.mark_failed("late decline")

        assert payment.is_paid
        assert payment._events == []

    def test_paid_payment_cannot_be_removed(self):
        with pytest.raises(ValidationError):
            _payment(status="PAID").assert_removable()
        _payment().assert_removable()


class TestShipment:
    def test_defaults_to_preparing(self):
        shipment = Shipment.record(order_id="ord-001", carrier="GHN")

        assert shipment.status == ShipmentStatus.PREPARING.value
        assert shipment.shipped_at is None

    def test_in_transit_is_stamped(self):
        shipment = Shipment.record(order_id="ord-001", status="IN_TRANSIT")
        assert shipment.shipped_at is not None

    def test_revise_reports_status_change(self):
        shipment = Shipment.record(order_id="ord-001")
        shipment._events.clear()

        assert shipment.revise(status="DELIVERED") is True
        assert shipment.delivered_at is not None
        assert shipment._events[0].new_status == "DELIVERED"

    def test_revise_without_status_change(self):
        shipment = Shipment.record(order_id="ord-001")
        shipment._events.clear()

        assert shipment.revise(tracking_no="GHN123") is False
        assert shipment._events == []
