"""Application tests for UpdateOrder and DeleteOrder."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.config import PricingPolicy, set_pricing_policy
from storefront.customer.address import Address
from storefront.order.modification import DeleteOrder, UpdateOrder
from storefront.order.order import Order, OrderItem, OrderStatus
from storefront.order.placement import PlaceOrder
from storefront.order.queries import payment_for_order, shipment_for_order
from storefront.order.totals import compose_total
from storefront.shared.exceptions import AccessDenied
from storefront.voucher.voucher import Voucher

CUSTOMER = {"actor_id": "cust-001", "actor_role": "CUSTOMER"}
ADMIN = {"actor_id": "admin-001", "actor_role": "ADMIN"}


@pytest.fixture
def order_id(address, variant):
    return current_domain.process(
        PlaceOrder(
            **CUSTOMER,
            address_id=address.id,
            items=json.dumps([{"variant_id": variant.id, "quantity": 1}]),
        ),
        asynchronous=False,
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _update(order_id, actor=None, **fields):
    current_domain.process(UpdateOrder(**(actor or CUSTOMER), order_id=order_id, **fields), asynchronous=False)
    return _order(order_id)


def _assert_consistent(order):
    assert order.total_amount == compose_total(
        order.sub_total, order.shipping_fee, order.tax_amount, order.discount_amount
    )


class TestAddress:
    def test_move_to_another_own_address(self, order_id):
        second = Address(user_id="cust-001", recipient="Mai Tran", line1="1 Hang Bai", city="Hanoi")
        current_domain.repository_for(Address).add(second)

        assert _update(order_id, address_id=second.id).address_id == second.id

    def test_address_of_another_user_is_rejected(self, order_id):
        foreign = Address(user_id="cust-002", recipient="Binh", line1="2 Le Loi", city="Hue")
        current_domain.repository_for(Address).add(foreign)

        with pytest.raises(AccessDenied):
            _update(order_id, address_id=foreign.id)

    def test_unknown_address(self, order_id):
        with pytest.raises(ObjectNotFoundError):
            _update(order_id, address_id="no-such-address")


class TestItemsReplacement:
    def test_items_are_replaced_and_repriced(self, order_id, variant):
        order = _update(order_id, items=json.dumps([{"variant_id": variant.id, "quantity": 3}]))

        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert order.sub_total == 60.0
        _assert_consistent(order)

    def test_empty_replacement_is_rejected(self, order_id):
        with pytest.raises(ValidationError):
            _update(order_id, items=json.dumps([]))
        assert len(_order(order_id).items) == 1


class TestVoucher:
    def test_apply_voucher(self, order_id, sale10):
        order = _update(order_id, voucher_code="SALE10")

        assert order.voucher_id == sale10.id
        assert order.discount_amount == pytest.approx(5002.0)
        _assert_consistent(order)

    def test_clear_voucher(self, order_id, sale10):
        _update(order_id, voucher_code="SALE10")
        order = _update(order_id, clear_voucher=True)

        assert order.voucher_id is None
        assert order.discount_amount == 0.0
        assert order.total_amount == 53021.0

    def test_unrelated_update_keeps_frozen_discount(self, order_id, sale10):
        _update(order_id, voucher_code="SALE10")
        sale10.is_active = False
        current_domain.repository_for(Voucher).add(sale10)

        order = _update(order_id, status="CANCELLED")

        assert order.voucher_id == sale10.id
        assert order.discount_amount == pytest.approx(5002.0)

    def test_item_change_revalidates_existing_voucher(self, order_id, variant, sale10):
        _update(order_id, voucher_code="SALE10")
        sale10.is_active = False
        current_domain.repository_for(Voucher).add(sale10)

        with pytest.raises(ValidationError):
            _update(order_id, items=json.dumps([{"variant_id": variant.id, "quantity": 2}]))

    def test_inactive_voucher_cannot_be_applied(self, order_id, sale10):
        sale10.is_active = False
        current_domain.repository_for(Voucher).add(sale10)

        with pytest.raises(ValidationError):
            _update(order_id, voucher_code="SALE10")


class TestFrozenPricing:
    def test_voucher_cannot_be_applied_to_delivered_order(self, order_id, sale10):
        _update(order_id, shipment=json.dumps({"carrier": "GHN", "status": "DELIVERED"}))

        with pytest.raises(ValidationError):
            _update(order_id, voucher_code="SALE10")

        order = _order(order_id)
        assert order.status == OrderStatus.DELIVERED.value
        assert order.voucher_id is None
        assert order.total_amount == 53021.0

    def test_voucher_cannot_be_cleared_from_cancelled_order(self, order_id, sale10):
        _update(order_id, voucher_code="SALE10")
        _update(order_id, status="CANCELLED")

        with pytest.raises(ValidationError):
            _update(order_id, clear_voucher=True)

        order = _order(order_id)
        assert order.voucher_id == sale10.id
        assert order.discount_amount == pytest.approx(5002.0)

    def test_paid_order_keeps_the_total_it_was_paid_for(self, order_id, variant, sale10):
        _update(order_id, payment=json.dumps({"method": "COD", "status": "PAID"}))

        with pytest.raises(ValidationError):
            _update(order_id, items=json.dumps([{"variant_id": variant.id, "quantity": 3}]))
        with pytest.raises(ValidationError):
            _update(order_id, voucher_code="SALE10")

        order = _order(order_id)
        assert order.status == OrderStatus.CONFIRMED.value
        assert order.total_amount == 53021.0
        assert payment_for_order(order_id).amount == order.total_amount

    def test_status_only_update_does_not_reprice(self, order_id):
        set_pricing_policy(PricingPolicy(flat_shipping_fee=0.0, tax_rate=0.0))

        order = _update(order_id, actor=ADMIN, status="CONFIRMED")

        assert order.shipping_fee == 50000.0
        assert order.total_amount == 53021.0


class TestStatus:
    def test_customer_cancels(self, order_id):
        assert _update(order_id, status="CANCELLED").status == OrderStatus.CANCELLED.value

    def test_customer_cannot_confirm(self, order_id):
        with pytest.raises(AccessDenied):
            _update(order_id, status="CONFIRMED")
        assert _order(order_id).status == OrderStatus.PENDING.value

    def test_admin_walks_the_lifecycle(self, order_id):
        for status in ("CONFIRMED", "SHIPPED", "DELIVERED"):
            order = _update(order_id, actor=ADMIN, status=status)
        assert order.status == OrderStatus.DELIVERED.value

    def test_admin_cannot_reopen_cancelled_order(self, order_id):
        _update(order_id, status="CANCELLED")
        with pytest.raises(ValidationError):
            _update(order_id, actor=ADMIN, status="PENDING")

    def test_other_customer_is_denied(self, order_id):
        with pytest.raises(AccessDenied):
            _update(order_id, actor={"actor_id": "cust-002", "actor_role": "CUSTOMER"}, status="CANCELLED")


class TestNestedFulfilment:
    def test_payment_is_created_then_updated(self, order_id):
        _update(order_id, payment=json.dumps({"method": "BANK_TRANSFER"}))
        order = _update(order_id, payment=json.dumps({"status": "PAID", "transaction_id": "BT-1"}))

        payment = payment_for_order(order_id)
        assert payment.method == "BANK_TRANSFER"
        assert payment.is_paid
        assert order.status == OrderStatus.CONFIRMED.value

    def test_shipment_delivered_through_order_update(self, order_id):
        order = _update(order_id, shipment=json.dumps({"carrier": "GHN", "status": "DELIVERED"}))

        assert order.status == OrderStatus.DELIVERED.value
        assert shipment_for_order(order_id).delivered_at is not None

    def test_malformed_payment_payload(self, order_id):
        with pytest.raises(ValidationError):
            _update(order_id, payment="[1, 2]")


class TestDeleteOrder:
    def test_delete_removes_order_items_payment_and_shipment(self, order_id):
        _update(
            order_id,
            payment=json.dumps({"method": "COD"}),
            shipment=json.dumps({"carrier": "GHN"}),
        )
        item_id = _order(order_id).items[0].id

        current_domain.process(DeleteOrder(**CUSTOMER, order_id=order_id), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            _order(order_id)
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(OrderItem)._dao.get(item_id)
        assert payment_for_order(order_id) is None
        assert shipment_for_order(order_id) is None

    def test_other_customer_cannot_delete(self, order_id):
        with pytest.raises(AccessDenied):
            current_domain.process(
                DeleteOrder(actor_id="cust-002", actor_role="CUSTOMER", order_id=order_id),
                asynchronous=False,
            )

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(DeleteOrder(**CUSTOMER, order_id="missing"), asynchronous=False)
