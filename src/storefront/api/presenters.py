"""Aggregate → response schema conversion."""

from storefront.api.schemas import (
    CartItemResponse,
    CartResponse,
    OrderItemResponse,
    OrderResponse,
    PaymentResponse,
    ShipmentResponse,
    VoucherResponse,
)
from storefront.order.queries import payment_for_order, shipment_for_order


def _optional_str(value):
    return str(value) if value is not None else None


def present_item(order_id, item) -> OrderItemResponse:
    return OrderItemResponse(
        id=str(item.id),
        order_id=str(order_id),
        variant_id=str(item.variant_id),
        quantity=item.quantity,
        price=item.price,
    )


def present_payment(payment) -> PaymentResponse:
    return PaymentResponse(
        id=str(payment.id),
        order_id=str(payment.order_id),
        method=payment.method,
        status=payment.status,
        amount=payment.amount or 0.0,
        transaction_id=payment.transaction_id,
        paid_at=payment.paid_at,
    )


def present_shipment(shipment) -> ShipmentResponse:
    return ShipmentResponse(
        id=str(shipment.id),
        order_id=str(shipment.order_id),
        carrier=shipment.carrier,
        tracking_no=shipment.tracking_no,
        status=shipment.status,
        shipped_at=shipment.shipped_at,
        delivered_at=shipment.delivered_at,
    )


def present_order(order) -> OrderResponse:
    payment = payment_for_order(order.id)
    shipment = shipment_for_order(order.id)
    return OrderResponse(
        id=str(order.id),
        user_id=str(order.user_id),
        address_id=str(order.address_id),
        status=order.status,
        sub_total=order.sub_total,
        shipping_fee=order.shipping_fee,
        tax_amount=order.tax_amount,
        discount_amount=order.discount_amount,
        total_amount=order.total_amount,
        currency=order.currency,
        voucher_id=_optional_str(order.voucher_id),
        items=[present_item(order.id, item) for item in order.items],
        payment=present_payment(payment) if payment else None,
        shipment=present_shipment(shipment) if shipment else None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def present_voucher(voucher) -> VoucherResponse:
    return VoucherResponse(
        id=str(voucher.id),
        code=voucher.code,
        discount=voucher.discount,
        expires_at=voucher.expires_at,
        is_active=bool(voucher.is_active),
    )


def present_cart(cart) -> CartResponse:
    return CartResponse(
        id=cart.cart_id,
        user_id=cart.user_id,
        items=[
            CartItemResponse(
                id=line.item_id,
                variant_id=line.variant_id,
                quantity=line.quantity,
                note=line.note,
                price=line.unit_price,
                line_total=line.line_total,
                stock=line.stock,
            )
            for line in cart.lines
        ],
        sub_total=cart.sub_total,
    )
