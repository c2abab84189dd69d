"""FastAPI routes for payments and the VNPay callbacks."""

import json

from fastapi import APIRouter, Depends, Request
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.presenters import present_payment
from storefront.api.schemas import (
    CheckoutUrlResponse,
    GatewayAckResponse,
    GatewayReturnResponse,
    PaymentResponse,
    RecordPaymentRequest,
    StatusResponse,
    UpdatePaymentRequest,
)
from storefront.order.queries import get_order_for, get_payment_for, list_payments_for
from storefront.payment.callbacks import ProcessGatewayCallback
from storefront.payment.gateway import get_gateway
from storefront.payment.recording import DeletePayment, RecordPayment, UpdatePayment
from storefront.shared.authorization import Actor
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

payment_router = APIRouter(prefix="/payment", tags=["payments"])


# ---------------------------------------------------------------------------
# Gateway callbacks (unauthenticated, signature-verified)
# ---------------------------------------------------------------------------
@payment_router.get("/vnpay-return", response_model=GatewayReturnResponse)
async def vnpay_return(request: Request) -> GatewayReturnResponse:
    """Browser redirect after checkout. Reports the outcome; state changes arrive via IPN."""
    params = dict(request.query_params)
    gateway = get_gateway()
    if not gateway.verify(params):
        return GatewayReturnResponse(success=False, code="97", message="Invalid signature")

    outcome = gateway.read_outcome(params)
    return GatewayReturnResponse(
        success=outcome.success,
        code=outcome.response_code,
        payment_id=outcome.payment_id,
        message="Payment successful" if outcome.success else "Payment failed",
    )


@payment_router.get("/vnpay-ipn", response_model=GatewayAckResponse)
async def vnpay_ipn(request: Request) -> GatewayAckResponse:
    """Server-to-server payment notification. Always answers with a gateway response code."""
    params = dict(request.query_params)
    try:
        reply = current_domain.process(ProcessGatewayCallback(params=json.dumps(params)), asynchronous=False)
    except Exception:
        logger.exception("gateway_callback_failed", txn_ref=params.get("vnp_TxnRef"))
        reply = {"RspCode": "99", "Message": "Unknown error"}
    return GatewayAckResponse(**reply)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
@payment_router.post("", status_code=201, response_model=PaymentResponse)
async def record_payment(body: RecordPaymentRequest, actor: Actor = Depends(current_actor)) -> PaymentResponse:
    """Attach the payment for an order. An order has at most one."""
    command = RecordPayment(
        **actor_fields(actor),
        order_id=body.order_id,
        method=body.method,
        status=body.status,
        amount=body.amount,
        transaction_id=body.transaction_id,
    )
    payment_id = current_domain.process(command, asynchronous=False)
    return present_payment(get_payment_for(actor, payment_id))


@payment_router.get("", response_model=list[PaymentResponse])
async def list_payments(
    status: str | None = None,
    method: str | None = None,
    actor: Actor = Depends(current_actor),
) -> list[PaymentResponse]:
    return [present_payment(p) for p in list_payments_for(actor, status=status, method=method)]


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str, actor: Actor = Depends(current_actor)) -> PaymentResponse:
    return present_payment(get_payment_for(actor, payment_id))


@payment_router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    body: UpdatePaymentRequest,
    actor: Actor = Depends(current_actor),
) -> PaymentResponse:
    """Update a payment. Moving it to PAID confirms a pending order."""
    command = UpdatePayment(
        **actor_fields(actor),
        payment_id=payment_id,
        method=body.method,
        status=body.status,
        amount=body.amount,
        transaction_id=body.transaction_id,
    )
    current_domain.process(command, asynchronous=False)
    return present_payment(get_payment_for(actor, payment_id))


@payment_router.delete("/{payment_id}", response_model=StatusResponse)
async def delete_payment(payment_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeletePayment(**actor_fields(actor), payment_id=payment_id), asynchronous=False)
    return StatusResponse(status="deleted")


@payment_router.post("/{payment_id}/vnpay-url", response_model=CheckoutUrlResponse)
async def create_vnpay_url(
    payment_id: str,
    request: Request,
    actor: Actor = Depends(current_actor),
) -> CheckoutUrlResponse:
    """Build the VNPay checkout URL for an unpaid payment."""
    payment = get_payment_for(actor, payment_id)
    get_order_for(actor, payment.order_id).assert_accepts_fulfilment_changes()
    if payment.is_paid:
        raise ValidationError({"payment": ["Payment has already been paid"]})

    client_ip = request.client.host if request.client else "127.0.0.1"
    return CheckoutUrlResponse(url=get_gateway().build_checkout_url(payment, client_ip))
