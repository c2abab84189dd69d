"""Gateway callbacks: the server-to-server payment notification (IPN).

The gateway expects a response code rather than an HTTP error, so the handler
answers every outcome with one of the codes below instead of raising:

    00  processed (including a replay of an already recorded transaction)
    01  unknown payment
    02  payment already confirmed by a different transaction, or its order is
        delivered or cancelled
    04  amount does not match the payment
    97  invalid signature
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.payment.gateway import get_gateway
from storefront.payment.payment import Payment
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _reply(code: str, message: str) -> dict:
    return {"RspCode": code, "Message": message}


@storefront.command(part_of="Payment")
class ProcessGatewayCallback:
    """Apply a signed payment notification sent by the gateway."""

    params = Text(required=True)  # JSON object of the callback's query parameters


@storefront.command_handler(part_of=Payment)
class GatewayCallbackHandler:
    @handle(ProcessGatewayCallback)
    def process_callback(self, command):
        params = json.loads(command.params)
        gateway = get_gateway()

        if not gateway.verify(params):
            logger.warning("gateway_callback_bad_signature", txn_ref=params.get("vnp_TxnRef"))
            return _reply("97", "Invalid signature")

        outcome = gateway.read_outcome(params)
        if not outcome.payment_id:
            return _reply("01", "Order not found")

        repo = current_domain.repository_for(Payment)
        try:
            payment = repo.get(outcome.payment_id)
        except ObjectNotFoundError:
            logger.warning("gateway_callback_unknown_payment", payment_id=outcome.payment_id)
            return _reply("01", "Order not found")

        if outcome.amount is None or round(outcome.amount * 100) != round((payment.amount or 0.0) * 100):
            logger.warning(
                "gateway_callback_amount_mismatch",
                payment_id=str(payment.id),
                expected=payment.amount,
                received=outcome.amount,
            )
            return _reply("04", "Invalid amount")

        if payment.is_paid:
            if outcome.transaction_id and payment.transaction_id == outcome.transaction_id:
                return _reply("00", "Confirm Success")
            return _reply("02", "Order already confirmed")

        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(payment.order_id)
        except ObjectNotFoundError:
            logger.warning("gateway_callback_unknown_order", payment_id=str(payment.id), order_id=payment.order_id)
            return _reply("01", "Order not found")

        if order.is_terminal:
            logger.warning(
                "gateway_callback_closed_order",
                payment_id=str(payment.id),
                order_id=str(order.id),
                order_status=order.status,
            )
            return _reply("02", "Order is closed")

        if outcome.success:
            payment.mark_paid(outcome.transaction_id)
            order.confirm_payment()
            repo.add(payment)
            order_repo.add(order)
            logger.info("payment_confirmed_by_gateway", payment_id=str(payment.id), order_id=str(order.id))
        else:
            payment.mark_failed(f"Gateway response code {outcome.response_code}")
            repo.add(payment)
            logger.info("payment_failed_by_gateway", payment_id=str(payment.id), code=outcome.response_code)

        return _reply("00", "Confirm Success")
