"""Payment recording: commands, handler, and the helpers order commands reuse.

Every change goes through the order's fulfilment guard, and a payment that
becomes PAID confirms its order in the same unit of work.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.payment.payment import Payment
from storefront.shared.authorization import Actor, Authorizer
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def attach_payment(order: Order, method, status=None, amount=None, transaction_id=None) -> Payment:
    """Create the one payment an order may have. The caller persists ``order``."""
    order.assert_accepts_fulfilment_changes()

    repo = current_domain.repository_for(Payment)
    if repo.find_by_order(order.id) is not None:
        raise ValidationError({"payment": ["Order already has a payment"]})

    payment = Payment.record(
        order_id=order.id,
        method=method,
        status=status,
        amount=order.total_amount if amount is None else amount,
        transaction_id=transaction_id,
    )
    if payment.is_paid:
        order.confirm_payment()

    repo.add(payment)
    logger.info("payment_recorded", payment_id=str(payment.id), order_id=str(order.id), status=payment.status)
    return payment


def revise_payment(order: Order, payment: Payment, method=None, status=None, amount=None, transaction_id=None):
    """Update an order's payment. The caller persists ``order``."""
    order.assert_accepts_fulfilment_changes()

    became_paid = payment.revise(method=method, status=status, amount=amount, transaction_id=transaction_id)
    if became_paid:
        order.confirm_payment()

    current_domain.repository_for(Payment).add(payment)
    return payment


def upsert_payment(order: Order, data: dict) -> Payment:
    """Create the order's payment, or update it when one exists."""
    existing = current_domain.repository_for(Payment).find_by_order(order.id)
    fields = {key: data.get(key) for key in ("method", "status", "amount", "transaction_id")}
    if existing is not None:
        return revise_payment(order, existing, **fields)

    if not fields["method"]:
        raise ValidationError({"payment": ["Payment method is required"]})
    return attach_payment(order, **fields)


@storefront.command(part_of="Payment")
class RecordPayment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    method = String(required=True, max_length=20)
    status = String(max_length=20)
    amount = Float(min_value=0.0)
    transaction_id = String(max_length=255)


@storefront.command(part_of="Payment")
class UpdatePayment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    payment_id = Identifier(required=True)
    method = String(max_length=20)
    status = String(max_length=20)
    amount = Float(min_value=0.0)
    transaction_id = String(max_length=255)


@storefront.command(part_of="Payment")
class DeletePayment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    payment_id = Identifier(required=True)


@storefront.command_handler(part_of=Payment)
class PaymentCommandHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        payment = attach_payment(
            order,
            method=command.method,
            status=command.status,
            amount=command.amount,
            transaction_id=command.transaction_id,
        )
        order_repo.add(order)
        return str(payment.id)

    @handle(UpdatePayment)
    def update_payment(self, command):
        payment = current_domain.repository_for(Payment).get(command.payment_id)
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(payment.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        revise_payment(
            order,
            payment,
            method=command.method,
            status=command.status,
            amount=command.amount,
            transaction_id=command.transaction_id,
        )
        order_repo.add(order)

    @handle(DeletePayment)
    def delete_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.payment_id)
        order = current_domain.repository_for(Order).get(payment.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        order.assert_accepts_fulfilment_changes()
        payment.assert_removable()
        repo._dao.delete(payment)
        logger.info("payment_deleted", payment_id=str(payment.id), order_id=str(order.id))
