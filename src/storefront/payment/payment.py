"""Payment aggregate: one per order.

State Machine:
    UNPAID → PAID | FAILED
    FAILED → UNPAID | PAID (retry)
    PAID is final: once money has been taken the status no longer changes
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront
from storefront.payment.events import PaymentFailed, PaymentRecorded, PaymentSucceeded


class PaymentMethod(Enum):
    CREDIT_CARD = "CREDIT_CARD"
    COD = "COD"
    BANK_TRANSFER = "BANK_TRANSFER"
    VNPAY = "VNPAY"


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


@storefront.aggregate
class Payment:
    order_id = Identifier(required=True)
    method = String(
        required=True,
        choices=PaymentMethod,
    )
    status = String(
        choices=PaymentStatus,
        default=PaymentStatus.UNPAID.value,
    )
    amount = Float(default=0.0, min_value=0.0)
    transaction_id = String(max_length=255)
    paid_at = DateTime()
    created_at = DateTime(default=lambda: datetime.now(UTC))
    updated_at = DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def record(cls, order_id, method, amount, status=None, transaction_id=None):
        payment = cls(
            order_id=order_id,
            method=method,
            status=status or PaymentStatus.UNPAID.value,
            amount=amount,
            transaction_id=transaction_id,
        )
        if payment.is_paid:
            payment.paid_at = datetime.now(UTC)

        payment.raise_(
            PaymentRecorded(
                payment_id=str(payment.id),
                order_id=str(order_id),
                method=payment.method,
                status=payment.status,
                amount=payment.amount,
            )
        )
        return payment

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID.value

    def revise(self, method=None, status=None, amount=None, transaction_id=None) -> bool:
        """Apply a partial update. Returns True when this update made the payment PAID."""
        was_paid = self.is_paid

        if status is not None and was_paid and status != PaymentStatus.PAID.value:
            raise ValidationError({"status": ["A paid payment cannot change status"]})

        if method is not None:
            self.method = method
        if amount is not None:
            self.amount = amount
        if transaction_id is not None:
            self.transaction_id = transaction_id
        if status is not None:
            self.status = status
        self.updated_at = datetime.now(UTC)

        if self.is_paid and not was_paid:
            self.paid_at = datetime.now(UTC)
            self.raise_(
                PaymentSucceeded(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    amount=self.amount,
                    transaction_id=self.transaction_id,
                    paid_at=self.paid_at,
                )
            )
            return True
        return False

    def mark_paid(self, transaction_id: str) -> None:
        """Record a successful gateway charge."""
        self.revise(status=PaymentStatus.PAID.value, transaction_id=transaction_id)

    def mark_failed(self, reason: str) -> None:
        if self.is_paid:
            return

        self.status = PaymentStatus.FAILED.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                reason=reason,
            )
        )

    def assert_removable(self) -> None:
        if self.is_paid:
            raise ValidationError({"payment": ["A paid payment cannot be deleted"]})


@storefront.repository(part_of=Payment)
class PaymentRepository:
    def find_by_order(self, order_id) -> Payment | None:
        results = self._dao.query.filter(order_id=str(order_id)).all().items
        return results[0] if results else None

    def find_for_orders(self, order_ids, status=None, method=None) -> list[Payment]:
        """Payments belonging to any of ``order_ids`` (None means every order)."""
        filters = {}
        if status:
            filters["status"] = status
        if method:
            filters["method"] = method
        if order_ids is not None:
            if not order_ids:
                return []
            filters["order_id__in"] = [str(order_id) for order_id in order_ids]

        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").all().items
