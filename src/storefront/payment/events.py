"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Payment")
class PaymentRecorded:
    """A payment record was attached to an order."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    method = String(required=True)
    status = String(required=True)
    amount = Float(required=True)


@storefront.event(part_of="Payment")
class PaymentSucceeded:
    """Money for the order was received."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    transaction_id = String()
    paid_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentFailed:
    """The gateway reported that the charge did not go through."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True)
