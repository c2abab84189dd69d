"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer checked out a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    voucher_id = Identifier()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderTotalsRecalculated:
    """The order's monetary fields were recomputed from its items."""

    __version__ = 1

    order_id = Identifier(required=True)
    sub_total = Float(required=True)
    shipping_fee = Float(required=True)
    tax_amount = Float(required=True)
    discount_amount = Float(required=True)
    total_amount = Float(required=True)
    voucher_id = Identifier()


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new lifecycle status.

    ``reason`` names what drove the change: payment, shipment, customer or admin.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    reason = String(required=True)
    changed_at = DateTime(required=True)

