"""Read side for orders, items, payments and shipments.

Reads go straight to the aggregates' repositories; every lookup applies the
same ownership rules as the commands.
"""

from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderItem
from storefront.payment.payment import Payment
from storefront.shared.authorization import Actor, Authorizer
from storefront.shipment.shipment import Shipment


def get_order_for(actor: Actor, order_id) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    Authorizer.assert_can_access_order(actor, order)
    return order


def list_orders_for(actor: Actor, user_id=None, status=None) -> list[Order]:
    scoped_user = Authorizer.scope_user_id(actor, user_id)
    return current_domain.repository_for(Order).find_for(user_id=scoped_user, status=status)


def list_items_for(actor: Actor, order_id) -> list[OrderItem]:
    return list(get_order_for(actor, order_id).items)


def get_item_for(actor: Actor, item_id) -> tuple[Order, OrderItem]:
    order = current_domain.repository_for(Order).get_by_item(item_id)
    Authorizer.assert_can_access_order(actor, order)
    return order, order.find_item(item_id)


def _visible_order_ids(actor: Actor) -> list[str] | None:
    """Order ids the actor may see; None when unrestricted."""
    scoped_user = Authorizer.scope_user_id(actor)
    if scoped_user is None:
        return None
    return [str(order.id) for order in current_domain.repository_for(Order).find_for(user_id=scoped_user)]


def payment_for_order(order_id) -> Payment | None:
    return current_domain.repository_for(Payment).find_by_order(order_id)


def shipment_for_order(order_id) -> Shipment | None:
    return current_domain.repository_for(Shipment).find_by_order(order_id)


def get_payment_for(actor: Actor, payment_id) -> Payment:
    payment = current_domain.repository_for(Payment).get(payment_id)
    get_order_for(actor, payment.order_id)
    return payment


def list_payments_for(actor: Actor, status=None, method=None) -> list[Payment]:
    return current_domain.repository_for(Payment).find_for_orders(_visible_order_ids(actor), status=status, method=method)


def get_shipment_for(actor: Actor, shipment_id) -> Shipment:
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    get_order_for(actor, shipment.order_id)
    return shipment


def list_shipments_for(actor: Actor, status=None) -> list[Shipment]:
    return current_domain.repository_for(Shipment).find_for_orders(_visible_order_ids(actor), status=status)
