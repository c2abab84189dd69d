"""Order item changes: commands and handler.

Every change re-prices the order in the same unit of work. A new variant is
quoted at its current price; a quantity-only change keeps the frozen price.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.catalog import VariantCatalog
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.totals import OrderTotalEngine
from storefront.shared.authorization import Actor, Authorizer
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class AddOrderItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Order")
class UpdateOrderItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    item_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(min_value=1)


@storefront.command(part_of="Order")
class RemoveOrderItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class OrderItemsHandler:
    @handle(AddOrderItem)
    def add_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        quote = VariantCatalog().quote(command.variant_id)
        quote.ensure_in_stock(command.quantity)

        item = order.add_line(quote.variant_id, command.quantity, quote.price)
        OrderTotalEngine().recompute(order)
        repo.add(order)

        logger.info("order_item_added", order_id=str(order.id), item_id=str(item.id), total_amount=order.total_amount)
        return str(item.id)

    @handle(UpdateOrderItem)
    def update_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_item(command.item_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        item = order.find_item(command.item_id)
        variant_id = command.variant_id if command.variant_id and command.variant_id != item.variant_id else None
        quantity = command.quantity if command.quantity is not None else item.quantity

        catalog = VariantCatalog()
        quote = catalog.quote(variant_id or item.variant_id)
        quote.ensure_in_stock(quantity)

        order.revise_line(
            item,
            variant_id=variant_id,
            quantity=quantity,
            price=quote.price if variant_id else None,
        )
        OrderTotalEngine().recompute(order)
        repo.add(order)

    @handle(RemoveOrderItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_by_item(command.item_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        order.remove_line(order.find_item(command.item_id))
        OrderTotalEngine().recompute(order)
        repo.add(order)
