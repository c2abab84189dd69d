"""Order modification: partial update and deletion."""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.customer.address import ensure_address_belongs_to
from storefront.domain import storefront
from storefront.order.order import Order, OrderItem
from storefront.order.placement import load_json_object, parse_lines, quote_lines
from storefront.order.totals import OrderTotalEngine
from storefront.payment.payment import Payment
from storefront.payment.recording import upsert_payment
from storefront.shared.authorization import Actor, Authorizer
from storefront.shipment.shipment import Shipment
from storefront.shipment.tracking import upsert_shipment
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrder:
    """Partially update an order.

    ``items`` replaces every line when present. ``voucher_code`` applies a new
    voucher; ``clear_voucher`` removes the current one. Cancelling an order is
    an update with ``status="CANCELLED"``.
    """

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    address_id = Identifier()
    status = String(max_length=20)
    items = Text()
    voucher_code = String(max_length=50)
    clear_voucher = Boolean(default=False)
    payment = Text()
    shipment = Text()


@storefront.command(part_of="Order")
class DeleteOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        Authorizer.assert_can_access_order(actor, order)

        payment_data = load_json_object(command.payment, "payment")
        shipment_data = load_json_object(command.shipment, "shipment")

        if command.address_id and command.address_id != order.address_id:
            ensure_address_belongs_to(command.address_id, order.user_id)
            order.address_id = command.address_id

        items_changed = command.items is not None
        voucher_changed = bool(command.voucher_code) or bool(command.clear_voucher)

        # Without item or voucher changes the frozen totals stay as they are
        if items_changed or voucher_changed:
            order.assert_pricing_open()
            if items_changed:
                order.replace_lines(quote_lines(parse_lines(command.items)))
            OrderTotalEngine().recompute(
                order,
                voucher_code=command.voucher_code,
                clear_voucher=bool(command.clear_voucher),
            )

        if command.status:
            order.change_status(command.status, actor_is_admin=Authorizer.is_admin(actor))

        if payment_data is not None:
            upsert_payment(order, payment_data)
        if shipment_data is not None:
            upsert_shipment(order, shipment_data)

        repo.add(order)

    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        payment = current_domain.repository_for(Payment).find_by_order(order.id)
        if payment is not None:
            current_domain.repository_for(Payment)._dao.delete(payment)

        shipment = current_domain.repository_for(Shipment).find_by_order(order.id)
        if shipment is not None:
            current_domain.repository_for(Shipment)._dao.delete(shipment)

        item_dao = current_domain.repository_for(OrderItem)._dao
        for item in list(order.items):
            item_dao.delete(item)

        repo._dao.delete(order)
        logger.info("order_deleted", order_id=str(order.id), deleted_by=str(command.actor_id))
