"""Shipment tracking: commands, handler, and the helpers order commands reuse."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.authorization import Actor, Authorizer
from storefront.shipment.shipment import Shipment
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_FIELDS = ("carrier", "tracking_no", "status", "shipped_at", "delivered_at")


def attach_shipment(order: Order, **fields) -> Shipment:
    """Create the one shipment an order may have. The caller persists ``order``."""
    order.assert_accepts_fulfilment_changes()

    repo = current_domain.repository_for(Shipment)
    if repo.find_by_order(order.id) is not None:
        raise ValidationError({"shipment": ["Order already has a shipment"]})

    shipment = Shipment.record(order_id=order.id, **fields)
    order.apply_shipment_status(shipment.status)

    repo.add(shipment)
    logger.info("shipment_recorded", shipment_id=str(shipment.id), order_id=str(order.id), status=shipment.status)
    return shipment


def revise_shipment(order: Order, shipment: Shipment, **fields) -> Shipment:
    """Update an order's shipment. The caller persists ``order``."""
    order.assert_accepts_fulfilment_changes()

    if shipment.revise(**fields):
        order.apply_shipment_status(shipment.status)

    current_domain.repository_for(Shipment).add(shipment)
    return shipment


def upsert_shipment(order: Order, data: dict) -> Shipment:
    """Create the order's shipment, or update it when one exists."""
    fields = {key: data.get(key) for key in _FIELDS}
    existing = current_domain.repository_for(Shipment).find_by_order(order.id)
    if existing is not None:
        return revise_shipment(order, existing, **fields)
    return attach_shipment(order, **fields)


@storefront.command(part_of="Shipment")
class RecordShipment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)
    status = String(max_length=20)
    shipped_at = DateTime()
    delivered_at = DateTime()


@storefront.command(part_of="Shipment")
class UpdateShipment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    shipment_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)
    status = String(max_length=20)
    shipped_at = DateTime()
    delivered_at = DateTime()


@storefront.command(part_of="Shipment")
class DeleteShipment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    shipment_id = Identifier(required=True)


@storefront.command_handler(part_of=Shipment)
class ShipmentCommandHandler:
    @handle(RecordShipment)
    def record_shipment(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        shipment = attach_shipment(order, **{key: getattr(command, key) for key in _FIELDS})
        order_repo.add(order)
        return str(shipment.id)

    @handle(UpdateShipment)
    def update_shipment(self, command):
        shipment = current_domain.repository_for(Shipment).get(command.shipment_id)
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(shipment.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        revise_shipment(order, shipment, **{key: getattr(command, key) for key in _FIELDS})
        order_repo.add(order)

    @handle(DeleteShipment)
    def delete_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        order = current_domain.repository_for(Order).get(shipment.order_id)
        Authorizer.assert_can_access_order(Actor.from_command(command), order)

        order.assert_accepts_fulfilment_changes()
        repo._dao.delete(shipment)
        logger.info("shipment_deleted", shipment_id=str(shipment.id), order_id=str(order.id))
