"""Shipment aggregate: one per order.

Status changes are what move an order through SHIPPED, DELIVERED or back to
CANCELLED; see ``Order.apply_shipment_status``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront
from storefront.shipment.events import ShipmentRecorded, ShipmentStatusChanged


class ShipmentStatus(Enum):
    PREPARING = "PREPARING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"


@storefront.aggregate
class Shipment:
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)
    status = String(
        choices=ShipmentStatus,
        default=ShipmentStatus.PREPARING.value,
    )
    shipped_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime(default=lambda: datetime.now(UTC))
    updated_at = DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def record(cls, order_id, carrier=None, tracking_no=None, status=None, shipped_at=None, delivered_at=None):
        shipment = cls(
            order_id=order_id,
            carrier=carrier,
            tracking_no=tracking_no,
            status=status or ShipmentStatus.PREPARING.value,
            shipped_at=shipped_at,
            delivered_at=delivered_at,
        )
        shipment._stamp()
        shipment.raise_(
            ShipmentRecorded(
                shipment_id=str(shipment.id),
                order_id=str(order_id),
                carrier=shipment.carrier,
                tracking_no=shipment.tracking_no,
                status=shipment.status,
            )
        )
        return shipment

    def _stamp(self) -> None:
        """Fill in the shipped/delivered timestamps the current status implies."""
        now = datetime.now(UTC)
        if self.status == ShipmentStatus.IN_TRANSIT.value and self.shipped_at is None:
            self.shipped_at = now
        if self.status == ShipmentStatus.DELIVERED.value and self.delivered_at is None:
            self.delivered_at = now

    def revise(self, carrier=None, tracking_no=None, status=None, shipped_at=None, delivered_at=None) -> bool:
        """Apply a partial update. Returns True when the status changed."""
        previous = self.status

        if carrier is not None:
            self.carrier = carrier
        if tracking_no is not None:
            self.tracking_no = tracking_no
        if shipped_at is not None:
            self.shipped_at = shipped_at
        if delivered_at is not None:
            self.delivered_at = delivered_at
        if status is not None:
            self.status = status
        self._stamp()
        self.updated_at = datetime.now(UTC)

        if self.status != previous:
            self.raise_(
                ShipmentStatusChanged(
                    shipment_id=str(self.id),
                    order_id=str(self.order_id),
                    previous_status=previous,
                    new_status=self.status,
                )
            )
            return True
        return False


@storefront.repository(part_of=Shipment)
class ShipmentRepository:
    def find_by_order(self, order_id) -> Shipment | None:
        results = self._dao.query.filter(order_id=str(order_id)).all().items
        return results[0] if results else None

    def find_for_orders(self, order_ids, status=None) -> list[Shipment]:
        """Shipments belonging to any of ``order_ids`` (None means every order)."""
        filters = {}
        if status:
            filters["status"] = status
        if order_ids is not None:
            if not order_ids:
                return []
            filters["order_id__in"] = [str(order_id) for order_id in order_ids]

        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").all().items
