"""Order aggregate with its OrderItem entities.

State machine:
    PENDING → CONFIRMED → SHIPPED → DELIVERED
    CANCELLED from PENDING, CONFIRMED or SHIPPED
    DELIVERED and CANCELLED are terminal

Line items hold the unit price captured when they were added. Items and the
voucher can only change while the order is PENDING, so a confirmed order
keeps the total its payment was taken for. Totals are derived from those frozen prices and written by ``OrderTotalEngine``; the
post-invariant below keeps the payable amount consistent with its parts.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged, OrderTotalsRecalculated
from storefront.order.totals import compose_total
from storefront.shared.exceptions import AccessDenied


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Items and voucher are priced only before the order is confirmed
_PRICING_OPEN_STATES = {OrderStatus.PENDING}

# Shipment status -> order status it drives the order to
_SHIPMENT_DRIVEN_STATUS = {
    "IN_TRANSIT": OrderStatus.SHIPPED,
    "DELIVERED": OrderStatus.DELIVERED,
    "RETURNED": OrderStatus.CANCELLED,
}


@storefront.entity(part_of="Order")
class OrderItem:
    """A variant and quantity on an order, at the price quoted when it was added."""

    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    sub_total = Float(default=0.0, min_value=0.0)
    shipping_fee = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    voucher_id = Identifier()
    currency = String(max_length=3, default="VND")
    created_at = DateTime(default=lambda: datetime.now(UTC))
    updated_at = DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def total_must_match_its_components(self):
        expected = compose_total(
            self.sub_total or 0.0,
            self.shipping_fee or 0.0,
            self.tax_amount or 0.0,
            self.discount_amount or 0.0,
        )
        if (self.total_amount or 0.0) != expected:
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match its components ({expected})"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, address_id, currency="VND"):
        """Start a new PENDING order with no items and zero totals."""
        return cls(user_id=user_id, address_id=address_id, currency=currency)

    def record_placement(self):
        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                user_id=str(self.user_id),
                item_count=len(self.items),
                total_amount=self.total_amount,
                voucher_id=str(self.voucher_id) if self.voucher_id else None,
                placed_at=self.created_at,
            )
        )

    # -------------------------------------------------------------------
    # Status helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in _TERMINAL_STATES

    def _transition(self, target: OrderStatus, reason: str) -> None:
        previous = self.current_status
        if previous == target:
            return

        self.status = target.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                reason=reason,
                changed_at=self.updated_at,
            )
        )

    def confirm_payment(self) -> None:
        """A payment was made: PENDING orders become CONFIRMED, anything else is left alone."""
        if self.current_status == OrderStatus.PENDING:
            self._transition(OrderStatus.CONFIRMED, reason="payment")

    def apply_shipment_status(self, shipment_status: str) -> None:
        target = _SHIPMENT_DRIVEN_STATUS.get(shipment_status)
        if target is not None:
            self._transition(target, reason="shipment")

    def assert_accepts_fulfilment_changes(self) -> None:
        """Payments and shipments of delivered or cancelled orders are frozen."""
        if self.is_terminal:
            raise ValidationError(
                {"status": [f"Order is {self.status}; its payment and shipment can no longer change"]}
            )

    def change_status(self, target_status: str, actor_is_admin: bool) -> None:
        """Explicit status change requested by a caller.

        Customers may only cancel. Admins may move along any valid transition.
        """
        try:
            target = OrderStatus(target_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status {target_status}"]}) from None

        current = self.current_status
        if target == current:
            return

        if not actor_is_admin and target != OrderStatus.CANCELLED:
            raise AccessDenied("Customers can only cancel an order")

        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        self._transition(target, reason="admin" if actor_is_admin else "customer")

    # -------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------
    def assert_pricing_open(self) -> None:
        """Once an order leaves PENDING its items and voucher are frozen."""
        if self.current_status not in _PRICING_OPEN_STATES:
            raise ValidationError({"items": [f"Items and voucher of a {self.status} order cannot be changed"]})

    def find_item(self, item_id) -> OrderItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Order item {item_id} not found")
        return item

    def add_line(self, variant_id, quantity: int, price: float) -> OrderItem:
        self.assert_pricing_open()
        item = OrderItem(variant_id=variant_id, quantity=quantity, price=price)
        self.add_items(item)
        return item

    def revise_line(self, item: OrderItem, variant_id=None, quantity: int | None = None, price: float | None = None):
        """Change an item's quantity and/or variant. A new variant brings its own price."""
        self.assert_pricing_open()
        with atomic_change(self):
            if variant_id is not None:
                item.variant_id = variant_id
            if price is not None:
                item.price = price
            if quantity is not None:
                item.quantity = quantity
        return item

    def remove_line(self, item: OrderItem) -> None:
        self.assert_pricing_open()
        self.remove_items(item)

    def replace_lines(self, lines) -> None:
        """Swap every item for ``lines``, a sequence of (variant_id, quantity, price)."""
        self.assert_pricing_open()
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            for variant_id, quantity, price in lines:
                self.add_items(OrderItem(variant_id=variant_id, quantity=quantity, price=price))

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def apply_totals(self, totals, voucher_id=None) -> None:
        with atomic_change(self):
            self.sub_total = totals.sub_total
            self.shipping_fee = totals.shipping_fee
            self.tax_amount = totals.tax_amount
            self.discount_amount = totals.discount_amount
            self.total_amount = totals.total_amount
            self.voucher_id = voucher_id
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderTotalsRecalculated(
                order_id=str(self.id),
                sub_total=totals.sub_total,
                shipping_fee=totals.shipping_fee,
                tax_amount=totals.tax_amount,
                discount_amount=totals.discount_amount,
                total_amount=totals.total_amount,
                voucher_id=str(voucher_id) if voucher_id else None,
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_by_item(self, item_id) -> Order:
        """Load the order that owns the given item."""
        try:
            item = current_domain.repository_for(OrderItem)._dao.get(item_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Order item {item_id} not found") from None
        return self.get(item.order_id)

    def find_for(self, user_id=None, status=None) -> list[Order]:
        filters = {}
        if user_id:
            filters["user_id"] = user_id
        if status:
            filters["status"] = status

        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").all().items
