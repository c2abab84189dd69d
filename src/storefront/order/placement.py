"""Order placement: command and handler.

Checkout quotes every requested variant, checks stock, prices the order and
optionally records its payment and shipment, all in one unit of work.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.catalog import VariantCatalog
from storefront.config import get_pricing_policy
from storefront.customer.address import ensure_address_belongs_to
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.totals import OrderTotalEngine
from storefront.payment.recording import upsert_payment
from storefront.shared.authorization import Actor, Authorizer
from storefront.shipment.tracking import upsert_shipment
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def parse_lines(raw) -> list[tuple[str, int]]:
    """Decode an ``items`` payload into (variant_id, quantity) pairs."""
    try:
        lines = json.loads(raw) if raw else []
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({"items": ["Items must be a JSON list"]}) from None

    if not isinstance(lines, list) or not lines:
        raise ValidationError({"items": ["An order needs at least one item"]})

    parsed = []
    for line in lines:
        variant_id = line.get("variant_id") if isinstance(line, dict) else None
        quantity = line.get("quantity") if isinstance(line, dict) else None
        if not variant_id:
            raise ValidationError({"items": ["Every item needs a variant_id"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": ["Item quantity must be a whole number of at least 1"]})
        parsed.append((str(variant_id), quantity))
    return parsed


def quote_lines(lines, catalog: VariantCatalog | None = None) -> list[tuple[str, int, float]]:
    """Price each (variant_id, quantity) pair, refusing quantities above stock."""
    catalog = catalog or VariantCatalog()
    quoted = []
    for variant_id, quantity in lines:
        quote = catalog.quote(variant_id)
        quote.ensure_in_stock(quantity)
        quoted.append((quote.variant_id, quantity, quote.price))
    return quoted


def load_json_object(raw, field: str) -> dict | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({field: [f"{field} must be a JSON object"]}) from None
    if not isinstance(data, dict):
        raise ValidationError({field: [f"{field} must be a JSON object"]})
    return data


@storefront.command(part_of="Order")
class PlaceOrder:
    """Check out a new order for the caller (or, for admins, another user)."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier()
    address_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {variant_id, quantity}
    voucher_code = String(max_length=50)
    payment = Text()  # JSON: {method, status?, amount?, transaction_id?}
    shipment = Text()  # JSON: {carrier?, tracking_no?, status?, shipped_at?, delivered_at?}


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        actor = Actor.from_command(command)
        owner = Authorizer.resolve_owner(actor, command.user_id)
        ensure_address_belongs_to(command.address_id, owner)

        quoted = quote_lines(parse_lines(command.items))
        payment_data = load_json_object(command.payment, "payment")
        shipment_data = load_json_object(command.shipment, "shipment")

        policy = get_pricing_policy()
        order = Order.place(user_id=owner, address_id=command.address_id, currency=policy.currency)
        for variant_id, quantity, price in quoted:
            order.add_line(variant_id, quantity, price)

        OrderTotalEngine(policy=policy).recompute(order, voucher_code=command.voucher_code)
        order.record_placement()

        if payment_data is not None:
            upsert_payment(order, payment_data)
        if shipment_data is not None:
            upsert_shipment(order, shipment_data)

        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            user_id=owner,
            items=len(quoted),
            total_amount=order.total_amount,
        )
        return str(order.id)
