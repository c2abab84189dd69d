"""FastAPI routes for orders and order items."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.presenters import present_item, present_order
from storefront.api.schemas import (
    AddOrderItemRequest,
    OrderItemResponse,
    OrderResponse,
    PlaceOrderRequest,
    StatusResponse,
    UpdateOrderItemRequest,
    UpdateOrderRequest,
)
from storefront.order.items import AddOrderItem, RemoveOrderItem, UpdateOrderItem
from storefront.order.modification import DeleteOrder, UpdateOrder
from storefront.order.placement import PlaceOrder
from storefront.order.queries import get_item_for, get_order_for, list_items_for, list_orders_for
from storefront.shared.authorization import Actor


def _dump_or_none(model):
    return json.dumps(model.model_dump(mode="json")) if model is not None else None


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/order", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    """Check out a new order; totals are computed server-side."""
    command = PlaceOrder(
        **actor_fields(actor),
        user_id=body.user_id,
        address_id=body.address_id,
        items=json.dumps([line.model_dump() for line in body.items]),
        voucher_code=body.voucher_code,
        payment=_dump_or_none(body.payment),
        shipment=_dump_or_none(body.shipment),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return present_order(get_order_for(actor, order_id))


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(
    user_id: str | None = None,
    status: str | None = None,
    actor: Actor = Depends(current_actor),
) -> list[OrderResponse]:
    """List orders. Customers only ever see their own."""
    return [present_order(order) for order in list_orders_for(actor, user_id=user_id, status=status)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return present_order(get_order_for(actor, order_id))


@order_router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    actor: Actor = Depends(current_actor),
) -> OrderResponse:
    """Partially update an order. Totals are recomputed only when items or voucher change."""
    clear_voucher = "voucher_code" in body.model_fields_set and body.voucher_code is None
    command = UpdateOrder(
        **actor_fields(actor),
        order_id=order_id,
        address_id=body.address_id,
        status=body.status,
        items=json.dumps([line.model_dump() for line in body.items]) if body.items is not None else None,
        voucher_code=body.voucher_code,
        clear_voucher=clear_voucher,
        payment=_dump_or_none(body.payment),
        shipment=_dump_or_none(body.shipment),
    )
    current_domain.process(command, asynchronous=False)
    return present_order(get_order_for(actor, order_id))


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeleteOrder(**actor_fields(actor), order_id=order_id), asynchronous=False)
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Order Item Router
# ---------------------------------------------------------------------------
order_item_router = APIRouter(prefix="/order-items", tags=["order-items"])


@order_item_router.post("", status_code=201, response_model=OrderItemResponse)
async def add_order_item(body: AddOrderItemRequest, actor: Actor = Depends(current_actor)) -> OrderItemResponse:
    """Add an item to an order at the variant's current price."""
    command = AddOrderItem(
        **actor_fields(actor),
        order_id=body.order_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    item_id = current_domain.process(command, asynchronous=False)
    order, item = get_item_for(actor, item_id)
    return present_item(order.id, item)


@order_item_router.get("", response_model=list[OrderItemResponse])
async def list_order_items(order_id: str, actor: Actor = Depends(current_actor)) -> list[OrderItemResponse]:
    return [present_item(order_id, item) for item in list_items_for(actor, order_id)]


@order_item_router.get("/{item_id}", response_model=OrderItemResponse)
async def get_order_item(item_id: str, actor: Actor = Depends(current_actor)) -> OrderItemResponse:
    order, item = get_item_for(actor, item_id)
    return present_item(order.id, item)


@order_item_router.patch("/{item_id}", response_model=OrderItemResponse)
async def update_order_item(
    item_id: str,
    body: UpdateOrderItemRequest,
    actor: Actor = Depends(current_actor),
) -> OrderItemResponse:
    command = UpdateOrderItem(
        **actor_fields(actor),
        item_id=item_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    order, item = get_item_for(actor, item_id)
    return present_item(order.id, item)


@order_item_router.delete("/{item_id}", response_model=StatusResponse)
async def remove_order_item(item_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(RemoveOrderItem(**actor_fields(actor), item_id=item_id), asynchronous=False)
    return StatusResponse(status="deleted")
