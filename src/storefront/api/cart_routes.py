"""FastAPI routes for the caller's shopping cart."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import actor_fields, current_actor
from storefront.api.presenters import present_cart
from storefront.api.schemas import (
    AddCartItemRequest,
    CartItemIdResponse,
    CartResponse,
    StatusResponse,
    UpdateCartItemRequest,
)
from storefront.cart.items import AddCartItem, ClearCart, RemoveCartItem, UpdateCartItem
from storefront.cart.queries import cart_for
from storefront.shared.authorization import Actor

cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    """The caller's cart with every line priced at the variant's current price."""
    return present_cart(cart_for(actor))


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(ClearCart(**actor_fields(actor)), asynchronous=False)
    return StatusResponse(status="cleared")


@cart_router.post("/items", status_code=201, response_model=CartItemIdResponse)
async def add_cart_item(body: AddCartItemRequest, actor: Actor = Depends(current_actor)) -> CartItemIdResponse:
    command = AddCartItem(**actor_fields(actor), **body.model_dump())
    return CartItemIdResponse(item_id=current_domain.process(command, asynchronous=False))


@cart_router.patch("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    actor: Actor = Depends(current_actor),
) -> CartResponse:
    command = UpdateCartItem(**actor_fields(actor), item_id=item_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return present_cart(cart_for(actor))


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(RemoveCartItem(**actor_fields(actor), item_id=item_id), asynchronous=False)
    return StatusResponse(status="deleted")
