"""Storefront HTTP API package."""

from storefront.api.cart_routes import cart_router
from storefront.api.catalogue_routes import address_router, catalogue_router
from storefront.api.errors import register_error_handlers
from storefront.api.order_routes import order_item_router, order_router
from storefront.api.payment_routes import payment_router
from storefront.api.shipment_routes import shipment_router
from storefront.api.voucher_routes import voucher_router

ROUTERS = [
    order_router,
    order_item_router,
    cart_router,
    payment_router,
    shipment_router,
    voucher_router,
    catalogue_router,
    address_router,
]

__all__ = ["ROUTERS", "register_error_handlers"]
