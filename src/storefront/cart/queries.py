"""Read side for carts: every line is quoted at the variant's current price."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.catalog import VariantCatalog
from storefront.shared.authorization import Actor


@dataclass(frozen=True)
class PricedCartLine:
    item_id: str
    variant_id: str
    quantity: int
    note: str | None
    unit_price: float
    stock: int

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class PricedCart:
    cart_id: str | None
    user_id: str
    lines: list[PricedCartLine]

    @property
    def sub_total(self) -> float:
        return sum(line.line_total for line in self.lines)


def price_cart(cart: Cart, catalog: VariantCatalog | None = None) -> list[PricedCartLine]:
    catalog = catalog or VariantCatalog()
    lines = []
    for item in sorted(cart.items, key=lambda i: i.added_at, reverse=True):
        quote = catalog.quote(item.variant_id)
        lines.append(
            PricedCartLine(
                item_id=str(item.id),
                variant_id=quote.variant_id,
                quantity=item.quantity,
                note=item.note,
                unit_price=quote.price,
                stock=quote.stock,
            )
        )
    return lines


def cart_for(actor: Actor) -> PricedCart:
    """The caller's cart, newest line first. A caller with no cart gets an empty one."""
    cart = current_domain.repository_for(Cart).find_by_user(actor.sub)
    if cart is None:
        return PricedCart(cart_id=None, user_id=actor.sub, lines=[])
    return PricedCart(cart_id=str(cart.id), user_id=str(cart.user_id), lines=price_cart(cart))
