"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, CartItem
from storefront.catalogue.catalog import VariantCatalog
from storefront.domain import storefront
from storefront.shared.authorization import Actor, Authorizer
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Cart")
class AddCartItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    note = String(max_length=500)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    item_id = Identifier(required=True)
    quantity = Integer(min_value=1)
    note = String(max_length=500)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.actor_id) or Cart.open(command.actor_id)

        # Unknown variants are rejected up front; the price is quoted again on every read
        quote = VariantCatalog().quote(command.variant_id)

        item = cart.add_item(quote.variant_id, command.quantity, note=command.note)
        repo.add(cart)

        logger.info("cart_item_added", cart_id=str(cart.id), item_id=str(item.id), variant_id=quote.variant_id)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_item(command.item_id)
        Authorizer.assert_owns_cart(Actor.from_command(command), cart)

        cart.update_item(command.item_id, quantity=command.quantity, note=command.note)
        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_by_item(command.item_id)
        Authorizer.assert_owns_cart(Actor.from_command(command), cart)

        cart.remove_item(command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_user(command.actor_id)
        if cart is None:
            return

        item_dao = current_domain.repository_for(CartItem)._dao
        for item in list(cart.items):
            item_dao.delete(item)
        repo._dao.delete(cart)
        logger.info("cart_cleared", cart_id=str(cart.id))
