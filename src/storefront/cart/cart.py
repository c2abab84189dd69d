"""Shopping cart aggregate: one per customer.

A cart only remembers which variants the customer picked and how many. It
never stores a price; every read quotes its lines against the catalogue, the
same way an order quotes a line when it is added.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.events import CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    note = String(max_length=500)
    added_at = DateTime(default=lambda: datetime.now(UTC))


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime(default=lambda: datetime.now(UTC))
    updated_at = DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def open(cls, user_id):
        return cls(user_id=user_id)

    def find_item(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Cart item {item_id} not found")
        return item

    def add_item(self, variant_id, quantity: int, note=None) -> CartItem:
        """Put a variant in the cart. Each variant appears at most once."""
        if any(str(i.variant_id) == str(variant_id) for i in self.items):
            raise ValidationError({"variant_id": ["Variant is already in the cart"]})

        item = CartItem(variant_id=variant_id, quantity=quantity, note=note)
        self.add_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                item_id=str(item.id),
                variant_id=str(variant_id),
                quantity=quantity,
            )
        )
        return item

    def update_item(self, item_id, quantity: int | None = None, note=None) -> CartItem:
        item = self.find_item(item_id)
        previous_quantity = item.quantity

        if quantity is not None:
            item.quantity = quantity
        if note is not None:
            item.note = note
        self.updated_at = datetime.now(UTC)

        if item.quantity != previous_quantity:
            self.raise_(
                CartQuantityUpdated(
                    cart_id=str(self.id),
                    item_id=str(item.id),
                    previous_quantity=previous_quantity,
                    new_quantity=item.quantity,
                )
            )
        return item

    def remove_item(self, item_id) -> None:
        item = self.find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_by_user(self, user_id) -> Cart | None:
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return results[0] if results else None

    def get_by_item(self, item_id) -> Cart:
        """Load the cart that holds the given item."""
        try:
            item = current_domain.repository_for(CartItem)._dao.get(item_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Cart item {item_id} not found") from None
        return self.get(item.cart_id)
