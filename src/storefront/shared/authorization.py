"""Role and ownership checks shared by every order and cart operation.

An ``Actor`` is whoever the upstream authentication gateway says is calling.
Admins can touch any order; customers only their own.
"""

from dataclasses import dataclass
from enum import Enum

from storefront.shared.exceptions import AccessDenied


class Role(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Actor:
    sub: str
    role: str = Role.CUSTOMER.value

    @classmethod
    def from_command(cls, command) -> "Actor":
        """Rebuild the actor carried on a command as ``actor_id``/``actor_role``."""
        return cls(sub=str(command.actor_id), role=command.actor_role or Role.CUSTOMER.value)


class Authorizer:
    @staticmethod
    def is_admin(actor: Actor) -> bool:
        return actor.role == Role.ADMIN.value

    @classmethod
    def can_access_order(cls, actor: Actor, order) -> bool:
        return cls.is_admin(actor) or str(order.user_id) == actor.sub

    @classmethod
    def assert_can_access_order(cls, actor: Actor, order) -> None:
        if not cls.can_access_order(actor, order):
            raise AccessDenied("You do not have access to this order")

    @staticmethod
    def assert_owns_cart(actor: Actor, cart) -> None:
        """Carts are private: not even an admin edits someone else's."""
        if str(cart.user_id) != actor.sub:
            raise AccessDenied("You do not have access to this cart")

    @classmethod
    def assert_admin(cls, actor: Actor) -> None:
        if not cls.is_admin(actor):
            raise AccessDenied("Admin role required")

    @classmethod
    def scope_user_id(cls, actor: Actor, requested_user_id: str | None = None) -> str | None:
        """Return the user id a listing must be restricted to, or None for no restriction."""
        if cls.is_admin(actor):
            return requested_user_id
        return actor.sub

    @classmethod
    def resolve_owner(cls, actor: Actor, requested_user_id: str | None = None) -> str:
        """Return the user a new order is created for."""
        if not requested_user_id or requested_user_id == actor.sub:
            return actor.sub
        if cls.is_admin(actor):
            return requested_user_id
        raise AccessDenied("You can only create orders for yourself")
