"""Request-scoped dependencies shared by the routers."""

from fastapi import Header

from storefront.shared.authorization import Actor, Role
from storefront.shared.exceptions import NotAuthenticated
from storefront.utils.logging import add_context


async def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """The caller, as identified by the authentication gateway in front of the API."""
    if not x_user_id:
        raise NotAuthenticated()

    role = (x_user_role or Role.CUSTOMER.value).upper()
    if role not in {r.value for r in Role}:
        raise NotAuthenticated(f"Unknown role {x_user_role}")

    add_context(user_id=x_user_id, role=role)
    return Actor(sub=x_user_id, role=role)


def actor_fields(actor: Actor) -> dict:
    """Keyword arguments that stamp a command with the caller."""
    return {"actor_id": actor.sub, "actor_role": actor.role}
