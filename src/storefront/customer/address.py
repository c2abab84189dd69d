"""Customer shipping addresses.

Orders only hold a reference to an address; the ownership check lives here so
order placement and order updates ask the same question the same way.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.authorization import Actor, Authorizer
from storefront.shared.exceptions import AccessDenied


@storefront.aggregate
class Address:
    user_id: Identifier(required=True)
    recipient: String(required=True, max_length=255)
    phone: String(max_length=20)
    line1: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    country: String(max_length=100, default="VN")
    is_default: Boolean(default=False)


@storefront.command(part_of="Address")
class RegisterAddress:
    """Register a shipping address for the caller (or, for admins, any user)."""

    actor_id: Identifier(required=True)
    actor_role: String(max_length=20)
    user_id: Identifier()
    recipient: String(required=True, max_length=255)
    phone: String(max_length=20)
    line1: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    country: String(max_length=100)
    is_default: Boolean(default=False)


@storefront.command_handler(part_of=Address)
class RegisterAddressHandler:
    @handle(RegisterAddress)
    def register_address(self, command):
        actor = Actor.from_command(command)
        owner = Authorizer.resolve_owner(actor, command.user_id)

        kwargs = {
            "user_id": owner,
            "recipient": command.recipient,
            "phone": command.phone,
            "line1": command.line1,
            "city": command.city,
            "is_default": bool(command.is_default),
        }
        if command.country:
            kwargs["country"] = command.country

        address = Address(**kwargs)
        current_domain.repository_for(Address).add(address)
        return str(address.id)


def ensure_address_belongs_to(address_id, user_id) -> Address:
    """Load an address and make sure it is one of ``user_id``'s addresses.

    Raises ``ObjectNotFoundError`` when the address does not exist and
    ``AccessDenied`` when it belongs to someone else.
    """
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(f"Address {address_id} not found") from None

    if str(address.user_id) != str(user_id):
        raise AccessDenied("Address does not belong to the order's owner")
    return address
