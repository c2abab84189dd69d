"""Domain events for the Voucher aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Voucher")
class VoucherIssued:
    """A new discount code was made available."""

    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True)
    discount = Float(required=True)
    expires_at = DateTime(required=True)


@storefront.event(part_of="Voucher")
class VoucherUpdated:
    """An administrator edited a voucher's terms."""

    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True)
    discount = Float(required=True)
    expires_at = DateTime(required=True)
    is_active = String(required=True)
