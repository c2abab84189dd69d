"""Voucher aggregate and repository.

A voucher carries a fractional discount rate (0.1 is ten percent) and an
expiry. Orders keep a reference to the voucher they redeemed plus the discount
amount frozen at the time; editing the voucher later never rewrites orders.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from storefront.domain import storefront


def as_aware(moment: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


@storefront.aggregate
class Voucher:
    code: String(required=True, max_length=50, unique=True)
    discount: Float(required=True)
    expires_at: DateTime(required=True)
    is_active: Boolean(default=True)
    created_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def code_must_not_be_blank(self):
        if not self.code or not self.code.strip():
            raise ValidationError({"code": ["Voucher code cannot be blank"]})

    def is_expired(self, now: datetime | None = None) -> bool:
        now = as_aware(now) or datetime.now(UTC)
        return as_aware(self.expires_at) <= now

    def is_redeemable(self, now: datetime | None = None) -> bool:
        return bool(self.is_active) and not self.is_expired(now)

    @property
    def effective_rate(self) -> float:
        """Discount rate clamped to [0, 1], whatever was stored."""
        return min(max(self.discount or 0.0, 0.0), 1.0)


def validate_voucher_terms(discount=None, expires_at=None, now: datetime | None = None) -> None:
    """Checks applied when an administrator issues or edits a voucher."""
    errors = {}
    if discount is not None and not 0 <= discount <= 1:
        errors["discount"] = ["Discount must be between 0 and 1"]
    if expires_at is not None:
        now = as_aware(now) or datetime.now(UTC)
        if as_aware(expires_at) <= now:
            errors["expires_at"] = ["Expiry date must be in the future"]
    if errors:
        raise ValidationError(errors)


@storefront.repository(part_of=Voucher)
class VoucherRepository:
    def find_by_code(self, code: str) -> Voucher | None:
        results = self._dao.query.filter(code=code).all().items
        return results[0] if results else None

    def redeemable(self, now: datetime | None = None) -> list[Voucher]:
        """Active vouchers that have not expired, soonest expiry first."""
        vouchers = self._dao.query.filter(is_active=True).all().items
        return sorted(
            (v for v in vouchers if not v.is_expired(now)),
            key=lambda v: as_aware(v.expires_at),
        )

    def inactive(self) -> list[Voucher]:
        return self._dao.query.filter(is_active=False).all().items
