"""Turn a voucher code or id into a discount amount for a monetary base."""

from dataclasses import dataclass
from datetime import datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.utils.logging import get_logger
from storefront.voucher.voucher import Voucher

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoucherDiscount:
    voucher_id: str
    discount_amount: float


class VoucherResolver:
    """Look up a voucher, check it can still be redeemed, and price the discount.

    The voucher itself is never modified.
    """

    def __init__(self, now=None) -> None:
        # ``now`` is a zero-argument callable; tests pin the clock through it
        self._now = now

    def _current_time(self) -> datetime | None:
        return self._now() if self._now else None

    def _load(self, code: str | None, voucher_id: str | None) -> Voucher:
        repo = current_domain.repository_for(Voucher)
        if voucher_id:
            try:
                return repo.get(voucher_id)
            except ObjectNotFoundError:
                raise ObjectNotFoundError(f"Voucher {voucher_id} not found") from None

        voucher = repo.find_by_code(code) if code else None
        if voucher is None:
            raise ObjectNotFoundError(f"Voucher {code} not found")
        return voucher

    def apply(self, code: str | None = None, voucher_id: str | None = None, base: float = 0.0) -> VoucherDiscount:
        voucher = self._load(code, voucher_id)

        if not voucher.is_active:
            raise ValidationError({"voucher": [f"Voucher {voucher.code} is not active"]})
        if voucher.is_expired(self._current_time()):
            raise ValidationError({"voucher": [f"Voucher {voucher.code} has expired"]})

        amount = base * voucher.effective_rate
        logger.debug("voucher_applied", voucher_id=str(voucher.id), base=base, discount_amount=amount)
        return VoucherDiscount(voucher_id=str(voucher.id), discount_amount=amount)
