"""Order totals: subtotal, shipping, tax, discount and the amount payable.

``compute_totals`` is the pure arithmetic. ``OrderTotalEngine`` decides which
discount applies to an order (new code, cleared, re-validated or frozen) and
writes the result onto the aggregate in one atomic change.

Discounts apply to the tax base (items plus shipping), before tax is added.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.config import PricingPolicy, get_pricing_policy
from storefront.voucher.resolver import VoucherResolver


@dataclass(frozen=True)
class Line:
    """A quantity at a unit price; anything with these two attributes will do."""

    quantity: int
    price: float


@dataclass(frozen=True)
class OrderTotals:
    sub_total: float
    shipping_fee: float
    tax_amount: float
    discount_amount: float
    total_amount: float

    @property
    def tax_base(self) -> float:
        return self.sub_total + self.shipping_fee


def round_half_up(value: float) -> float:
    """Round to the nearest whole currency unit, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compose_total(sub_total: float, shipping_fee: float, tax_amount: float, discount_amount: float) -> float:
    """The amount payable. Shared with the Order invariant so both agree to the last bit."""
    return max(0.0, sub_total + shipping_fee + tax_amount - discount_amount)


def compute_totals(
    line_items: Iterable,
    policy: PricingPolicy,
    discount: Callable[[float], float] | None = None,
) -> OrderTotals:
    """Compute order totals from frozen line prices.

    ``discount`` receives the tax base and returns the discount amount.
    """
    sub_total = float(sum(line.quantity * line.price for line in line_items))
    shipping_fee = 0.0 if sub_total <= 0 else float(policy.flat_shipping_fee)
    tax_base = sub_total + shipping_fee
    tax_amount = round_half_up(tax_base * policy.tax_rate)
    discount_amount = float(discount(tax_base)) if discount else 0.0

    return OrderTotals(
        sub_total=sub_total,
        shipping_fee=shipping_fee,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=compose_total(sub_total, shipping_fee, tax_amount, discount_amount),
    )


class OrderTotalEngine:
    def __init__(self, policy: PricingPolicy | None = None, resolver: VoucherResolver | None = None) -> None:
        self.policy = policy or get_pricing_policy()
        self.resolver = resolver or VoucherResolver()

    def recompute(self, order, voucher_code: str | None = None, clear_voucher: bool = False) -> OrderTotals:
        """Recompute ``order``'s totals from its current items and write them back.

        Precedence: clearing beats a new code, a new code beats the voucher
        already on the order. An existing voucher is re-validated against the
        new base.
        """
        voucher_id = None if clear_voucher else order.voucher_id
        discount = None

        if clear_voucher:
            pass
        elif voucher_code:

            def discount(base):
                nonlocal voucher_id
                applied = self.resolver.apply(code=voucher_code, base=base)
                voucher_id = applied.voucher_id
                return applied.discount_amount

        elif voucher_id:

            def discount(base):
                return self.resolver.apply(voucher_id=voucher_id, base=base).discount_amount

        totals = compute_totals(order.items, self.policy, discount)
        order.apply_totals(totals, voucher_id=voucher_id)
        return totals
