"""Runtime settings read from the environment.

Infrastructure (databases, brokers, event store) lives in ``domain.toml``.
Business knobs that operators change without a deploy live here.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class PricingPolicy:
    """Flat shipping fee and tax rate applied to every order."""

    flat_shipping_fee: float = 50_000.0
    tax_rate: float = 0.06
    currency: str = "VND"

    @classmethod
    def from_env(cls) -> "PricingPolicy":
        return cls(
            flat_shipping_fee=float(os.getenv("STOREFRONT_FLAT_SHIPPING_FEE", cls.flat_shipping_fee)),
            tax_rate=float(os.getenv("STOREFRONT_TAX_RATE", cls.tax_rate)),
            currency=os.getenv("STOREFRONT_CURRENCY", cls.currency),
        )


@dataclass(frozen=True)
class VnPaySettings:
    tmn_code: str = ""
    hash_secret: str = ""
    payment_url: str = "https://sandbox.vnpayment.vn/paymentv2/vpcpay.html"
    return_url: str = "http://localhost:8000/payment/vnpay-return"

    @classmethod
    def from_env(cls) -> "VnPaySettings":
        return cls(
            tmn_code=os.getenv("VNPAY_TMN_CODE", cls.tmn_code),
            hash_secret=os.getenv("VNPAY_HASH_SECRET", cls.hash_secret),
            payment_url=os.getenv("VNPAY_PAYMENT_URL", cls.payment_url),
            return_url=os.getenv("VNPAY_RETURN_URL", cls.return_url),
        )


_pricing_policy: PricingPolicy | None = None


def get_pricing_policy() -> PricingPolicy:
    """Return the active pricing policy, loading it from the environment on first use."""
    global _pricing_policy
    if _pricing_policy is None:
        _pricing_policy = PricingPolicy.from_env()
    return _pricing_policy


def set_pricing_policy(policy: PricingPolicy) -> None:
    """Override the active pricing policy (useful for tests)."""
    global _pricing_policy
    _pricing_policy = policy


def reset_pricing_policy() -> None:
    global _pricing_policy
    _pricing_policy = None
