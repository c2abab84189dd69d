"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The default
is VNPay configured from the environment.
"""

from storefront.payment.gateway.port import CallbackOutcome, PaymentGateway
from storefront.payment.gateway.vnpay_adapter import VnPayGateway

__all__ = ["CallbackOutcome", "PaymentGateway", "VnPayGateway", "get_gateway", "reset_gateway", "set_gateway"]

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to VnPayGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = VnPayGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
