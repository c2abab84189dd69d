"""Payment gateway port (abstract interface).

Hosted-checkout gateways redirect the customer to their own page and report
the outcome back through signed query parameters. Adapters build the redirect
URL and check those signatures; the domain never talks to a gateway directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CallbackOutcome:
    """What a gateway callback says happened to a payment."""

    payment_id: str | None
    amount: float | None
    transaction_id: str | None
    success: bool
    response_code: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def build_checkout_url(self, payment, client_ip: str, now: datetime | None = None) -> str:
        """Return the URL the customer is sent to in order to pay ``payment``."""
        ...

    @abstractmethod
    def verify(self, params: dict) -> bool:
        """Check that callback parameters were signed by the gateway."""
        ...

    @abstractmethod
    def read_outcome(self, params: dict) -> CallbackOutcome:
        """Extract the payment reference, amount and result from callback parameters."""
        ...
