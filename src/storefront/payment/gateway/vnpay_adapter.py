"""VNPay hosted checkout adapter.

Requests and callbacks are signed with HMAC-SHA512 over the ``vnp_*``
parameters, sorted by name and URL-encoded, excluding the hash fields
themselves. VNPay amounts are in hundredths of a dong.
"""

import hashlib
import hmac
from datetime import UTC, datetime, timedelta, timezone
from urllib.parse import urlencode

from storefront.config import VnPaySettings
from storefront.payment.gateway.port import CallbackOutcome, PaymentGateway

VNPAY_VERSION = "2.1.0"
CHECKOUT_TTL = timedelta(minutes=15)

# Timestamps are exchanged in Vietnam local time
_VN_TZ = timezone(timedelta(hours=7))
_HASH_FIELDS = ("vnp_SecureHash", "vnp_SecureHashType")


class VnPayGateway(PaymentGateway):
    def __init__(self, settings: VnPaySettings | None = None) -> None:
        self.settings = settings or VnPaySettings.from_env()

    def _signing_payload(self, params: dict) -> str:
        fields = {
            key: str(value)
            for key, value in params.items()
            if key.startswith("vnp_") and key not in _HASH_FIELDS and value not in (None, "")
        }
        return urlencode(sorted(fields.items()))

    def sign(self, params: dict) -> str:
        return hmac.new(
            self.settings.hash_secret.encode("utf-8"),
            self._signing_payload(params).encode("utf-8"),
            hashlib.sha512,
        ).hexdigest()

    def build_checkout_url(self, payment, client_ip: str, now: datetime | None = None) -> str:
        local_now = (now or datetime.now(UTC)).astimezone(_VN_TZ)
        params = {
            "vnp_Version": VNPAY_VERSION,
            "vnp_Command": "pay",
            "vnp_TmnCode": self.settings.tmn_code,
            "vnp_Amount": str(int(round((payment.amount or 0.0) * 100))),
            "vnp_CurrCode": "VND",
            "vnp_TxnRef": str(payment.id),
            "vnp_OrderInfo": f"Payment for order {payment.order_id}",
            "vnp_OrderType": "other",
            "vnp_Locale": "vn",
            "vnp_ReturnUrl": self.settings.return_url,
            "vnp_IpAddr": client_ip or "127.0.0.1",
            "vnp_CreateDate": local_now.strftime("%Y%m%d%H%M%S"),
            "vnp_ExpireDate": (local_now + CHECKOUT_TTL).strftime("%Y%m%d%H%M%S"),
        }
        query = self._signing_payload(params)
        return f"{self.settings.payment_url}?{query}&vnp_SecureHash={self.sign(params)}"

    def verify(self, params: dict) -> bool:
        received = str(params.get("vnp_SecureHash") or "")
        if not received:
            return False
        return hmac.compare_digest(received.lower().encode("utf-8"), self.sign(params).encode("utf-8"))

    def read_outcome(self, params: dict) -> CallbackOutcome:
        try:
            amount = int(params.get("vnp_Amount")) / 100
        except (TypeError, ValueError):
            amount = None

        return CallbackOutcome(
            payment_id=params.get("vnp_TxnRef"),
            amount=amount,
            transaction_id=params.get("vnp_TransactionNo"),
            success=params.get("vnp_ResponseCode") == "00" and params.get("vnp_TransactionStatus") == "00",
            response_code=params.get("vnp_ResponseCode"),
        )
