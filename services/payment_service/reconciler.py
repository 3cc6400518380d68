import hashlib
import hmac
from dataclasses import dataclass

from shared.observability import shop_payment_verifications_total


@dataclass(frozen=True)
class PaymentVerification:
    is_valid: bool
    order_id: str
    payment_id: str


class PaymentReconciler:
    """
    Checks the signature the gateway hands the browser after checkout.

    The gateway signs "<gateway order id>|<payment id>" with the account's key
    secret using HMAC-SHA256. Any mismatch means the payment is not treated
    as settled.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Payment key secret is required")
        self._secret = secret.encode()

    def sign(self, order_id: str, payment_id: str) -> str:
        body = f"{order_id}|{payment_id}".encode()
        return hmac.new(self._secret, body, hashlib.sha256).hexdigest()

    def verify(self, order_id: str, payment_id: str, signature: str) -> PaymentVerification:
        expected = self.sign(order_id, payment_id)
        is_valid = hmac.compare_digest(expected.encode(), (signature or "").encode())
        shop_payment_verifications_total.labels(result="valid" if is_valid else "invalid").inc()
        return PaymentVerification(is_valid=is_valid, order_id=order_id, payment_id=payment_id)
