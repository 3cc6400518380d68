from dataclasses import dataclass

import httpx
import structlog

from shared.config.settings import Settings
from shared.errors import PaymentGatewayError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount: int  # minor units (paise)
    currency: str
    receipt: str
    status: str


class RazorpayGateway:
    """Thin async client for the two Razorpay REST calls the shop needs."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "RazorpayGateway":
        return cls(
            settings.razorpay_key_id,
            settings.razorpay_key_secret,
            settings.razorpay_base_url,
            transport=transport,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self.key_id, self._key_secret),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def create_order(self, amount_minor_units: int, currency: str, receipt: str, notes: dict | None = None) -> GatewayOrder:
        payload = {
            "amount": int(amount_minor_units),
            "currency": currency or "INR",
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            async with self._client() as client:
                resp = await client.post("/orders", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.error("gateway_create_order_failed", receipt=receipt, error=str(e))
            raise PaymentGatewayError("Failed to create payment order. Please try again.") from e

        logger.info("gateway_order_created", gateway_order_id=data["id"], amount=data["amount"], receipt=receipt)
        return GatewayOrder(
            id=data["id"],
            amount=data["amount"],
            currency=data["currency"],
            receipt=data.get("receipt", receipt),
            status=data.get("status", "created"),
        )

    async def fetch_payment(self, payment_id: str) -> dict:
        try:
            async with self._client() as client:
                resp = await client.get(f"/payments/{payment_id}")
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as e:
            logger.error("gateway_fetch_payment_failed", payment_id=payment_id, error=str(e))
            raise PaymentGatewayError("Failed to fetch payment details") from e
