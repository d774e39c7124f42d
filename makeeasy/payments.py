"""
Client for the Razorpay-compatible payment gateway.

Only two things are needed from the gateway: creating an order for the amount
to collect, and checking the signature it hands the browser after checkout.
The signature check is local (HMAC-SHA256 with the key secret).
"""

import hashlib
import hmac
from decimal import Decimal
from functools import lru_cache

import httpx
from loguru import logger

from makeeasy import settings

CURRENCY = "INR"


@lru_cache(maxsize=1)
def _get_gateway_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.razorpay_base_url,
        timeout=httpx.Timeout(10.0),
    )


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class PaymentGateway:
    def __init__(self, key_id: str, key_secret: str):
        self.key_id = key_id
        self._key_secret = key_secret

    @property
    def _client(self) -> httpx.AsyncClient:
        return _get_gateway_http_client()

    async def create_order(self, amount: Decimal, receipt: str) -> dict | None:
        """
        Create a gateway order for `amount` rupees.
        Returns the gateway's order dict, or None on any failure (logged).
        """
        paise = int((amount * 100).to_integral_value())
        try:
            resp = await self._client.post(
                "/orders",
                json={"amount": paise, "currency": CURRENCY, "receipt": receipt},
                auth=(self.key_id, self._key_secret),
            )
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError):
            logger.warning(
                "Gateway order creation failed for receipt={}", receipt, exc_info=True
            )
            return None

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = compute_signature(order_id, payment_id, self._key_secret)
        return hmac.compare_digest(expected.encode(), signature.encode())
