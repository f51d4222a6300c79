"""Razorpay payment gateway adapter.

Orders API: https://razorpay.com/docs/api/orders/
"""

import logging

import httpx

from app.core.exceptions import GatewayUnavailable
from app.gateways.base import GatewayType, OrderHandle, PaymentGateway

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    """Razorpay payment gateway implementation."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = "https://api.razorpay.com/v1",
        currency: str = "INR",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(key_secret=key_secret, currency=currency)
        self.key_id = key_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.RAZORPAY

    @property
    def is_live(self) -> bool:
        """Live keys move real money."""
        return self.key_id.startswith("rzp_live_")

    async def _create_order(self, amount_subunits: int, receipt: str | None) -> OrderHandle:
        payload: dict = {
            "amount": amount_subunits,
            "currency": self.currency,
            "payment_capture": 1,
        }
        if receipt:
            payload["receipt"] = receipt[:40]

        try:
            async with httpx.AsyncClient(
                auth=(self.key_id, self._key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(f"{self.api_url}/orders", json=payload)
        except httpx.TimeoutException:
            logger.warning("Razorpay order creation timed out after %ss", self.timeout)
            raise GatewayUnavailable("request timed out")
        except httpx.HTTPError as e:
            logger.warning("Razorpay order creation failed: %s", e)
            raise GatewayUnavailable(str(e))

        if response.status_code != 200:
            logger.warning(
                "Razorpay returned %s for order creation: %s",
                response.status_code,
                response.text[:200],
            )
            raise GatewayUnavailable(f"API returned {response.status_code}")

        try:
            data = response.json()
            return OrderHandle(
                id=data["id"],
                amount=int(data["amount"]),
                currency=data.get("currency", self.currency),
                raw_response=data,
            )
        except (ValueError, KeyError, TypeError):
            raise GatewayUnavailable("malformed order response")
