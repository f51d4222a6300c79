"""Offline gateway for development and tests."""

import uuid

from app.gateways.base import GatewayType, OrderHandle, PaymentGateway


class ManualGateway(PaymentGateway):
    """Issues local order ids without contacting a processor.

    Checkout signatures use the same HMAC scheme as Razorpay, so a client can
    complete the flow with ``generate_signature``.
    """

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.MANUAL

    async def _create_order(self, amount_subunits: int, receipt: str | None) -> OrderHandle:
        order_id = f"order_{uuid.uuid4().hex[:14]}"
        return OrderHandle(
            id=order_id,
            amount=amount_subunits,
            currency=self.currency,
            raw_response={
                "id": order_id,
                "amount": amount_subunits,
                "currency": self.currency,
                "receipt": receipt,
                "status": "created",
            },
        )
