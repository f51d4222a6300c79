"""Payment gateway service.

Routes payment operations to the configured gateway adapter.
No business logic here - only gateway coordination.
"""

import logging

from app.config import Settings, settings
from app.gateways.base import GatewayType, OrderHandle, PaymentGateway
from app.gateways.manual import ManualGateway
from app.gateways.razorpay import RazorpayGateway

logger = logging.getLogger(__name__)


def _assert_live_keys_allowed(gateway: PaymentGateway, config: Settings) -> None:
    """Block live Razorpay keys outside production.

    Raises:
        RuntimeError: If live keys are configured in a non-production environment
    """
    if isinstance(gateway, RazorpayGateway) and gateway.is_live and config.environment != "production":
        raise RuntimeError(
            f"Cannot use live {gateway.gateway_type.value} keys in {config.environment} "
            "environment. Set ENVIRONMENT=production or use rzp_test_ keys."
        )


def build_gateway(config: Settings) -> PaymentGateway:
    """Construct the gateway adapter named in settings."""
    gateway_type = GatewayType(config.payment_gateway)
    if gateway_type == GatewayType.RAZORPAY:
        if not config.razorpay_key_id:
            raise RuntimeError("RAZORPAY_KEY_ID must be set when PAYMENT_GATEWAY=razorpay")
        gateway: PaymentGateway = RazorpayGateway(
            key_id=config.razorpay_key_id,
            key_secret=config.razorpay_key_secret,
            api_url=config.razorpay_api_url,
            currency=config.currency,
            timeout=config.gateway_timeout_seconds,
        )
    else:
        gateway = ManualGateway(key_secret=config.razorpay_key_secret, currency=config.currency)

    _assert_live_keys_allowed(gateway, config)
    return gateway


class GatewayService:
    """Service for managing payment gateway operations."""

    def __init__(self, gateway: PaymentGateway):
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway

    async def create_order(self, amount: int | float, receipt: str | None = None) -> OrderHandle:
        """Create payment order via the configured gateway."""
        order = await self._gateway.create_order(amount, receipt=receipt)
        logger.info(
            "Created %s order %s for %s %s",
            self._gateway.gateway_type.value,
            order.id,
            order.amount,
            order.currency,
        )
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check that a checkout result was signed by the gateway."""
        valid = self._gateway.verify_signature(order_id, payment_id, signature)
        if not valid:
            logger.warning("Rejected payment signature for order %s", order_id)
        return valid


_gateway_service: GatewayService | None = None


def get_gateway_service() -> GatewayService:
    """Process-wide gateway service, built on first use."""
    global _gateway_service
    if _gateway_service is None:
        _gateway_service = GatewayService(build_gateway(settings))
    return _gateway_service
