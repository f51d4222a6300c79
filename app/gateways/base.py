"""Base payment gateway interface.

All gateway adapters must implement this interface.
Business logic should NOT live in adapters - only gateway communication.
Adapters answer "is this payment authentic"; they never confirm bookings.
"""

import hashlib
import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import InvalidAmount
from app.domain.pricing import money


class GatewayType(str, Enum):
    """Supported payment gateways."""

    RAZORPAY = "razorpay"
    MANUAL = "manual"


@dataclass(frozen=True)
class OrderHandle:
    """Order created with the gateway; amount is in the smallest unit (paise)."""

    id: str
    amount: int
    currency: str
    raw_response: dict | None = None

    def as_dict(self) -> dict:
        return {"id": self.id, "amount": self.amount, "currency": self.currency}


class PaymentGateway(ABC):
    """Abstract base class for payment gateways.

    Credentials are fixed at construction; instances are safe to share across
    requests.
    """

    def __init__(self, key_secret: str, currency: str = "INR") -> None:
        self._key_secret = key_secret
        self.currency = currency

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""

    @abstractmethod
    async def _create_order(self, amount_subunits: int, receipt: str | None) -> OrderHandle:
        """Create the order with the processor.

        Raises:
            GatewayUnavailable: On network or service failure.
        """

    async def create_order(self, amount: int | float, receipt: str | None = None) -> OrderHandle:
        """Create a payment order for an amount in whole currency units.

        Args:
            amount: Amount including tax, in rupees
            receipt: Optional merchant reference

        Returns:
            OrderHandle with the amount converted to paise

        Raises:
            InvalidAmount: amount rounds to zero or below
            GatewayUnavailable: processor unreachable or rejected the order
        """
        try:
            rupees = money(amount)
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidAmount()
        if rupees <= 0:
            raise InvalidAmount()
        return await self._create_order(rupees * 100, receipt)

    def generate_signature(self, order_id: str, payment_id: str) -> str:
        """HMAC-SHA256 hex digest of ``order_id|payment_id``."""
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self._key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check a checkout signature in constant time. Never raises for bad input."""
        if not all(isinstance(v, str) and v for v in (order_id, payment_id, signature)):
            return False
        try:
            expected = self.generate_signature(order_id, payment_id)
            return hmac.compare_digest(expected.encode(), signature.encode())
        except (UnicodeEncodeError, ValueError):
            return False
