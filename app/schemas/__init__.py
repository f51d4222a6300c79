"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BlockedDatesResponse,
    BookingRequest,
    BookingResponse,
    CreateOrderRequest,
    MyBookingsResponse,
    OrderResponse,
    PriceBreakdown,
    QuoteRequest,
    QuoteResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from app.schemas.notification import NotificationListResponse, NotificationResponse

__all__ = [
    # Booking
    "BlockedDatesResponse",
    "BookingRequest",
    "BookingResponse",
    "CreateOrderRequest",
    "MyBookingsResponse",
    "OrderResponse",
    "PriceBreakdown",
    "QuoteRequest",
    "QuoteResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    # Notification
    "NotificationListResponse",
    "NotificationResponse",
]
