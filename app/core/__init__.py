"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    DatesNotAvailable,
    GatewayUnavailable,
    InvalidAmount,
    InvalidBookingStatus,
    InvalidPrice,
    InvalidRange,
    NotFoundError,
    PaymentAlreadyUsed,
    ReceiptGenerationError,
)
from app.core.locks import KeyedLock, listing_locks, receipt_locks
from app.core.security import create_access_token, token_subject, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "DatesNotAvailable",
    "GatewayUnavailable",
    "InvalidAmount",
    "InvalidBookingStatus",
    "InvalidPrice",
    "InvalidRange",
    "NotFoundError",
    "PaymentAlreadyUsed",
    "ReceiptGenerationError",
    "KeyedLock",
    "listing_locks",
    "receipt_locks",
    "create_access_token",
    "token_subject",
    "verify_token",
]
