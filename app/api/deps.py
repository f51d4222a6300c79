"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import token_subject
from app.database import get_db
from app.models.user import User
from app.services.booking_service import BookingService
from app.services.gateway_service import GatewayService, get_gateway_service
from app.services.notification_service import notification_service
from app.services.receipt_service import ReceiptService, get_receipt_service

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user = await db.get(User, token_subject(credentials.credentials))
    if not user:
        raise AuthenticationError("User not found")
    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise AuthorizationError("User account is deactivated")
    return current_user


def get_booking_service(
    gateway: Annotated[GatewayService, Depends(get_gateway_service)],
    receipts: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> BookingService:
    """Booking controller wired with the process-wide collaborators."""
    return BookingService(gateway=gateway, receipts=receipts, notifications=notification_service)
