"""Notification sink for booking events.

Emission is fire-and-forget: failures are logged and never reach the caller.
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for in-app notifications."""

    BOOKING_CREATED = "booking_created"
    BOOKING_CANCELLED = "booking_cancelled"

    async def create_notification(
        self,
        db: AsyncSession,
        recipient_id: UUID,
        notification_type: str,
        message: str,
        listing_id: UUID | None = None,
        booking_id: UUID | None = None,
    ) -> Notification:
        """Create and commit an in-app notification.

        Args:
            db: Database session
            recipient_id: User to notify
            notification_type: Type of notification
            message: Body text
            listing_id: Related listing ID
            booking_id: Related booking ID

        Returns:
            Notification: Created notification
        """
        notification = Notification(
            recipient_id=recipient_id,
            notification_type=notification_type,
            message=message,
            listing_id=listing_id,
            booking_id=booking_id,
        )
        db.add(notification)
        await db.commit()
        return notification

    async def emit(
        self,
        db: AsyncSession,
        recipient_id: UUID | None,
        notification_type: str,
        message: str,
        listing_id: UUID | None = None,
        booking_id: UUID | None = None,
    ) -> Notification | None:
        """Best-effort notification. Returns None when nothing was stored.

        Written in a session of its own on the caller's engine, so a failed
        insert rolls back only the notification and never expires the
        caller's objects.
        """
        if recipient_id is None:
            return None
        async with AsyncSession(db.bind, expire_on_commit=False, autoflush=False) as session:
            try:
                return await self.create_notification(
                    session,
                    recipient_id=recipient_id,
                    notification_type=notification_type,
                    message=message,
                    listing_id=listing_id,
                    booking_id=booking_id,
                )
            except SQLAlchemyError:
                logger.exception(
                    "Notification %s for booking %s could not be stored", notification_type, booking_id
                )
                await session.rollback()
                return None

    async def mark_read(self, notification: Notification) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(UTC)
        return notification


notification_service = NotificationService()
