"""Notification Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Schema for a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    notification_type: str
    message: str
    listing_id: UUID | None
    booking_id: UUID | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Schema for the notification inbox."""

    notifications: list[NotificationResponse]
    total: int
    unread_count: int
