"""Database models."""

from app.models.booking import Booking
from app.models.listing import Listing
from app.models.notification import Notification
from app.models.user import User

__all__ = [
    # User
    "User",
    # Listing
    "Listing",
    # Booking
    "Booking",
    # Notification
    "Notification",
]
