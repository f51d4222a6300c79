"""Booking state machine."""

from enum import Enum

from app.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Persisted booking states plus the terminal removal marker."""

    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    DELETED = "Deleted"


BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: {BookingStatus.DELETED},
    BookingStatus.DELETED: set(),
}

# Re-applying these leaves the booking untouched and still succeeds
IDEMPOTENT_TRANSITIONS: set[tuple[BookingStatus, BookingStatus]] = {
    (BookingStatus.CANCELLED, BookingStatus.CANCELLED),
}


def assert_booking_transition(
    current: str | BookingStatus,
    target: str | BookingStatus,
    detail: str | None = None,
) -> bool:
    """Validate a transition.

    ``detail`` replaces the generic message on a disallowed transition.

    Returns:
        bool: True when the status changes, False for an idempotent no-op.

    Raises:
        InvalidBookingStatus: If the transition is not allowed.
    """
    try:
        current = BookingStatus(current)
        target = BookingStatus(target)
    except ValueError:
        raise InvalidBookingStatus(f"Unknown booking status: {current} → {target}")

    if (current, target) in IDEMPOTENT_TRANSITIONS:
        return False

    if target not in BOOKING_TRANSITIONS.get(current, set()):
        raise InvalidBookingStatus(
            detail or f"Invalid booking transition: {current.value} → {target.value}"
        )
    return True
