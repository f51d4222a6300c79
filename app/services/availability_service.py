"""Availability index over confirmed bookings."""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.availability import BlockedRange, sort_ranges
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking


async def get_blocked_ranges(db: AsyncSession, listing_id: UUID, as_of: date) -> list[BlockedRange]:
    """Ranges held by confirmed bookings that end after ``as_of``.

    Args:
        db: Database session
        listing_id: Listing to inspect
        as_of: Usually today; ranges ending on or before it are dropped

    Returns:
        list[BlockedRange]: Sorted by start, then end
    """
    result = await db.execute(
        select(Booking.check_in, Booking.check_out).where(
            Booking.listing_id == listing_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.check_out > as_of,
        )
    )
    return sort_ranges([BlockedRange(start=row.check_in, end=row.check_out) for row in result])


async def find_conflict(
    db: AsyncSession,
    listing_id: UUID,
    check_in: date,
    check_out: date,
) -> Booking | None:
    """First confirmed booking on the listing overlapping [check_in, check_out)."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.listing_id == listing_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        .order_by(Booking.check_in, Booking.check_out)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def is_available(db: AsyncSession, listing_id: UUID, check_in: date, check_out: date) -> bool:
    """Check if dates are available for a listing."""
    return await find_conflict(db, listing_id, check_in, check_out) is None
