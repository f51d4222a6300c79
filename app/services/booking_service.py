"""Booking lifecycle: payment order, verification, confirmation, cancellation, removal.

A booking row exists only once a payment has been verified. The conflict check
and the insert for a listing run under that listing's lock, and the booking is
committed before any side effect runs. Side effects (owner notification,
receipt) are post-commit hooks: each one is isolated, logged on failure, and
can never undo the booking.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    DatesNotAvailable,
    NotFoundError,
    PaymentAlreadyUsed,
)
from app.core.locks import KeyedLock, listing_locks
from app.domain.booking_state import BookingStatus, assert_booking_transition
from app.domain.pricing import GST_RATE, PricingBreakdown, compute_breakdown
from app.gateways.base import OrderHandle
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.schemas.booking import BookingRequest
from app.services.availability_service import find_conflict
from app.services.gateway_service import GatewayService
from app.services.notification_service import NotificationService
from app.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

PostCommitHook = tuple[str, Callable[[], Awaitable[Any]]]


@dataclass
class ConfirmationResult:
    """Outcome of verify-and-confirm."""

    success: bool
    booking: Booking | None = None
    breakdown: PricingBreakdown | None = None
    receipt_url: str | None = None
    error: str | None = None


def receipt_url(booking_id: UUID) -> str:
    return f"{settings.api_prefix}/bookings/{booking_id}/receipt"


async def run_post_commit_hooks(hooks: list[PostCommitHook]) -> dict[str, Any]:
    """Run hooks in order; a failing hook is logged and yields None."""
    results: dict[str, Any] = {}
    for name, hook in hooks:
        try:
            results[name] = await hook()
        except Exception:
            logger.exception("Post-commit hook '%s' failed", name)
            results[name] = None
    return results


class BookingService:
    """Booking lifecycle controller."""

    def __init__(
        self,
        gateway: GatewayService,
        receipts: ReceiptService,
        notifications: NotificationService,
        locks: KeyedLock | None = None,
    ) -> None:
        self.gateway = gateway
        self.receipts = receipts
        self.notifications = notifications
        self.locks = locks or listing_locks

    # ==================== ORDER ====================

    async def create_order(self, amount: int | float) -> OrderHandle:
        """Open a gateway order for the checkout UI. Nothing is persisted."""
        return await self.gateway.create_order(amount)

    # ==================== CONFIRMATION ====================

    async def verify_and_confirm(
        self,
        db: AsyncSession,
        order_id: str,
        payment_id: str,
        signature: str,
        request: BookingRequest,
    ) -> ConfirmationResult:
        """Turn a signed payment into a confirmed booking.

        Returns:
            ConfirmationResult: success=False with an error for a bad signature

        Raises:
            NotFoundError: Listing or user missing
            InvalidRange: check_out is not after check_in
            DatesNotAvailable: Overlaps a confirmed booking
            PaymentAlreadyUsed: The order already confirmed a booking
        """
        if not self.gateway.verify_signature(order_id, payment_id, signature):
            return ConfirmationResult(success=False, error="Invalid signature")

        listing = await db.get(Listing, request.listing_id)
        if not listing:
            raise NotFoundError("Listing", str(request.listing_id))
        guest = await db.get(User, request.user_id)
        if not guest:
            raise NotFoundError("User", str(request.user_id))

        # Authoritative price from the listing, never the client total
        breakdown = compute_breakdown(listing.price, request.check_in, request.check_out, GST_RATE)

        booking = await self._insert_confirmed(db, listing, request, order_id, payment_id)
        booking_id = booking.id

        hook_results = await run_post_commit_hooks([
            ("notify_owner", lambda: self._notify_owner_created(db, booking, listing, guest)),
            ("receipt", lambda: self.receipts.generate(booking, listing, guest, breakdown)),
        ])

        receipt = receipt_url(booking_id) if hook_results.get("receipt") else None
        if receipt is None:
            logger.warning("Booking %s confirmed without a receipt", booking_id)

        return ConfirmationResult(
            success=True,
            booking=booking,
            breakdown=breakdown,
            receipt_url=receipt,
        )

    async def _insert_confirmed(
        self,
        db: AsyncSession,
        listing: Listing,
        request: BookingRequest,
        order_id: str,
        payment_id: str,
    ) -> Booking:
        """Conflict check and insert as one critical section per listing."""
        async with self.locks.hold(str(listing.id)):
            replay = await db.execute(select(Booking.id).where(Booking.order_id == order_id))
            if replay.scalar_one_or_none() is not None:
                raise PaymentAlreadyUsed()

            conflict = await find_conflict(db, listing.id, request.check_in, request.check_out)
            if conflict is not None:
                logger.info(
                    "Rejected booking on listing %s for %s..%s: overlaps booking %s",
                    listing.id,
                    request.check_in,
                    request.check_out,
                    conflict.id,
                )
                raise DatesNotAvailable()

            booking = Booking(
                listing_id=listing.id,
                user_id=request.user_id,
                check_in=request.check_in,
                check_out=request.check_out,
                guests=request.guests,
                payment_id=payment_id,
                order_id=order_id,
                status=BookingStatus.CONFIRMED.value,
                confirmed_at=datetime.now(UTC),
            )
            db.add(booking)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise PaymentAlreadyUsed()

        await db.refresh(booking)
        logger.info(
            "Booking %s confirmed on listing %s for %s..%s (order %s)",
            booking.id,
            listing.id,
            booking.check_in,
            booking.check_out,
            order_id,
        )
        return booking

    async def _notify_owner_created(
        self, db: AsyncSession, booking: Booking, listing: Listing, guest: User
    ) -> None:
        await self.notifications.emit(
            db,
            recipient_id=listing.owner_id,
            notification_type=NotificationService.BOOKING_CREATED,
            message=f"{guest.display_name} booked your property: {listing.title}",
            listing_id=listing.id,
            booking_id=booking.id,
        )

    # ==================== CANCELLATION / REMOVAL ====================

    async def _get_owned_booking(self, db: AsyncSession, booking_id: UUID, actor_id: UUID, action: str) -> Booking:
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if booking.user_id != actor_id:
            raise AuthorizationError(f"Not authorized to {action} this booking")
        return booking

    async def cancel(self, db: AsyncSession, booking_id: UUID, actor_id: UUID) -> Booking:
        """Cancel a booking; cancelling a cancelled booking is a no-op success."""
        booking = await self._get_owned_booking(db, booking_id, actor_id, "cancel")

        if not assert_booking_transition(booking.status, BookingStatus.CANCELLED):
            return booking

        booking.status = BookingStatus.CANCELLED.value
        booking.cancelled_at = datetime.now(UTC)
        await db.commit()
        logger.info("Booking %s cancelled by %s", booking.id, actor_id)

        await run_post_commit_hooks([
            ("notify_owner", lambda: self._notify_owner_cancelled(db, booking)),
        ])
        return booking

    async def _notify_owner_cancelled(self, db: AsyncSession, booking: Booking) -> None:
        listing = await db.get(Listing, booking.listing_id)
        if not listing:
            return
        guest = await db.get(User, booking.user_id)
        name = guest.display_name if guest else "A user"
        await self.notifications.emit(
            db,
            recipient_id=listing.owner_id,
            notification_type=NotificationService.BOOKING_CANCELLED,
            message=f"{name} cancelled a booking for: {listing.title}",
            listing_id=listing.id,
            booking_id=booking.id,
        )

    async def remove(self, db: AsyncSession, booking_id: UUID, actor_id: UUID) -> None:
        """Hard-delete a cancelled booking and its receipt."""
        booking = await self._get_owned_booking(db, booking_id, actor_id, "remove")

        assert_booking_transition(
            booking.status,
            BookingStatus.DELETED,
            detail="Booking must be cancelled before removal",
        )

        await db.delete(booking)
        await db.commit()
        logger.info("Booking %s removed by %s", booking_id, actor_id)

        await run_post_commit_hooks([
            ("delete_receipt", lambda: self.receipts.delete(booking_id)),
        ])

    # ==================== RECEIPTS / LISTS ====================

    async def receipt_for(self, db: AsyncSession, booking_id: UUID, actor_id: UUID):
        """Path of the receipt for the booking owner."""
        booking = await db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if booking.user_id != actor_id:
            raise AuthorizationError("Not authorized to access this receipt")
        if not self.receipts.exists(booking_id):
            raise NotFoundError("Receipt for this booking")
        return self.receipts.receipt_path(booking_id)

    async def list_for_user(
        self, db: AsyncSession, user_id: UUID, today: date
    ) -> tuple[list[tuple[Booking, Listing | None]], list[tuple[Booking, Listing | None]]]:
        """Split a user's bookings into upcoming (incl. ongoing) and past."""
        result = await db.execute(
            select(Booking, Listing)
            .join(Listing, Listing.id == Booking.listing_id, isouter=True)
            .where(Booking.user_id == user_id)
            .order_by(Booking.check_in.desc())
        )
        upcoming, past = [], []
        for booking, listing in result.all():
            (upcoming if booking.check_out >= today else past).append((booking, listing))
        return upcoming, past
