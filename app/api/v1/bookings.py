"""Booking endpoints."""

from datetime import UTC, date, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_booking_service, get_current_active_user, get_db
from app.core.exceptions import DatesNotAvailable, NotFoundError, PaymentAlreadyUsed
from app.core.middleware import booking_limiter, order_limiter
from app.domain.pricing import compute_breakdown
from app.models.listing import Listing
from app.models.user import User
from app.schemas.booking import (
    BlockedDatesResponse,
    BlockedRangeResponse,
    CreateOrderRequest,
    MyBookingItem,
    MyBookingsResponse,
    OrderResponse,
    PriceBreakdown,
    QuoteRequest,
    QuoteResponse,
    StatusResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from app.services.availability_service import get_blocked_ranges, is_available
from app.services.booking_service import BookingService

router = APIRouter()


def _today() -> date:
    return datetime.now(UTC).date()


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


@router.post("/create-order", response_model=OrderResponse, dependencies=[Depends(order_limiter)])
async def create_order(
    body: CreateOrderRequest,
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> OrderResponse:
    """Create a payment order for the checkout UI."""
    order = await service.create_order(body.amount)
    return OrderResponse(**order.as_dict())


@router.get("/listing/{listing_id}/blocked-dates", response_model=BlockedDatesResponse)
async def blocked_dates(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    as_of: date | None = Query(default=None),
) -> BlockedDatesResponse:
    """Date ranges already held by confirmed bookings, end exclusive."""
    ranges = await get_blocked_ranges(db, listing_id, as_of or _today())
    return BlockedDatesResponse(
        ranges=[BlockedRangeResponse(start=r.start, end=r.end) for r in ranges]
    )


@router.post("/quote", response_model=QuoteResponse)
async def quote(
    body: QuoteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> QuoteResponse:
    """Price a stay and check it against confirmed bookings without booking it."""
    listing = await db.get(Listing, body.listing_id)
    if not listing:
        return QuoteResponse(available=False, unavailable_reason="Listing not available")

    breakdown = compute_breakdown(listing.price, body.check_in, body.check_out)

    if not await is_available(db, listing.id, body.check_in, body.check_out):
        return QuoteResponse(
            available=False,
            breakdown=PriceBreakdown(**breakdown.as_dict()),
            unavailable_reason="Selected dates overlap with an existing booking",
        )

    return QuoteResponse(available=True, breakdown=PriceBreakdown(**breakdown.as_dict()))


@router.post("/verify", response_model=VerifyPaymentResponse, dependencies=[Depends(booking_limiter)])
async def verify_payment(
    body: VerifyPaymentRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BookingService, Depends(get_booking_service)],
):
    """Verify a signed payment and confirm the booking it paid for."""
    try:
        result = await service.verify_and_confirm(
            db,
            order_id=body.order_id,
            payment_id=body.payment_id,
            signature=body.signature,
            request=body.booking,
        )
    except (DatesNotAvailable, PaymentAlreadyUsed) as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "detail": e.detail})

    if not result.success:
        return VerifyPaymentResponse(success=False, error=result.error)

    return VerifyPaymentResponse(
        success=True,
        booking_id=result.booking.id,
        breakdown=PriceBreakdown(**result.breakdown.as_dict()),
        receipt=result.receipt_url,
    )


@router.get("/mine", response_model=MyBookingsResponse)
async def my_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> MyBookingsResponse:
    """Current user's bookings split into upcoming (incl. ongoing) and past."""
    upcoming, past = await service.list_for_user(db, current_user.id, _today())

    def item(booking, listing) -> MyBookingItem:
        return MyBookingItem.model_validate(booking).model_copy(
            update={
                "listing_title": listing.title if listing else None,
                "listing_location": listing.location if listing else None,
                "receipt_available": service.receipts.exists(booking.id),
            }
        )

    return MyBookingsResponse(
        upcoming=[item(b, listing) for b, listing in upcoming],
        past=[item(b, listing) for b, listing in past],
    )


@router.post("/{booking_id}/cancel", response_model=StatusResponse)
async def cancel_booking(
    booking_id: UUID,
    request: Request,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BookingService, Depends(get_booking_service)],
):
    """Cancel a booking (owner only). Repeating the call is harmless."""
    booking = await service.cancel(db, booking_id, current_user.id)
    if _wants_html(request):
        return RedirectResponse(f"/profile/{current_user.id}", status_code=303)
    return StatusResponse(success=True, status=booking.status)


@router.post("/{booking_id}/remove", response_model=StatusResponse)
async def remove_booking(
    booking_id: UUID,
    request: Request,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BookingService, Depends(get_booking_service)],
):
    """Delete a cancelled booking and its receipt (owner only)."""
    await service.remove(db, booking_id, current_user.id)
    if _wants_html(request):
        return RedirectResponse(f"/profile/{current_user.id}", status_code=303)
    return StatusResponse(success=True)


@router.get("/{booking_id}/receipt", response_class=FileResponse)
async def download_receipt(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> FileResponse:
    """Download the PDF receipt (owner only)."""
    path = await service.receipt_for(db, booking_id, current_user.id)
    if not path.is_file():
        raise NotFoundError("Receipt for this booking")
    return FileResponse(path, media_type="application/pdf", filename=path.name)
