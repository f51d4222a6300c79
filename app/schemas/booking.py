"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateOrderRequest(BaseModel):
    """Amount to charge, in whole rupees, including tax."""

    amount: float


class OrderResponse(BaseModel):
    """Gateway order handle returned to the checkout UI."""

    id: str
    amount: int  # paise
    currency: str


class BookingRequest(BaseModel):
    """Stay the client paid for."""

    listing_id: UUID
    user_id: UUID
    check_in: date
    check_out: date
    guests: int = Field(default=1, ge=1, le=50)

    @field_validator("check_out")
    @classmethod
    def validate_checkout(cls, v: date, info) -> date:
        check_in = info.data.get("check_in")
        if check_in and v <= check_in:
            raise ValueError("check_out must be after check_in")
        return v


class VerifyPaymentRequest(BaseModel):
    """Checkout result posted back after the gateway collects payment."""

    order_id: str = Field(..., min_length=1, max_length=100)
    payment_id: str = Field(..., min_length=1, max_length=100)
    signature: str = Field(..., min_length=1, max_length=256)
    booking: BookingRequest


class PriceBreakdown(BaseModel):
    """Server-computed price of a stay, whole rupees."""

    model_config = ConfigDict(from_attributes=True)

    per_night: int
    nights: int
    subtotal: int
    tax_rate: float
    tax_amount: int
    grand_total: int


class VerifyPaymentResponse(BaseModel):
    """Outcome of verify-and-confirm."""

    success: bool
    booking_id: UUID | None = None
    breakdown: PriceBreakdown | None = None
    receipt: str | None = None
    error: str | None = None


class BlockedRangeResponse(BaseModel):
    start: date
    end: date


class BlockedDatesResponse(BaseModel):
    ranges: list[BlockedRangeResponse]


class QuoteRequest(BaseModel):
    """Schema for pricing a stay without booking it."""

    listing_id: UUID
    check_in: date
    check_out: date
    guests: int = Field(default=1, ge=1, le=50)

    @field_validator("check_out")
    @classmethod
    def validate_checkout(cls, v: date, info) -> date:
        check_in = info.data.get("check_in")
        if check_in and v <= check_in:
            raise ValueError("check_out must be after check_in")
        return v


class QuoteResponse(BaseModel):
    available: bool
    breakdown: PriceBreakdown | None = None
    unavailable_reason: str | None = None


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    user_id: UUID
    check_in: date
    check_out: date
    nights: int
    guests: int
    payment_id: str
    order_id: str
    status: str
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None


class StatusResponse(BaseModel):
    success: bool = True
    status: str | None = None


class MyBookingItem(BookingResponse):
    """Booking with the listing fields shown in "My bookings"."""

    listing_title: str | None = None
    listing_location: str | None = None
    receipt_available: bool = False


class MyBookingsResponse(BaseModel):
    upcoming: list[MyBookingItem]
    past: list[MyBookingItem]
