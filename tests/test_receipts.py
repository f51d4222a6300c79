"""Tests for PDF receipt generation."""

import uuid
from datetime import UTC, date, datetime

import pytest

from app.core.exceptions import ReceiptGenerationError
from app.domain.pricing import compute_breakdown
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.services.receipt_service import ReceiptService

GENERATED_AT = datetime(2025, 1, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def stay():
    guest = User(id=uuid.uuid4(), email="guest@example.com", username="Arjun Guest")
    listing = Listing(id=uuid.uuid4(), owner_id=uuid.uuid4(), title="Sea View Villa", location="Goa", price=1000)
    booking = Booking(
        id=uuid.uuid4(),
        listing_id=listing.id,
        user_id=guest.id,
        check_in=date(2025, 1, 1),
        check_out=date(2025, 1, 3),
        guests=2,
        order_id="order_abc123",
        payment_id="pay_xyz789",
        status="Confirmed",
    )
    breakdown = compute_breakdown(listing.price, booking.check_in, booking.check_out)
    return booking, listing, guest, breakdown


class TestReceiptService:
    async def test_writes_pdf_named_after_booking(self, tmp_path, stay):
        service = ReceiptService(receipts_dir=tmp_path / "receipts")
        booking = stay[0]

        path = await service.generate(*stay, generated_at=GENERATED_AT)

        assert path == tmp_path / "receipts" / f"receipt_{booking.id}.pdf"
        assert path.read_bytes().startswith(b"%PDF")
        assert service.exists(booking.id)
        assert not list(path.parent.glob("*.tmp"))

    async def test_same_inputs_same_bytes(self, tmp_path, stay):
        service = ReceiptService(receipts_dir=tmp_path)

        first = (await service.generate(*stay, generated_at=GENERATED_AT)).read_bytes()
        second = (await service.generate(*stay, generated_at=GENERATED_AT)).read_bytes()

        assert first == second

    async def test_write_failure_raises_receipt_error(self, tmp_path, stay):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        service = ReceiptService(receipts_dir=blocker)

        with pytest.raises(ReceiptGenerationError):
            await service.generate(*stay, generated_at=GENERATED_AT)

    async def test_delete(self, tmp_path, stay):
        service = ReceiptService(receipts_dir=tmp_path)
        booking = stay[0]
        await service.generate(*stay, generated_at=GENERATED_AT)

        assert await service.delete(booking.id) is True
        assert not service.exists(booking.id)

    async def test_delete_missing_is_not_an_error(self, tmp_path):
        service = ReceiptService(receipts_dir=tmp_path)
        assert await service.delete(uuid.uuid4()) is False
