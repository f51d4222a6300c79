"""PDF receipts for confirmed bookings.

One file per booking, ``receipt_<booking id>.pdf``, in the receipts directory.
Files are rendered to a temp path and renamed into place, so readers never see
a partial receipt.
"""

import asyncio
import logging
import os
from datetime import UTC, date, datetime
from pathlib import Path
from uuid import UUID
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.config import settings
from app.core.exceptions import ReceiptGenerationError
from app.core.locks import KeyedLock, receipt_locks
from app.domain.pricing import PricingBreakdown
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Note: Amounts are indicative per your booking details. "
    "The final captured amount is as per your payment gateway receipt."
)


def _inr(amount: int) -> str:
    return f"INR {amount:,}"


def _fmt_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


class ReceiptService:
    """Renders, locates and removes booking receipts."""

    def __init__(self, receipts_dir: str | Path | None = None, locks: KeyedLock | None = None) -> None:
        self._dir = Path(receipts_dir or settings.receipts_dir)
        self._locks = locks or receipt_locks

    @property
    def receipts_dir(self) -> Path:
        return self._dir

    def _ensure_dir(self) -> Path:
        self._dir.mkdir(parents=True, exist_ok=True)
        return self._dir

    @staticmethod
    def filename(booking_id: UUID | str) -> str:
        return f"receipt_{booking_id}.pdf"

    def receipt_path(self, booking_id: UUID | str) -> Path:
        return self._dir / self.filename(booking_id)

    def exists(self, booking_id: UUID | str) -> bool:
        return self.receipt_path(booking_id).is_file()

    async def generate(
        self,
        booking: Booking,
        listing: Listing,
        guest: User,
        breakdown: PricingBreakdown,
        generated_at: datetime | None = None,
    ) -> Path:
        """Render the receipt for a confirmed booking.

        Same inputs and ``generated_at`` give a byte-identical file.

        Returns:
            Path: Location of the written receipt

        Raises:
            ReceiptGenerationError: If the file could not be written
        """
        generated_at = generated_at or datetime.now(UTC)
        path = self.receipt_path(booking.id)

        async with self._locks.hold(str(booking.id)):
            try:
                self._ensure_dir()
                await asyncio.to_thread(
                    self._render, path, booking, listing, guest, breakdown, generated_at
                )
            except Exception as e:
                raise ReceiptGenerationError(str(booking.id), str(e)) from e

        logger.info("Receipt written for booking %s at %s", booking.id, path)
        return path

    async def delete(self, booking_id: UUID | str) -> bool:
        """Remove a receipt if present. Missing files are not an error."""
        path = self.receipt_path(booking_id)
        async with self._locks.hold(str(booking_id)):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
        return True

    def _render(
        self,
        path: Path,
        booking: Booking,
        listing: Listing,
        guest: User,
        breakdown: PricingBreakdown,
        generated_at: datetime,
    ) -> None:
        styles = getSampleStyleSheet()
        right = ParagraphStyle(name="Right", parent=styles["Normal"], alignment=TA_RIGHT)
        center = ParagraphStyle(name="Center", parent=styles["Normal"], alignment=TA_CENTER)
        story = []

        # Header
        story.append(Paragraph("Booking Receipt", styles["Title"]))
        story.append(Paragraph(f"Date: {_fmt_date(generated_at)}", right))
        story.append(Spacer(1, 12))

        # Brand / contact
        story.append(
            Paragraph(
                f"<b>{escape(settings.brand_name)}</b> &bull; "
                f"{escape(settings.support_email)} &bull; {escape(settings.support_phone)}",
                styles["Normal"],
            )
        )
        story.append(Spacer(1, 12))

        # Identifiers
        for label, value in (
            ("Booking ID", booking.id),
            ("Order ID", booking.order_id),
            ("Payment ID", booking.payment_id),
        ):
            story.append(Paragraph(f"{label}: {escape(str(value))}", styles["Normal"]))
        story.append(Spacer(1, 12))

        # Stay details
        details = Table(
            [
                ["Guest Name", guest.display_name],
                ["Listing", listing.title],
                ["Location", listing.location or ""],
                ["Check-In", _fmt_date(booking.check_in)],
                ["Check-Out", _fmt_date(booking.check_out)],
                ["Guests", str(booking.guests)],
            ],
            colWidths=[120, 380],
        )
        details.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        story.append(details)
        story.append(Spacer(1, 16))

        # Pricing
        story.append(Paragraph("<u>Pricing</u>", styles["Heading3"]))
        tax_percent = f"{breakdown.tax_rate * 100:.0f}"
        pricing = Table(
            [
                [f"Price per night x {breakdown.nights} night(s)", _inr(breakdown.subtotal)],
                [f"GST ({tax_percent}%)", _inr(breakdown.tax_amount)],
                ["Grand Total", _inr(breakdown.grand_total)],
            ],
            colWidths=[380, 120],
        )
        pricing.setStyle(TableStyle([
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, -1), (-1, -1), 13),
            ("TOPPADDING", (0, -1), (-1, -1), 8),
        ]))
        story.append(pricing)
        story.append(Spacer(1, 24))

        # Footer
        story.append(Paragraph(DISCLAIMER, styles["Normal"]))
        story.append(Spacer(1, 18))
        story.append(Paragraph(f"Thank you for booking with {escape(settings.brand_name)}!", center))

        tmp_path = path.with_name(path.name + ".tmp")
        doc = SimpleDocTemplate(
            str(tmp_path),
            pagesize=A4,
            rightMargin=50,
            leftMargin=50,
            topMargin=50,
            bottomMargin=50,
            title=f"Receipt {booking.id}",
            author=settings.brand_name,
            invariant=1,
        )
        try:
            doc.build(story)
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


_receipt_service: ReceiptService | None = None


def get_receipt_service() -> ReceiptService:
    """Process-wide receipt service."""
    global _receipt_service
    if _receipt_service is None:
        _receipt_service = ReceiptService()
    return _receipt_service
