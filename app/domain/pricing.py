"""Stay pricing: nights, subtotal, GST and grand total.

All amounts are whole currency units (rupees). Rounding is half-up to the
nearest unit at every step that produces a persisted or displayed amount.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal

from app.core.exceptions import BadRequestError, InvalidPrice, InvalidRange

GST_RATE = Decimal("0.18")

DateLike = date | datetime | str


@dataclass(frozen=True)
class PricingBreakdown:
    """Derived price of a stay. Never persisted."""

    per_night: int
    nights: int
    subtotal: int
    tax_rate: Decimal
    tax_amount: int
    grand_total: int

    def as_dict(self) -> dict:
        data = asdict(self)
        data["tax_rate"] = float(self.tax_rate)
        return data


def money(value: Decimal | int | float | str) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_utc_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to its UTC calendar date."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value) if len(value) == 10 else datetime.fromisoformat(value)
        except ValueError:
            raise BadRequestError(f"Invalid date: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def count_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Whole nights between two dates compared at UTC midnight."""
    start = to_utc_date(check_in)
    end = to_utc_date(check_out)
    if end <= start:
        raise InvalidRange()
    return max(1, (end - start).days)


def compute_breakdown(
    per_night_price: Decimal | int | float,
    check_in: DateLike,
    check_out: DateLike,
    tax_rate: Decimal | float = GST_RATE,
) -> PricingBreakdown:
    """Compute the price breakdown for a stay.

    Args:
        per_night_price: Listing price per night
        check_in: Arrival date
        check_out: Departure date (exclusive)
        tax_rate: Fractional tax rate, 0.18 for GST

    Returns:
        PricingBreakdown

    Raises:
        InvalidRange: check_out is not after check_in
        InvalidPrice: per_night_price is not positive
    """
    nights = count_nights(check_in, check_out)

    price = Decimal(str(per_night_price))
    if price <= 0:
        raise InvalidPrice()

    rate = Decimal(str(tax_rate))
    subtotal = money(price * nights)
    tax_amount = money(Decimal(subtotal) * rate)

    return PricingBreakdown(
        per_night=money(price),
        nights=nights,
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        grand_total=subtotal + tax_amount,
    )
