"""Tests for stay pricing."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import BadRequestError, InvalidPrice, InvalidRange
from app.domain.pricing import GST_RATE, compute_breakdown, count_nights, money, to_utc_date


class TestComputeBreakdown:
    def test_two_nights_with_gst(self):
        breakdown = compute_breakdown(1000, date(2025, 1, 1), date(2025, 1, 3))

        assert breakdown.nights == 2
        assert breakdown.subtotal == 2000
        assert breakdown.tax_amount == 360
        assert breakdown.grand_total == 2360
        assert breakdown.tax_rate == GST_RATE

    def test_grand_total_is_subtotal_plus_tax(self):
        breakdown = compute_breakdown(1499, "2025-02-10", "2025-02-17")

        assert breakdown.nights == 7
        assert breakdown.subtotal == 10493
        # 10493 * 0.18 = 1888.74
        assert breakdown.tax_amount == 1889
        assert breakdown.grand_total == breakdown.subtotal + breakdown.tax_amount

    def test_tax_rounds_half_up(self):
        # 2025 * 0.18 = 364.5
        breakdown = compute_breakdown(2025, date(2025, 1, 1), date(2025, 1, 2))
        assert breakdown.tax_amount == 365

    def test_custom_tax_rate(self):
        breakdown = compute_breakdown(1000, date(2025, 1, 1), date(2025, 1, 2), tax_rate=Decimal("0.12"))
        assert breakdown.tax_amount == 120
        assert breakdown.grand_total == 1120

    def test_as_dict_is_json_friendly(self):
        data = compute_breakdown(1000, date(2025, 1, 1), date(2025, 1, 3)).as_dict()
        assert data == {
            "per_night": 1000,
            "nights": 2,
            "subtotal": 2000,
            "tax_rate": 0.18,
            "tax_amount": 360,
            "grand_total": 2360,
        }

    @pytest.mark.parametrize("check_out", [date(2025, 1, 1), date(2024, 12, 31)])
    def test_rejects_non_positive_range(self, check_out):
        with pytest.raises(InvalidRange):
            compute_breakdown(1000, date(2025, 1, 1), check_out)

    @pytest.mark.parametrize("price", [0, -500])
    def test_rejects_non_positive_price(self, price):
        with pytest.raises(InvalidPrice):
            compute_breakdown(price, date(2025, 1, 1), date(2025, 1, 3))

    def test_range_checked_before_price(self):
        with pytest.raises(InvalidRange):
            compute_breakdown(0, date(2025, 1, 3), date(2025, 1, 1))


class TestNights:
    def test_datetimes_compare_as_utc_dates(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        # 2025-01-01 02:00 IST is still 2024-12-31 in UTC
        check_in = datetime(2025, 1, 1, 2, 0, tzinfo=ist)
        check_out = datetime(2025, 1, 3, 12, 0, tzinfo=timezone.utc)

        assert to_utc_date(check_in) == date(2024, 12, 31)
        assert count_nights(check_in, check_out) == 3

    def test_iso_strings(self):
        assert count_nights("2025-03-10", "2025-03-15") == 5
        assert count_nights("2025-03-10T00:00:00+00:00", "2025-03-11T00:00:00+00:00") == 1

    def test_garbage_date_is_bad_request(self):
        with pytest.raises(BadRequestError):
            to_utc_date("not-a-date")


class TestMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (1.49, 1), (2.5, 3), (Decimal("364.5"), 365), ("99.99", 100)],
    )
    def test_half_up(self, value, expected):
        assert money(value) == expected
