"""End-to-end tests for the booking endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

API = "/api/v1/bookings"


def future_stay(listing, guest, start_in_days: int = 30, nights: int = 2) -> dict:
    check_in = datetime.now(UTC).date() + timedelta(days=start_in_days)
    return {
        "listing_id": str(listing.id),
        "user_id": str(guest.id),
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=nights)).isoformat(),
        "guests": 2,
    }


@pytest.fixture
def verify(client, signed_payment):
    async def _verify(booking: dict, order_id: str | None = None):
        order_id, payment_id, signature = signed_payment(order_id)
        return await client.post(
            f"{API}/verify",
            json={
                "order_id": order_id,
                "payment_id": payment_id,
                "signature": signature,
                "booking": booking,
            },
        )

    return _verify


class TestBookingFlow:
    async def test_order_verify_receipt_cancel_remove(
        self, client, verify, receipts, listing, guest, auth_headers
    ):
        booking = future_stay(listing, guest)
        headers = auth_headers(guest)

        # Checkout opens an order for the quoted total
        response = await client.post(f"{API}/create-order", json={"amount": 2360})
        assert response.status_code == 200
        order = response.json()
        assert order["amount"] == 236000
        assert order["currency"] == "INR"

        # Signed payment confirms the booking
        response = await verify(booking, order_id=order["id"])
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["breakdown"]["nights"] == 2
        assert body["breakdown"]["grand_total"] == 2360
        booking_id = body["booking_id"]
        assert body["receipt"] == f"{API}/{booking_id}/receipt"

        # Dates are now blocked
        response = await client.get(f"{API}/listing/{listing.id}/blocked-dates")
        assert response.json() == {
            "ranges": [{"start": booking["check_in"], "end": booking["check_out"]}]
        }

        # Receipt download
        response = await client.get(body["receipt"], headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

        # Shows as upcoming
        response = await client.get(f"{API}/mine", headers=headers)
        mine = response.json()
        assert [b["id"] for b in mine["upcoming"]] == [booking_id]
        assert mine["upcoming"][0]["listing_title"] == "Sea View Villa"
        assert mine["upcoming"][0]["receipt_available"] is True
        assert mine["past"] == []

        # Cancel, twice
        for _ in range(2):
            response = await client.post(f"{API}/{booking_id}/cancel", headers=headers)
            assert response.status_code == 200
            assert response.json() == {"success": True, "status": "Cancelled"}

        response = await client.get(f"{API}/listing/{listing.id}/blocked-dates")
        assert response.json() == {"ranges": []}

        # Remove
        response = await client.post(f"{API}/{booking_id}/remove", headers=headers)
        assert response.status_code == 200
        assert not receipts.exists(booking_id)

        response = await client.get(body["receipt"], headers=headers)
        assert response.status_code == 404

    async def test_overlap_is_409(self, client, verify, listing, guest):
        await verify(future_stay(listing, guest, start_in_days=30, nights=5))

        response = await verify(future_stay(listing, guest, start_in_days=32, nights=2))

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert "no longer available" in body["detail"]

    async def test_replayed_order_is_409(self, client, verify, listing, guest):
        first = await verify(future_stay(listing, guest, start_in_days=30), order_id="order_replay01")
        assert first.json()["success"] is True

        response = await verify(future_stay(listing, guest, start_in_days=60), order_id="order_replay01")

        assert response.status_code == 409
        assert response.json()["success"] is False


class TestVerifyErrors:
    async def test_bad_signature(self, client, listing, guest):
        response = await client.post(
            f"{API}/verify",
            json={
                "order_id": "order_abc",
                "payment_id": "pay_xyz",
                "signature": "0" * 64,
                "booking": future_stay(listing, guest),
            },
        )

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["error"] == "Invalid signature"

    async def test_missing_fields_is_400(self, client, listing, guest):
        response = await client.post(f"{API}/verify", json={"order_id": "order_abc"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing or invalid fields"

    async def test_reversed_dates_is_400(self, client, verify, listing, guest):
        booking = future_stay(listing, guest)
        booking["check_in"], booking["check_out"] = booking["check_out"], booking["check_in"]

        response = await verify(booking)

        assert response.status_code == 400

    async def test_unknown_listing_is_404(self, client, verify, listing, guest):
        booking = future_stay(listing, guest)
        booking["listing_id"] = str(uuid4())

        response = await verify(booking)

        assert response.status_code == 404


class TestCreateOrder:
    @pytest.mark.parametrize("amount", [0, -100])
    async def test_non_positive_amount_is_400(self, client, amount):
        response = await client.post(f"{API}/create-order", json={"amount": amount})
        assert response.status_code == 400

    async def test_missing_amount_is_400(self, client):
        response = await client.post(f"{API}/create-order", json={})
        assert response.status_code == 400


class TestQuote:
    async def test_available_quote(self, client, listing, guest):
        response = await client.post(f"{API}/quote", json=future_stay(listing, guest, nights=3))

        body = response.json()
        assert body["available"] is True
        assert body["breakdown"]["subtotal"] == 3000
        assert body["breakdown"]["tax_amount"] == 540
        assert body["breakdown"]["grand_total"] == 3540

    async def test_taken_dates(self, client, verify, listing, guest):
        await verify(future_stay(listing, guest, start_in_days=30, nights=5))

        response = await client.post(f"{API}/quote", json=future_stay(listing, guest, start_in_days=31))

        body = response.json()
        assert body["available"] is False
        assert body["breakdown"]["grand_total"] == 2360
        assert body["unavailable_reason"]

    async def test_unknown_listing(self, client, listing, guest):
        stay = future_stay(listing, guest)
        stay["listing_id"] = str(uuid4())

        response = await client.post(f"{API}/quote", json=stay)

        assert response.json()["available"] is False


class TestOwnership:
    async def _book(self, verify, listing, guest) -> str:
        response = await verify(future_stay(listing, guest))
        return response.json()["booking_id"]

    async def test_auth_required(self, client, verify, listing, guest):
        booking_id = await self._book(verify, listing, guest)

        response = await client.post(f"{API}/{booking_id}/cancel")

        assert response.status_code in (401, 403)

    async def test_invalid_token(self, client):
        response = await client.get(f"{API}/mine", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    async def test_other_user_cannot_cancel(self, client, verify, listing, guest, other_user, auth_headers):
        booking_id = await self._book(verify, listing, guest)

        response = await client.post(f"{API}/{booking_id}/cancel", headers=auth_headers(other_user))

        assert response.status_code == 403

    async def test_other_user_cannot_download_receipt(
        self, client, verify, listing, guest, other_user, auth_headers
    ):
        booking_id = await self._book(verify, listing, guest)

        response = await client.get(f"{API}/{booking_id}/receipt", headers=auth_headers(other_user))

        assert response.status_code == 403

    async def test_unknown_booking_is_404(self, client, guest, auth_headers):
        response = await client.post(f"{API}/{uuid4()}/cancel", headers=auth_headers(guest))
        assert response.status_code == 404

    async def test_remove_confirmed_is_400(self, client, verify, listing, guest, auth_headers):
        booking_id = await self._book(verify, listing, guest)

        response = await client.post(f"{API}/{booking_id}/remove", headers=auth_headers(guest))

        assert response.status_code == 400
        assert response.json()["detail"] == "Booking must be cancelled before removal"

    async def test_browser_form_is_redirected_to_profile(self, client, verify, listing, guest, auth_headers):
        booking_id = await self._book(verify, listing, guest)
        headers = {**auth_headers(guest), "Accept": "text/html,application/xhtml+xml"}

        response = await client.post(f"{API}/{booking_id}/cancel", headers=headers)

        assert response.status_code == 303
        assert response.headers["location"] == f"/profile/{guest.id}"


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
