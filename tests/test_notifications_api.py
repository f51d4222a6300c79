"""Tests for the notification inbox endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from app.services.notification_service import NotificationService

API = "/api/v1/notifications"


async def _notify(db, notifications, user, message="Someone booked your property: Sea View Villa"):
    return await notifications.create_notification(
        db,
        recipient_id=user.id,
        notification_type=NotificationService.BOOKING_CREATED,
        message=message,
    )


class TestInbox:
    async def test_owner_notified_on_booking(self, client, owner, guest, listing, signed_payment, auth_headers):
        order_id, payment_id, signature = signed_payment()
        check_in = datetime.now(UTC).date() + timedelta(days=10)
        await client.post(
            "/api/v1/bookings/verify",
            json={
                "order_id": order_id,
                "payment_id": payment_id,
                "signature": signature,
                "booking": {
                    "listing_id": str(listing.id),
                    "user_id": str(guest.id),
                    "check_in": check_in.isoformat(),
                    "check_out": (check_in + timedelta(days=1)).isoformat(),
                },
            },
        )

        response = await client.get(f"{API}/", headers=auth_headers(owner))

        body = response.json()
        assert body["total"] == 1
        assert body["unread_count"] == 1
        note = body["notifications"][0]
        assert note["notification_type"] == "booking_created"
        assert note["message"] == "Arjun Guest booked your property: Sea View Villa"
        assert note["listing_id"] == str(listing.id)

        # The guest's inbox stays empty
        response = await client.get(f"{API}/", headers=auth_headers(guest))
        assert response.json()["total"] == 0

    async def test_mark_read(self, client, db, notifications, owner, auth_headers):
        note = await _notify(db, notifications, owner)
        await _notify(db, notifications, owner, message="Second")

        response = await client.patch(f"{API}/{note.id}/read", headers=auth_headers(owner))
        assert response.status_code == 204

        response = await client.get(f"{API}/", headers=auth_headers(owner))
        body = response.json()
        assert body["total"] == 2
        assert body["unread_count"] == 1

        response = await client.get(f"{API}/", params={"unread_only": True}, headers=auth_headers(owner))
        assert [n["message"] for n in response.json()["notifications"]] == ["Second"]

    async def test_delete(self, client, db, notifications, owner, auth_headers):
        note = await _notify(db, notifications, owner)

        response = await client.delete(f"{API}/{note.id}", headers=auth_headers(owner))
        assert response.status_code == 204

        response = await client.get(f"{API}/", headers=auth_headers(owner))
        assert response.json()["total"] == 0

    async def test_cannot_touch_someone_elses(self, client, db, notifications, owner, other_user, auth_headers):
        note = await _notify(db, notifications, owner)

        response = await client.patch(f"{API}/{note.id}/read", headers=auth_headers(other_user))
        assert response.status_code == 404

        response = await client.delete(f"{API}/{note.id}", headers=auth_headers(other_user))
        assert response.status_code == 404

    async def test_unknown_notification(self, client, owner, auth_headers):
        response = await client.delete(f"{API}/{uuid4()}", headers=auth_headers(owner))
        assert response.status_code == 404
