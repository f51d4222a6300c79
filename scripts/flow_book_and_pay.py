#!/usr/bin/env python3
"""
Complete booking and payment flow test script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend. The one exception is step 3, which plays the
part of the hosted checkout and signs the payment with the gateway secret
(works against PAYMENT_GATEWAY=manual).

Usage:
    python scripts/flow_book_and_pay.py --listing-id <UUID> --user-id <UUID> --check-in 2026-04-01 --check-out 2026-04-04
    python scripts/flow_book_and_pay.py --listing-id <UUID> --user-id <UUID> --check-in 2026-05-01 --check-out 2026-05-05 --skip-cancel

The bearer token is read from .token (or --token) and must belong to --user-id.

Flow:
    1. Quote the stay
    2. Create payment order
    3. Sign payment (simulated checkout)
    4. Verify payment and confirm booking
    5. List my bookings
    6. Download receipt
    7. Cancel booking
    8. Remove booking
"""

import argparse
import hashlib
import hmac
import json
import sys
import uuid
from pathlib import Path

import httpx

BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"
TOKEN_FILE = Path(__file__).parent.parent / ".token"
RECEIPTS_OUT = Path(__file__).parent.parent / "downloads"

DEFAULT_SECRET = "manual-gateway-secret"


def get_token(token: str | None) -> str:
    """Token from the command line or the stored token file."""
    if token:
        return token
    if not TOKEN_FILE.exists():
        print("ERROR: No token found. Pass --token or write one to .token")
        sys.exit(1)
    return TOKEN_FILE.read_text().strip()


def api_request(token: str | None, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make API request, authenticated when a token is given."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    url = f"{BASE_URL}{API_PREFIX}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def sign_payment(secret: str, order_id: str, payment_id: str) -> str:
    """Signature a Razorpay-style checkout returns for a captured payment."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Complete booking and payment flow")
    parser.add_argument("--listing-id", required=True, help="Listing UUID")
    parser.add_argument("--user-id", required=True, help="Guest user UUID")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--guests", type=int, default=2, help="Number of guests")
    parser.add_argument("--token", help="Bearer token for the guest")
    parser.add_argument("--secret", default=DEFAULT_SECRET, help="Gateway key secret used to sign")
    parser.add_argument("--skip-cancel", action="store_true", help="Keep the booking (skip cancel and remove)")
    args = parser.parse_args()

    token = get_token(args.token)
    stay = {
        "listing_id": args.listing_id,
        "user_id": args.user_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
        "guests": args.guests,
    }

    # Step 1: Quote
    print_step(1, "Quote the stay")
    quote_result = api_request(None, "POST", "/bookings/quote", stay)
    if not print_result(quote_result):
        sys.exit(1)

    if not quote_result["data"].get("available"):
        print(f"ERROR: Listing not available - {quote_result['data'].get('unavailable_reason')}")
        sys.exit(1)

    breakdown = quote_result["data"]["breakdown"]
    print("\nPricing Summary:")
    print(f"  {breakdown['nights']} night(s) x INR {breakdown['per_night']:,}")
    print(f"  Subtotal:     INR {breakdown['subtotal']:,}")
    print(f"  GST:          INR {breakdown['tax_amount']:,}")
    print(f"  Grand Total:  INR {breakdown['grand_total']:,}")

    # Step 2: Create order
    print_step(2, "Create payment order")
    order_result = api_request(None, "POST", "/bookings/create-order", {"amount": breakdown["grand_total"]})
    if not print_result(order_result, ["id", "amount", "currency"]):
        sys.exit(1)
    order_id = order_result["data"]["id"]

    # Step 3: Simulated checkout
    print_step(3, "Sign payment (simulated checkout)")
    payment_id = f"pay_{uuid.uuid4().hex[:14]}"
    signature = sign_payment(args.secret, order_id, payment_id)
    print(f"Payment ID: {payment_id}")

    # Step 4: Verify
    print_step(4, "Verify payment and confirm booking")
    verify_result = api_request(None, "POST", "/bookings/verify", {
        "order_id": order_id,
        "payment_id": payment_id,
        "signature": signature,
        "booking": stay,
    })
    if not print_result(verify_result):
        sys.exit(1)
    if not verify_result["data"].get("success"):
        print("ERROR: Booking was not confirmed")
        sys.exit(1)

    booking_id = verify_result["data"]["booking_id"]
    print(f"\nBooking CONFIRMED: {booking_id}")

    # Step 5: My bookings
    print_step(5, "List my bookings")
    mine_result = api_request(token, "GET", "/bookings/mine")
    if not print_result(mine_result):
        sys.exit(1)
    print(f"\nUpcoming: {len(mine_result['data']['upcoming'])}  Past: {len(mine_result['data']['past'])}")

    # Step 6: Receipt
    print_step(6, "Download receipt")
    response = httpx.get(
        f"{BASE_URL}{API_PREFIX}/bookings/{booking_id}/receipt",
        headers={"Authorization": f"Bearer {token}"},
        timeout=10.0,
    )
    if response.status_code != 200:
        print(f"WARNING: Receipt unavailable ({response.status_code})")
    else:
        RECEIPTS_OUT.mkdir(exist_ok=True)
        out = RECEIPTS_OUT / f"receipt_{booking_id}.pdf"
        out.write_bytes(response.content)
        print(f"Saved {len(response.content):,} bytes to {out}")

    if args.skip_cancel:
        print("\n" + "="*60)
        print("FLOW COMPLETE (skipped cancel and remove)")
        print("="*60)
        return

    # Step 7: Cancel
    print_step(7, "Cancel booking")
    cancel_result = api_request(token, "POST", f"/bookings/{booking_id}/cancel")
    if not print_result(cancel_result):
        sys.exit(1)
    print("\nBooking CANCELLED")

    # Step 8: Remove
    print_step(8, "Remove booking")
    remove_result = api_request(token, "POST", f"/bookings/{booking_id}/remove")
    if not print_result(remove_result):
        sys.exit(1)
    print("\nBooking REMOVED")

    # Final summary
    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Order:        {order_id}")
    print(f"Payment:      {payment_id}")
    print(f"Total Paid:   INR {breakdown['grand_total']:,}")


if __name__ == "__main__":
    main()
