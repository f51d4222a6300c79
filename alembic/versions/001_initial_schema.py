"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-06

Creates the tables for the StayEase booking service:
- Users (identity mirror of the auth service)
- Listings (fields bookings depend on)
- Bookings
- Notifications
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("username", sa.String(100)),
        sa.Column("is_active", sa.Boolean, default=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== LISTINGS ====================
    op.create_table(
        "listings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "owner_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column("country", sa.String(100)),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id"), nullable=False, index=True),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("check_in", sa.Date, nullable=False),
        sa.Column("check_out", sa.Date, nullable=False),
        sa.Column("guests", sa.Integer, nullable=False, default=1),
        sa.Column("payment_id", sa.String(100), nullable=False),
        sa.Column("order_id", sa.String(100), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, default="Confirmed", index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_check_out_after_check_in"),
        sa.CheckConstraint("guests >= 1", name="ck_bookings_guests_positive"),
    )
    op.create_index(
        "ix_bookings_listing_status_dates",
        "bookings",
        ["listing_id", "status", "check_in", "check_out"],
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "recipient_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id", ondelete="SET NULL")),
        sa.Column("booking_id", sa.Uuid, sa.ForeignKey("bookings.id", ondelete="SET NULL")),
        sa.Column("is_read", sa.Boolean, default=False),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("notifications")
    op.drop_index("ix_bookings_listing_status_dates", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("listings")
    op.drop_table("users")
