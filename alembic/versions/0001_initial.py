"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        sa.Column("wallet_balance", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        sa.CheckConstraint("wallet_balance >= 0", name="ck_users_wallet_non_negative"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("source", sa.String(length=30), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("booking_id", sa.String(length=36), nullable=True),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_wallet_transactions_user_id", "wallet_transactions", ["user_id"])
    op.create_index("ix_wallet_transactions_booking_id", "wallet_transactions", ["booking_id"])

    op.create_table(
        "organizers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Active"),
        sa.Column("lead_credits_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("plan_name", sa.String(length=80), nullable=False, server_default=""),
        _created_at(),
        sa.CheckConstraint("lead_credits_available >= 0", name="ck_organizers_credits_non_negative"),
    )
    op.create_index("ix_organizers_email", "organizers", ["email"], unique=True)

    op.create_table(
        "trips",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("organizer_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("listing_model", sa.String(length=20), nullable=False, server_default="Commission"),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Published"),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("tax_included", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("tax_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("spot_reservation_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("advance_amount", sa.Integer(), nullable=True),
        sa.Column("final_payment_due_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("pickup_city", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("pickup_points_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("dropoff_points_json", sa.Text(), nullable=False, server_default="[]"),
        _created_at(),
    )
    op.create_index("ix_trips_organizer_id", "trips", ["organizer_id"])

    op.create_table(
        "trip_batches",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("booking_cutoff_date", sa.Date(), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("available_slots", sa.Integer(), nullable=False),
        sa.Column("price_override", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Active"),
        sa.Column("notes", sa.String(length=255), nullable=False, server_default=""),
        _created_at(),
        sa.CheckConstraint(
            "available_slots >= 0 AND available_slots <= max_participants",
            name="ck_trip_batches_slots_in_range",
        ),
    )
    op.create_index("ix_trip_batches_trip_id", "trip_batches", ["trip_id"])
    op.create_index("ix_trip_batches_start_date", "trip_batches", ["start_date"])

    op.create_table(
        "cancellation_rules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("days_before_departure", sa.Integer(), nullable=False),
        sa.Column("refund_percentage", sa.Integer(), nullable=False),
    )
    op.create_index("ix_cancellation_rules_trip_id", "cancellation_rules", ["trip_id"])

    op.create_table(
        "promo_codes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=40), nullable=False),
        sa.Column("kind", sa.String(length=12), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("usage_limit", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=12), nullable=False, server_default="Active"),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=False, server_default="Admin"),
        _created_at(),
        sa.CheckConstraint("usage_count <= usage_limit", name="ck_promo_codes_usage_within_limit"),
    )
    op.create_index("ix_promo_codes_code", "promo_codes", ["code"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_ref", sa.String(length=20), nullable=False),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("batch_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("traveler_count", sa.Integer(), nullable=False),
        sa.Column("pickup_point", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("dropoff_point", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("unit_price", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Integer(), nullable=False),
        sa.Column("coupon_code", sa.String(length=40), nullable=True),
        sa.Column("coupon_discount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wallet_amount_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tax_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_payable", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("is_partial_booking", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("advance_paid", sa.Integer(), nullable=True),
        sa.Column("remaining_amount", sa.Integer(), nullable=True),
        sa.Column("final_payment_due_date", sa.Date(), nullable=True),
        sa.Column("payment_status", sa.String(length=12), nullable=False, server_default="FULL"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Confirmed"),
        sa.Column("refund_status", sa.String(length=12), nullable=True),
        sa.Column("refund_percentage", sa.Integer(), nullable=True),
        sa.Column("refund_amount", sa.Integer(), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=500), nullable=True),
        _created_at(),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_bookings_booking_ref", "bookings", ["booking_ref"], unique=True)
    op.create_index("ix_bookings_trip_id", "bookings", ["trip_id"])
    op.create_index("ix_bookings_batch_id", "bookings", ["batch_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])

    op.create_table(
        "travelers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("emergency_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("emergency_phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("gst_number", sa.String(length=20), nullable=False, server_default=""),
        _created_at(),
    )
    op.create_index("ix_travelers_booking_id", "travelers", ["booking_id"])

    op.create_table(
        "cancellations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_id", sa.String(length=36), nullable=False),
        sa.Column("booking_ref", sa.String(length=20), nullable=False),
        sa.Column("requested_by_user_id", sa.String(length=36), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("lead_days", sa.Integer(), nullable=False),
        sa.Column("slots_released", sa.Integer(), nullable=False),
        sa.Column("refund_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("refund_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("refund_status", sa.String(length=12), nullable=False),
        sa.Column("payment_ref", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_cancellations_booking_id", "cancellations", ["booking_id"], unique=True)
    op.create_index("ix_cancellations_booking_ref", "cancellations", ["booking_ref"])
    op.create_index("ix_cancellations_requested_by_user_id", "cancellations", ["requested_by_user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        _created_at(),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

    op.create_table(
        "leads",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("trip_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=False),
        sa.Column("message", sa.Text(), nullable=False, server_default=""),
        sa.Column("converted_to_booking", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_leads_trip_id", "leads", ["trip_id"])

    op.create_table(
        "lead_packages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("lead_count", sa.Integer(), nullable=False),
        sa.Column("bonus_credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("validity_days", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=12), nullable=False, server_default="Active"),
        _created_at(),
    )

    op.create_table(
        "lead_purchases",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("organizer_id", sa.String(length=36), nullable=False),
        sa.Column("package_id", sa.String(length=36), nullable=False),
        sa.Column("package_name", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("credits_purchased", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("payment_ref", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_lead_purchases_organizer_id", "lead_purchases", ["organizer_id"])
    op.create_index("ix_lead_purchases_package_id", "lead_purchases", ["package_id"])

    op.create_table(
        "lead_unlocks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("organizer_id", sa.String(length=36), nullable=False),
        sa.Column("lead_id", sa.String(length=36), nullable=False),
        sa.Column("lead_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("trip_title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("cost", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("organizer_id", "lead_id", name="uq_lead_unlock_organizer_lead"),
    )
    op.create_index("ix_lead_unlocks_organizer_id", "lead_unlocks", ["organizer_id"])
    op.create_index("ix_lead_unlocks_lead_id", "lead_unlocks", ["lead_id"])


def downgrade() -> None:
    for table in (
        "lead_unlocks", "lead_purchases", "lead_packages", "leads", "audit_logs", "cancellations",
        "travelers", "bookings", "promo_codes", "cancellation_rules", "trip_batches", "trips",
        "organizers", "wallet_transactions", "users",
    ):
        op.drop_table(table)
