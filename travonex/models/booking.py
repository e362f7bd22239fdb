from sqlalchemy import String, Integer, DateTime, Date, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone, date
from travonex.db.session import Base


class BookingStatus:
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class RefundStatus:
    NONE = "None"
    PENDING = "Pending"
    PROCESSED = "Processed"


class PaymentStatus:
    FULL = "FULL"
    PARTIAL = "PARTIAL"


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_ref: Mapped[str] = mapped_column(String(20), unique=True, index=True)

    trip_id: Mapped[str] = mapped_column(String(36), index=True)
    batch_id: Mapped[str] = mapped_column(String(36), index=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)

    traveler_count: Mapped[int] = mapped_column(Integer)
    pickup_point: Mapped[str] = mapped_column(String(120), default="")
    dropoff_point: Mapped[str] = mapped_column(String(120), default="")

    # Financial breakdown, frozen at confirmation
    unit_price: Mapped[int] = mapped_column(Integer)
    subtotal: Mapped[int] = mapped_column(Integer)
    coupon_code: Mapped[str] = mapped_column(String(40), nullable=True)
    coupon_discount: Mapped[int] = mapped_column(Integer, default=0)
    wallet_amount_used: Mapped[int] = mapped_column(Integer, default=0)
    tax_amount: Mapped[int] = mapped_column(Integer, default=0)
    total_payable: Mapped[int] = mapped_column(Integer)
    amount: Mapped[int] = mapped_column(Integer)  # paid at checkout: full fare or the advance

    # Spot reservation
    is_partial_booking: Mapped[bool] = mapped_column(Boolean, default=False)
    advance_paid: Mapped[int] = mapped_column(Integer, nullable=True)
    remaining_amount: Mapped[int] = mapped_column(Integer, nullable=True)
    final_payment_due_date: Mapped[date] = mapped_column(Date, nullable=True)
    payment_status: Mapped[str] = mapped_column(String(12), default=PaymentStatus.FULL)  # FULL|PARTIAL

    status: Mapped[str] = mapped_column(String(20), default=BookingStatus.CONFIRMED)
    refund_status: Mapped[str] = mapped_column(String(12), nullable=True)  # set on cancellation
    refund_percentage: Mapped[int] = mapped_column(Integer, nullable=True)
    refund_amount: Mapped[int] = mapped_column(Integer, nullable=True)
    cancellation_reason: Mapped[str] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    cancelled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
