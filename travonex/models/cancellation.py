from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class Cancellation(Base):
    __tablename__ = "cancellations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    booking_ref: Mapped[str] = mapped_column(String(20), index=True)

    requested_by_user_id: Mapped[str] = mapped_column(String(36), index=True)
    reason: Mapped[str] = mapped_column(String(500), default="")

    lead_days: Mapped[int] = mapped_column(Integer)
    slots_released: Mapped[int] = mapped_column(Integer)
    refund_percentage: Mapped[int] = mapped_column(Integer, default=0)
    refund_amount: Mapped[int] = mapped_column(Integer, default=0)
    refund_status: Mapped[str] = mapped_column(String(12))  # None, Pending, Processed
    payment_ref: Mapped[str] = mapped_column(String(120), default="")  # UTR / gateway ref once processed
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
