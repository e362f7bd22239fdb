from sqlalchemy import String, Integer, Date, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone, date
from travonex.db.session import Base

class TripBatch(Base):
    __tablename__ = "trip_batches"
    __table_args__ = (
        CheckConstraint(
            "available_slots >= 0 AND available_slots <= max_participants",
            name="ck_trip_batches_slots_in_range",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(36), index=True)

    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date] = mapped_column(Date)
    booking_cutoff_date: Mapped[date] = mapped_column(Date, nullable=True)

    max_participants: Mapped[int] = mapped_column(Integer)
    # Decremented only by a confirmed booking, restored only by a cancellation
    available_slots: Mapped[int] = mapped_column(Integer)
    price_override: Mapped[int] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(30), default="Active")  # Active, Inactive, Pending Approval, Rejected
    notes: Mapped[str] = mapped_column(String(255), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
