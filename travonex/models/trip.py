import json
from sqlalchemy import String, Integer, DateTime, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class Trip(Base):
    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    organizer_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(200))
    listing_model: Mapped[str] = mapped_column(String(20), default="Commission")  # Commission|Leads
    status: Mapped[str] = mapped_column(String(30), default="Published")  # Published, Draft, Unlisted, Pending Approval, Rejected

    # Default per-person price; a batch price_override wins over it
    price: Mapped[int] = mapped_column(Integer)
    tax_included: Mapped[bool] = mapped_column(Boolean, default=True)
    tax_percentage: Mapped[int] = mapped_column(Integer, default=0)

    # Spot reservation (partial booking)
    spot_reservation_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    advance_amount: Mapped[int] = mapped_column(Integer, nullable=True)
    final_payment_due_days: Mapped[int] = mapped_column(Integer, default=7)  # days before start

    pickup_city: Mapped[str] = mapped_column(String(100), default="")
    pickup_points_json: Mapped[str] = mapped_column(Text, default="[]")  # [{"label": "...", "time": "..."}]
    dropoff_points_json: Mapped[str] = mapped_column(Text, default="[]")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def pickup_labels(self) -> list[str]:
        return [p.get("label", "") for p in json.loads(self.pickup_points_json or "[]")]

    @property
    def dropoff_labels(self) -> list[str]:
        return [p.get("label", "") for p in json.loads(self.dropoff_points_json or "[]")]
