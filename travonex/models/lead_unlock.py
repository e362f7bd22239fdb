from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class LeadUnlock(Base):
    __tablename__ = "lead_unlocks"
    __table_args__ = (
        # A lead is billed to an organizer at most once
        UniqueConstraint("organizer_id", "lead_id", name="uq_lead_unlock_organizer_lead"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    organizer_id: Mapped[str] = mapped_column(String(36), index=True)
    lead_id: Mapped[str] = mapped_column(String(36), index=True)
    lead_name: Mapped[str] = mapped_column(String(200), default="")
    trip_title: Mapped[str] = mapped_column(String(200), default="")
    cost: Mapped[int] = mapped_column(Integer, default=1)
    balance_after: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
