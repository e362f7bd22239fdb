from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class Organizer(Base):
    __tablename__ = "organizers"
    __table_args__ = (
        CheckConstraint("lead_credits_available >= 0", name="ck_organizers_credits_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    status: Mapped[str] = mapped_column(String(30), default="Active")

    # Credit ledger row; owned by credit_ledger, history lives in lead_purchases / lead_unlocks
    lead_credits_available: Mapped[int] = mapped_column(Integer, default=0)
    plan_name: Mapped[str] = mapped_column(String(80), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
