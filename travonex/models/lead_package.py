from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class LeadPackage(Base):
    __tablename__ = "lead_packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    lead_count: Mapped[int] = mapped_column(Integer)
    bonus_credits: Mapped[int] = mapped_column(Integer, default=0)
    price: Mapped[int] = mapped_column(Integer)
    validity_days: Mapped[int] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(12), default="Active")  # Active, Archived
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def credits_granted(self) -> int:
        return int(self.lead_count) + int(self.bonus_credits or 0)
