from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class LeadPurchase(Base):
    __tablename__ = "lead_purchases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    organizer_id: Mapped[str] = mapped_column(String(36), index=True)
    package_id: Mapped[str] = mapped_column(String(36), index=True)
    package_name: Mapped[str] = mapped_column(String(120), default="")
    credits_purchased: Mapped[int] = mapped_column(Integer)
    price: Mapped[int] = mapped_column(Integer)
    payment_ref: Mapped[str] = mapped_column(String(120), default="")
    balance_after: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
