from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    amount: Mapped[int] = mapped_column(Integer)  # signed: positive credit, negative debit
    type: Mapped[str] = mapped_column(String(10))  # Credit, Debit
    source: Mapped[str] = mapped_column(String(30))  # Booking, Refund, Referral, Admin Adjustment, Promo
    description: Mapped[str] = mapped_column(String(255), default="")
    booking_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)
    balance_after: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
