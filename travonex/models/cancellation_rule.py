from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from travonex.db.session import Base

class CancellationRule(Base):
    __tablename__ = "cancellation_rules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(36), index=True)
    days_before_departure: Mapped[int] = mapped_column(Integer)
    refund_percentage: Mapped[int] = mapped_column(Integer)  # 0..100
