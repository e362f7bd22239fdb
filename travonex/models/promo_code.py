from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from travonex.db.session import Base

class PromoCode(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("usage_count <= usage_limit", name="ck_promo_codes_usage_within_limit"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # stored upper-case
    kind: Mapped[str] = mapped_column(String(12))  # Fixed|Percentage
    value: Mapped[int] = mapped_column(Integer)
    # Incremented only when a booking using the code commits
    usage_count: Mapped[int] = mapped_column(Integer, default=0)
    usage_limit: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(12), default="Active")  # Active, Inactive, Expired
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_by: Mapped[str] = mapped_column(String(36), default="Admin")  # Admin or an organizer id

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
