import uuid
import logging
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from travonex.models.user import User
from travonex.models.wallet_transaction import WalletTransaction
from travonex.services.audit_service import log_audit
from travonex.services.errors import (
    Rejection, RejectionCode, RejectedError, conflict, invalid, not_found,
)

logger = logging.getLogger(__name__)

CREDIT = "Credit"
DEBIT = "Debit"
SOURCES = ("Booking", "Refund", "Referral", "Admin Adjustment", "Promo")


def get_balance(db: Session, user_id: str) -> int:
    return db.execute(select(User.wallet_balance).where(User.id == user_id)).scalar_one()


def debit_for_booking(db: Session, user_id: str, amount: int, booking_id: str, booking_ref: str) -> int:
    """Debit inside the caller's booking transaction. Never overdraws."""
    result = db.execute(
        update(User)
        .where(User.id == user_id, User.wallet_balance >= amount)
        .values(wallet_balance=User.wallet_balance - amount)
    )
    if result.rowcount != 1:
        raise RejectedError(conflict(
            RejectionCode.INSUFFICIENT_WALLET_BALANCE,
            "Your wallet balance changed. Please review the updated total.",
        ))
    balance = get_balance(db, user_id)
    db.add(WalletTransaction(
        id=str(uuid.uuid4()),
        user_id=user_id,
        amount=-amount,
        type=DEBIT,
        source="Booking",
        description=f"Used for Booking {booking_ref}",
        booking_id=booking_id,
        balance_after=balance,
    ))
    return balance


def credit_wallet(db: Session, user_id: str, amount: int, source: str, description: str = "",
                  actor_id: str = "system") -> int | Rejection:
    if amount <= 0:
        return invalid(RejectionCode.INVALID_AMOUNT, "Amount must be greater than zero.")
    if source not in SOURCES:
        return invalid(RejectionCode.INVALID_AMOUNT, f"Unknown wallet source: {source}")
    try:
        user = db.execute(select(User).where(User.id == user_id).with_for_update()).scalar_one_or_none()
        if not user:
            raise RejectedError(not_found("User not found."))
        db.execute(
            update(User).where(User.id == user_id).values(wallet_balance=User.wallet_balance + amount)
        )
        balance = get_balance(db, user_id)
        db.add(WalletTransaction(
            id=str(uuid.uuid4()),
            user_id=user_id,
            amount=amount,
            type=CREDIT,
            source=source,
            description=description or source,
            balance_after=balance,
        ))
        log_audit(db, actor_id, "wallet.credit", "user", user_id, {"amount": amount, "source": source})
        db.commit()
    except RejectedError as e:
        db.rollback()
        return e.rejection
    except Exception:
        db.rollback()
        raise
    logger.info("wallet credited user=%s amount=%s balance=%s", user_id, amount, balance)
    return balance


def list_transactions(db: Session, user_id: str) -> list[WalletTransaction]:
    return db.execute(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
        .order_by(WalletTransaction.created_at.desc())
    ).scalars().all()
