from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from travonex.core.config import settings
from travonex.db.session import get_db
from travonex.models.user import User
from travonex.schemas.wallet import WalletOut, WalletTransactionOut
from travonex.services import wallet_service

router = APIRouter(tags=["wallet"])

@router.get("/users/{user_id}/wallet", response_model=WalletOut)
def wallet(user_id: str, db: Session = Depends(get_db)):
    if not db.get(User, user_id):
        raise HTTPException(status_code=404, detail="Not found")
    return WalletOut(
        userId=user_id,
        walletBalance=wallet_service.get_balance(db, user_id),
        currency=settings.CURRENCY,
        transactions=[
            WalletTransactionOut(
                id=t.id, amount=t.amount, type=t.type, source=t.source, description=t.description or "",
                bookingId=t.booking_id, balanceAfter=t.balance_after,
                createdAt=t.created_at.isoformat() if t.created_at else None,
            )
            for t in wallet_service.list_transactions(db, user_id)
        ],
    )
