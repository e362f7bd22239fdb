from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.schemas.credits import PurchaseIn, PurchaseOut, LedgerOut, LeadPurchaseOut, LeadUnlockOut
from travonex.services import credit_ledger

router = APIRouter(tags=["credits"])

@router.post("/organizers/{organizer_id}/credits/purchase", response_model=PurchaseOut)
def purchase(organizer_id: str, body: PurchaseIn, db: Session = Depends(get_db)):
    balance = unwrap(credit_ledger.purchase_credits(db, organizer_id, body.packageId, payment_ref=body.paymentRef))
    return PurchaseOut(newBalance=balance)

@router.get("/organizers/{organizer_id}/credits", response_model=LedgerOut)
def ledger(organizer_id: str, db: Session = Depends(get_db)):
    data = unwrap(credit_ledger.get_ledger(db, organizer_id))
    return LedgerOut(
        organizerId=organizer_id,
        available=data["available"],
        planName=data["plan_name"] or "",
        totalPurchased=data["total_purchased"],
        totalUsed=data["total_used"],
        purchases=[
            LeadPurchaseOut(
                id=p.id, packageId=p.package_id, packageName=p.package_name,
                creditsPurchased=p.credits_purchased, price=p.price, paymentRef=p.payment_ref or "",
                createdAt=p.created_at.isoformat() if p.created_at else None,
            )
            for p in data["purchases"]
        ],
        unlocks=[
            LeadUnlockOut(
                id=u.id, leadId=u.lead_id, leadName=u.lead_name, tripTitle=u.trip_title, cost=u.cost,
                createdAt=u.created_at.isoformat() if u.created_at else None,
            )
            for u in data["unlocks"]
        ],
    )
