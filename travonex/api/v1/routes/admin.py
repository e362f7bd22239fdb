import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.api.v1.routes.bookings import booking_out
from travonex.models.lead_package import LeadPackage
from travonex.schemas.booking import BookingOut, RefundProcessedIn
from travonex.schemas.credits import LeadPackageIn, LeadPackageOut
from travonex.schemas.wallet import WalletCreditIn, WalletBalanceOut
from travonex.services import booking_service, credit_ledger, wallet_service
from travonex.services.audit_service import log_audit
from travonex.services.errors import InvariantViolation

router = APIRouter(tags=["admin"])

def package_out(p: LeadPackage) -> LeadPackageOut:
    return LeadPackageOut(
        id=p.id, name=p.name, leadCount=p.lead_count, price=p.price,
        validityDays=p.validity_days, bonusCredits=p.bonus_credits or 0, status=p.status,
    )

@router.get("/admin/lead-packages", response_model=List[LeadPackageOut])
def list_packages(db: Session = Depends(get_db)):
    items = db.execute(select(LeadPackage).order_by(LeadPackage.price)).scalars().all()
    return [package_out(p) for p in items]

@router.post("/admin/lead-packages", response_model=LeadPackageOut, status_code=201)
def create_package(body: LeadPackageIn, db: Session = Depends(get_db)):
    p = LeadPackage(
        id=str(uuid.uuid4()),
        name=body.name,
        lead_count=body.leadCount,
        bonus_credits=body.bonusCredits,
        price=body.price,
        validity_days=body.validityDays,
        status=body.status,
    )
    db.add(p)
    log_audit(db, "admin", "lead_package.create", "lead_package", p.id, body.model_dump())
    db.commit()
    return package_out(p)

@router.post("/admin/bookings/{booking_id}/refund-processed", response_model=BookingOut)
def refund_processed(booking_id: str, body: RefundProcessedIn, db: Session = Depends(get_db)):
    return booking_out(unwrap(booking_service.process_refund(db, booking_id, body.paymentRef)))

@router.post("/admin/users/{user_id}/wallet/credit", response_model=WalletBalanceOut)
def credit_wallet(user_id: str, body: WalletCreditIn, db: Session = Depends(get_db)):
    balance = unwrap(wallet_service.credit_wallet(
        db, user_id, body.amount, body.source, body.description, actor_id="admin",
    ))
    return WalletBalanceOut(userId=user_id, walletBalance=balance)

@router.get("/admin/organizers/{organizer_id}/ledger/verify")
def verify_ledger(organizer_id: str, db: Session = Depends(get_db)):
    unwrap(credit_ledger.get_ledger(db, organizer_id))
    try:
        available = credit_ledger.verify_ledger(db, organizer_id)
    except InvariantViolation as e:
        return {"ok": False, "detail": str(e), **e.context}
    return {"ok": True, "available": available}
