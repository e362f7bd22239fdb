from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.schemas.wallet import CouponValidateIn, CouponOut
from travonex.services.promo_service import validate_promo

router = APIRouter(tags=["coupons"])

@router.post("/coupons/validate", response_model=CouponOut)
def validate_coupon(body: CouponValidateIn, db: Session = Depends(get_db)):
    promo = unwrap(validate_promo(db, body.code))
    return CouponOut(code=promo.code, type=promo.kind, value=promo.value)
