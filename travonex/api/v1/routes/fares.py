from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from travonex.core.config import settings
from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.schemas.fare import FareQuoteIn, FareBreakdownOut
from travonex.services.booking_service import FareRequest, quote_fare
from travonex.services.fare_calculator import FareBreakdown

router = APIRouter(tags=["fares"])

def fare_out(f: FareBreakdown) -> FareBreakdownOut:
    return FareBreakdownOut(
        currency=settings.CURRENCY,
        basePrice=f.base_price,
        travelerCount=f.traveler_count,
        subtotal=f.subtotal,
        couponCode=f.coupon_code,
        couponDiscount=f.coupon_discount,
        walletDiscount=f.wallet_discount,
        taxPercentage=f.tax_percentage,
        tax=f.tax,
        totalPayable=f.total_payable,
        isPartial=f.is_partial,
        finalPayable=f.final_payable,
        advanceAmount=f.advance_amount,
        remainingAmount=f.remaining_amount,
    )

@router.post("/fares/quote", response_model=FareBreakdownOut)
def quote(body: FareQuoteIn, db: Session = Depends(get_db)):
    req = FareRequest(
        user_id=body.userId,
        trip_id=body.tripId,
        batch_id=body.batchId,
        traveler_count=body.travelerCount,
        coupon_code=body.couponCode,
        use_wallet=body.useWallet,
        is_partial=body.isPartial,
        pickup_point=body.pickupPoint,
        dropoff_point=body.dropoffPoint,
    )
    return fare_out(unwrap(quote_fare(db, req)))
