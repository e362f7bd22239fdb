from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.models.booking import Booking
from travonex.schemas.booking import BookingCreate, BookingOut, CancelIn, RefundEstimateOut
from travonex.services.booking_service import (
    FareRequest, TravelerDetails, confirm_booking, cancel_booking, estimate_refund, get_booking,
)

router = APIRouter(tags=["bookings"])

def booking_out(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        bookingRef=b.booking_ref,
        tripId=b.trip_id,
        batchId=b.batch_id,
        userId=b.user_id,
        status=b.status,
        travelerCount=b.traveler_count,
        subtotal=b.subtotal,
        couponCode=b.coupon_code,
        couponDiscount=b.coupon_discount or 0,
        walletAmountUsed=b.wallet_amount_used or 0,
        taxAmount=b.tax_amount or 0,
        totalPayable=b.total_payable,
        amount=b.amount,
        isPartialBooking=bool(b.is_partial_booking),
        advancePaid=b.advance_paid,
        remainingAmount=b.remaining_amount,
        finalPaymentDueDate=b.final_payment_due_date.isoformat() if b.final_payment_due_date else None,
        paymentStatus=b.payment_status,
        refundStatus=b.refund_status,
        refundPercentage=b.refund_percentage,
        refundAmount=b.refund_amount,
        cancellationReason=b.cancellation_reason,
        createdAt=b.created_at.isoformat() if b.created_at else None,
    )

@router.post("/bookings", response_model=BookingOut)
def create_booking(body: BookingCreate, db: Session = Depends(get_db)):
    req = FareRequest(
        user_id=body.userId,
        trip_id=body.tripId,
        batch_id=body.batchId,
        traveler_count=len(body.travelers),
        coupon_code=body.couponCode,
        use_wallet=body.useWallet,
        is_partial=body.isPartial,
        pickup_point=body.pickupPoint,
        dropoff_point=body.dropoffPoint,
    )
    travelers = [
        TravelerDetails(
            name=t.name,
            email=t.email or "",
            phone=t.phone or "",
            emergency_name=t.emergencyName or "",
            emergency_phone=t.emergencyPhone or "",
            gst_number=t.gstNumber or "",
        )
        for t in body.travelers
    ]
    booking = unwrap(confirm_booking(db, req, travelers, expected_payable=body.expectedPayable))
    return booking_out(booking)

@router.get("/bookings/{booking_id}", response_model=BookingOut)
def read_booking(booking_id: str, db: Session = Depends(get_db)):
    b = get_booking(db, booking_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return booking_out(b)

@router.get("/bookings/{booking_id}/refund-estimate", response_model=RefundEstimateOut)
def refund_estimate(booking_id: str, db: Session = Depends(get_db)):
    est = unwrap(estimate_refund(db, booking_id))
    return RefundEstimateOut(
        bookingId=booking_id,
        eligible=est.eligible,
        leadDays=est.lead_days,
        refundPercentage=est.refund_percentage,
        refundAmount=est.refund_amount,
    )

@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel(booking_id: str, body: CancelIn, db: Session = Depends(get_db)):
    return booking_out(unwrap(cancel_booking(db, booking_id, reason=body.reason)))
