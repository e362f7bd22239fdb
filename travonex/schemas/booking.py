from pydantic import BaseModel
from typing import List, Optional

class TravelerIn(BaseModel):
    name: str
    email: Optional[str] = ""
    phone: Optional[str] = ""
    emergencyName: Optional[str] = ""
    emergencyPhone: Optional[str] = ""
    gstNumber: Optional[str] = ""

class BookingCreate(BaseModel):
    userId: str
    tripId: str
    batchId: str
    travelers: List[TravelerIn]
    couponCode: Optional[str] = None
    useWallet: bool = False
    isPartial: bool = False
    pickupPoint: str = ""
    dropoffPoint: str = ""
    # Total the client showed the buyer; a mismatch with the live fare is rejected
    expectedPayable: Optional[int] = None

class BookingOut(BaseModel):
    id: str
    bookingRef: str
    tripId: str
    batchId: str
    userId: str
    status: str
    travelerCount: int
    subtotal: int
    couponCode: Optional[str] = None
    couponDiscount: int = 0
    walletAmountUsed: int = 0
    taxAmount: int = 0
    totalPayable: int
    amount: int
    isPartialBooking: bool = False
    advancePaid: Optional[int] = None
    remainingAmount: Optional[int] = None
    finalPaymentDueDate: Optional[str] = None
    paymentStatus: str
    refundStatus: Optional[str] = None
    refundPercentage: Optional[int] = None
    refundAmount: Optional[int] = None
    cancellationReason: Optional[str] = None
    createdAt: Optional[str] = None

class CancelIn(BaseModel):
    reason: str = ""

class RefundEstimateOut(BaseModel):
    bookingId: str
    eligible: bool
    leadDays: int
    refundPercentage: int
    refundAmount: int

class RefundProcessedIn(BaseModel):
    paymentRef: str
