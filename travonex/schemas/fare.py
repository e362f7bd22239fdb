from pydantic import BaseModel, Field
from typing import Optional

class FareQuoteIn(BaseModel):
    userId: str
    tripId: str
    batchId: str
    travelerCount: int = 1
    couponCode: Optional[str] = None
    useWallet: bool = False
    isPartial: bool = False
    pickupPoint: str = ""
    dropoffPoint: str = ""

class FareBreakdownOut(BaseModel):
    currency: str
    basePrice: int
    travelerCount: int
    subtotal: int
    couponCode: Optional[str] = None
    couponDiscount: int = 0
    walletDiscount: int = 0
    taxPercentage: int = 0
    tax: int = 0
    totalPayable: int
    isPartial: bool = False
    finalPayable: int = Field(ge=0)
    advanceAmount: Optional[int] = None
    remainingAmount: Optional[int] = None
