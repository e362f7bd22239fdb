from pydantic import BaseModel, Field
from typing import List, Literal, Optional

class CouponValidateIn(BaseModel):
    code: str = ""

class CouponOut(BaseModel):
    code: str
    type: str
    value: int
    message: str = "Coupon applied successfully!"

class WalletCreditIn(BaseModel):
    amount: int = Field(gt=0)
    source: Literal["Refund", "Referral", "Admin Adjustment", "Promo"] = "Admin Adjustment"
    description: str = ""

class WalletBalanceOut(BaseModel):
    userId: str
    walletBalance: int

class WalletTransactionOut(BaseModel):
    id: str
    amount: int
    type: str
    source: str
    description: str = ""
    bookingId: Optional[str] = None
    balanceAfter: int
    createdAt: Optional[str] = None

class WalletOut(BaseModel):
    userId: str
    walletBalance: int
    currency: str
    transactions: List[WalletTransactionOut]
