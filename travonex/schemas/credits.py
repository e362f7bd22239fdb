from pydantic import BaseModel, Field
from typing import List, Literal, Optional

class PurchaseIn(BaseModel):
    packageId: str
    paymentRef: str = ""

class PurchaseOut(BaseModel):
    newBalance: int

class LeadPurchaseOut(BaseModel):
    id: str
    packageId: str
    packageName: str
    creditsPurchased: int
    price: int
    paymentRef: str = ""
    createdAt: Optional[str] = None

class LeadUnlockOut(BaseModel):
    id: str
    leadId: str
    leadName: str
    tripTitle: str
    cost: int
    createdAt: Optional[str] = None

class LedgerOut(BaseModel):
    organizerId: str
    available: int
    planName: str = ""
    totalPurchased: int
    totalUsed: int
    purchases: List[LeadPurchaseOut]
    unlocks: List[LeadUnlockOut]

class LeadPackageIn(BaseModel):
    name: str = Field(min_length=3)
    leadCount: int = Field(ge=1)
    price: int = Field(ge=0)
    validityDays: Optional[int] = None
    bonusCredits: int = Field(default=0, ge=0)
    status: Literal["Active", "Archived"] = "Active"

class LeadPackageOut(LeadPackageIn):
    id: str
