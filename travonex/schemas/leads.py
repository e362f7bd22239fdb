from pydantic import BaseModel
from typing import Optional

class LeadIn(BaseModel):
    tripId: str
    name: str
    email: str  # plain str to allow dev domains
    phone: str
    message: Optional[str] = ""

class LeadOut(BaseModel):
    id: str
    tripId: str
    tripTitle: str = ""
    name: str
    email: str
    phone: str
    message: str = ""
    isUnlocked: bool
    createdAt: Optional[str] = None

class ContactDetails(BaseModel):
    name: str
    email: str
    phone: str
    message: str = ""

class UnlockOut(BaseModel):
    success: bool = True
    alreadyUnlocked: bool
    remainingCredits: int
    contactDetails: ContactDetails
