from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from travonex.db.session import get_db
from travonex.api.deps import unwrap
from travonex.schemas.leads import LeadIn, LeadOut, UnlockOut, ContactDetails
from travonex.services import credit_ledger, lead_service

router = APIRouter(tags=["leads"])

@router.post("/leads", status_code=201)
def submit_lead(body: LeadIn, db: Session = Depends(get_db)):
    lead = unwrap(lead_service.submit_lead(db, body.tripId, body.name, body.email, body.phone, body.message or ""))
    return {"id": lead.id, "message": "Lead submitted successfully!"}

@router.get("/organizers/{organizer_id}/leads", response_model=List[LeadOut])
def organizer_leads(organizer_id: str, db: Session = Depends(get_db)):
    return [LeadOut(**row) for row in unwrap(lead_service.list_leads(db, organizer_id))]

@router.post("/organizers/{organizer_id}/leads/{lead_id}/unlock", response_model=UnlockOut)
def unlock_lead(organizer_id: str, lead_id: str, db: Session = Depends(get_db)):
    result = unwrap(credit_ledger.unlock(db, organizer_id, lead_id))
    return UnlockOut(
        success=result.success,
        alreadyUnlocked=result.already_unlocked,
        remainingCredits=result.remaining_credits,
        contactDetails=ContactDetails(**result.contact_details),
    )
