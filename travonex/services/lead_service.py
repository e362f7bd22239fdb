import uuid
import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from travonex.models.lead import Lead
from travonex.models.lead_unlock import LeadUnlock
from travonex.models.organizer import Organizer
from travonex.models.trip import Trip
from travonex.services.credit_ledger import contact_details
from travonex.services.errors import Rejection, RejectionCode, invalid, not_found

logger = logging.getLogger(__name__)


def mask_name(name: str) -> str:
    parts = [p for p in (name or "").split() if p]
    return " ".join(p[0] + "*" * (len(p) - 1) for p in parts)


def mask_email(email: str) -> str:
    local, _, domain = (email or "").partition("@")
    if not domain:
        return "*" * len(local)
    return (local[:1] + "***@" + domain) if local else "***@" + domain


def mask_phone(phone: str) -> str:
    digits = (phone or "").strip()
    if len(digits) <= 2:
        return "*" * len(digits)
    return "*" * (len(digits) - 2) + digits[-2:]


def submit_lead(db: Session, trip_id: str, name: str, email: str, phone: str, message: str = "") -> Lead | Rejection:
    if not (name or "").strip() or not (email or "").strip() or not (phone or "").strip():
        return invalid(RejectionCode.MISSING_FIELDS, "Name, email and phone are required.")
    trip = db.get(Trip, trip_id)
    if not trip:
        return not_found("Trip not found.")
    lead = Lead(
        id=str(uuid.uuid4()),
        trip_id=trip_id,
        name=name.strip(),
        email=email.strip().lower(),
        phone=phone.strip(),
        message=message or "",
    )
    db.add(lead)
    db.commit()
    logger.info("lead submitted trip=%s lead=%s", trip_id, lead.id)
    return lead


def list_leads(db: Session, organizer_id: str) -> list[dict] | Rejection:
    """Leads on the organizer's trips; contact details masked until unlocked."""
    if not db.get(Organizer, organizer_id):
        return not_found("Organizer not found.")
    rows = db.execute(
        select(Lead, Trip.title)
        .join(Trip, Trip.id == Lead.trip_id)
        .where(Trip.organizer_id == organizer_id)
        .order_by(Lead.created_at.desc())
    ).all()
    unlocked = set(db.execute(
        select(LeadUnlock.lead_id).where(LeadUnlock.organizer_id == organizer_id)
    ).scalars().all())
    out = []
    for lead, trip_title in rows:
        is_unlocked = lead.id in unlocked
        details = contact_details(lead) if is_unlocked else {
            "name": mask_name(lead.name),
            "email": mask_email(lead.email),
            "phone": mask_phone(lead.phone),
            "message": lead.message or "",
        }
        out.append({
            "id": lead.id,
            "tripId": lead.trip_id,
            "tripTitle": trip_title,
            "isUnlocked": is_unlocked,
            "createdAt": lead.created_at.isoformat() if lead.created_at else None,
            **details,
        })
    return out
