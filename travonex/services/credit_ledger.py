"""Per-organizer lead-credit ledger.

``organizers.lead_credits_available`` is the balance; ``lead_purchases`` and
``lead_unlocks`` are its append-only history. Every balance change goes
through a guarded UPDATE in the same transaction as its history row, so the
balance cannot go negative and cannot drift from the history. The unique
``(organizer_id, lead_id)`` key on ``lead_unlocks`` makes billing a lead a
one-time event even when two requests race.
"""
import uuid
import logging
from dataclasses import dataclass, field
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from travonex.core.config import settings
from travonex.models.lead import Lead
from travonex.models.lead_package import LeadPackage
from travonex.models.lead_purchase import LeadPurchase
from travonex.models.lead_unlock import LeadUnlock
from travonex.models.organizer import Organizer
from travonex.models.trip import Trip
from travonex.services.audit_service import log_audit
from travonex.services.errors import (
    InvariantViolation, Rejection, RejectionCode, RejectedError,
    conflict, invalid, not_found, violation,
)

logger = logging.getLogger(__name__)

NO_CREDITS_MESSAGE = "No credits remaining. Buy a lead package to unlock more leads."


@dataclass(frozen=True)
class UnlockResult:
    organizer_id: str
    lead_id: str
    remaining_credits: int
    already_unlocked: bool
    contact_details: dict = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return True


def _balance(db: Session, organizer_id: str) -> int:
    return db.execute(
        select(Organizer.lead_credits_available).where(Organizer.id == organizer_id)
    ).scalar_one()


def _prior_unlock(db: Session, organizer_id: str, lead_id: str) -> LeadUnlock | None:
    return db.execute(
        select(LeadUnlock).where(LeadUnlock.organizer_id == organizer_id, LeadUnlock.lead_id == lead_id)
    ).scalar_one_or_none()


def contact_details(lead: Lead) -> dict:
    return {"name": lead.name, "email": lead.email, "phone": lead.phone, "message": lead.message or ""}


def _load_owned_lead(db: Session, organizer_id: str, lead_id: str) -> tuple[Organizer, Lead, Trip]:
    organizer = db.execute(
        select(Organizer).where(Organizer.id == organizer_id).with_for_update()
    ).scalar_one_or_none()
    if not organizer:
        raise RejectedError(not_found("Organizer not found."))
    lead = db.get(Lead, lead_id)
    trip = db.get(Trip, lead.trip_id) if lead else None
    # Leads are only visible to the organizer running the trip they came in on
    if not lead or not trip or trip.organizer_id != organizer_id:
        raise RejectedError(not_found("Lead not found."))
    return organizer, lead, trip


def _unlock(db: Session, organizer_id: str, lead_id: str) -> UnlockResult:
    organizer, lead, trip = _load_owned_lead(db, organizer_id, lead_id)

    if _prior_unlock(db, organizer_id, lead_id):
        return UnlockResult(organizer_id, lead_id, _balance(db, organizer_id), True, contact_details(lead))

    cost = settings.LEAD_UNLOCK_COST
    if _balance(db, organizer_id) < cost:
        raise RejectedError(violation(RejectionCode.INSUFFICIENT_CREDITS, NO_CREDITS_MESSAGE))

    result = db.execute(
        update(Organizer)
        .where(Organizer.id == organizer_id, Organizer.lead_credits_available >= cost)
        .values(lead_credits_available=Organizer.lead_credits_available - cost)
    )
    if result.rowcount != 1:
        # Another unlock spent the last credit between the check and the write
        raise RejectedError(conflict(RejectionCode.INSUFFICIENT_CREDITS, NO_CREDITS_MESSAGE))

    remaining = _balance(db, organizer_id)
    db.add(LeadUnlock(
        id=str(uuid.uuid4()),
        organizer_id=organizer_id,
        lead_id=lead_id,
        lead_name=lead.name,
        trip_title=trip.title,
        cost=cost,
        balance_after=remaining,
    ))
    db.flush()
    log_audit(db, organizer_id, "lead.unlock", "organizer", organizer_id,
              {"lead_id": lead_id, "cost": cost, "balance_after": remaining})
    return UnlockResult(organizer_id, lead_id, remaining, False, contact_details(lead))


def unlock(db: Session, organizer_id: str, lead_id: str) -> UnlockResult | Rejection:
    """Spend one credit to reveal a lead's contact details. Safe to retry."""
    try:
        outcome = _unlock(db, organizer_id, lead_id)
        db.commit()
    except RejectedError as e:
        db.rollback()
        logger.info("unlock rejected organizer=%s lead=%s code=%s", organizer_id, lead_id, e.rejection.code.value)
        return e.rejection
    except IntegrityError:
        db.rollback()
        # A concurrent request committed the unlock first; the whole unit above was rolled back.
        lead = db.get(Lead, lead_id)
        if not _prior_unlock(db, organizer_id, lead_id):
            raise
        logger.info("unlock raced, answering idempotently organizer=%s lead=%s", organizer_id, lead_id)
        return UnlockResult(organizer_id, lead_id, _balance(db, organizer_id), True, contact_details(lead))
    except Exception:
        db.rollback()
        raise
    if not outcome.already_unlocked:
        logger.info("lead unlocked organizer=%s lead=%s remaining=%s", organizer_id, lead_id, outcome.remaining_credits)
    return outcome


def add_credits(db: Session, organizer_id: str, package_id: str, credits_granted: int, price: int,
                payment_ref: str = "", package_name: str = "") -> int | Rejection:
    """Strictly additive; the increment and its purchase row commit together."""
    if credits_granted <= 0:
        return invalid(RejectionCode.INVALID_AMOUNT, "A purchase must grant at least one credit.")
    if price < 0:
        return invalid(RejectionCode.INVALID_AMOUNT, "Price cannot be negative.")
    try:
        organizer = db.execute(
            select(Organizer).where(Organizer.id == organizer_id).with_for_update()
        ).scalar_one_or_none()
        if not organizer:
            raise RejectedError(not_found("Organizer not found."))
        db.execute(
            update(Organizer)
            .where(Organizer.id == organizer_id)
            .values(lead_credits_available=Organizer.lead_credits_available + credits_granted)
        )
        balance = _balance(db, organizer_id)
        db.add(LeadPurchase(
            id=str(uuid.uuid4()),
            organizer_id=organizer_id,
            package_id=package_id,
            package_name=package_name,
            credits_purchased=credits_granted,
            price=price,
            payment_ref=payment_ref or "",
            balance_after=balance,
        ))
        if package_name:
            organizer.plan_name = package_name
        log_audit(db, organizer_id, "credits.purchase", "organizer", organizer_id,
                  {"package_id": package_id, "credits": credits_granted, "price": price, "balance_after": balance})
        db.commit()
    except RejectedError as e:
        db.rollback()
        return e.rejection
    except Exception:
        db.rollback()
        raise
    logger.info("credits added organizer=%s credits=%s balance=%s", organizer_id, credits_granted, balance)
    return balance


def purchase_credits(db: Session, organizer_id: str, package_id: str, payment_ref: str = "") -> int | Rejection:
    package = db.get(LeadPackage, package_id)
    if not package:
        return not_found("Lead package not found.")
    if package.status != "Active":
        return violation(RejectionCode.PACKAGE_UNAVAILABLE, "This lead package is no longer available.")
    return add_credits(
        db, organizer_id, package.id, package.credits_granted, package.price,
        payment_ref=payment_ref, package_name=package.name,
    )


def get_ledger(db: Session, organizer_id: str) -> dict | Rejection:
    organizer = db.get(Organizer, organizer_id)
    if not organizer:
        return not_found("Organizer not found.")
    purchases = db.execute(
        select(LeadPurchase).where(LeadPurchase.organizer_id == organizer_id).order_by(LeadPurchase.created_at)
    ).scalars().all()
    unlocks = db.execute(
        select(LeadUnlock).where(LeadUnlock.organizer_id == organizer_id).order_by(LeadUnlock.created_at)
    ).scalars().all()
    return {
        "available": _balance(db, organizer_id),
        "plan_name": organizer.plan_name,
        "total_purchased": sum(p.credits_purchased for p in purchases),
        "total_used": sum(u.cost for u in unlocks),
        "purchases": purchases,
        "unlocks": unlocks,
    }


def verify_ledger(db: Session, organizer_id: str) -> int:
    """Balance must equal purchased minus spent. Drift is reported, never repaired."""
    purchased = db.execute(
        select(func.coalesce(func.sum(LeadPurchase.credits_purchased), 0))
        .where(LeadPurchase.organizer_id == organizer_id)
    ).scalar_one()
    used = db.execute(
        select(func.coalesce(func.sum(LeadUnlock.cost), 0)).where(LeadUnlock.organizer_id == organizer_id)
    ).scalar_one()
    available = _balance(db, organizer_id)
    if int(purchased) - int(used) != available:
        raise InvariantViolation(
            "lead credit ledger drift",
            organizer_id=organizer_id, purchased=int(purchased), used=int(used), available=available,
        )
    return available
