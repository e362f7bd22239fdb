import logging
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, ProgrammingError
from travonex.db.session import SessionLocal
from travonex.models.organizer import Organizer
from travonex.services.booking_service import complete_finished_bookings
from travonex.services.credit_ledger import verify_ledger
from travonex.services.errors import InvariantViolation

logger = logging.getLogger(__name__)


def complete_bookings(session_factory=SessionLocal):
    db: Session = session_factory()
    try:
        try:
            completed = complete_finished_bookings(db)
        except (ProgrammingError, OperationalError):
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        return {"completed": completed}
    finally:
        db.close()


def verify_ledgers(session_factory=SessionLocal):
    """Check every organizer's credit balance against its purchase and unlock history."""
    db: Session = session_factory()
    try:
        try:
            organizer_ids = db.execute(select(Organizer.id)).scalars().all()
        except (ProgrammingError, OperationalError):
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        drifted = []
        for oid in organizer_ids:
            try:
                verify_ledger(db, oid)
            except InvariantViolation:
                drifted.append(oid)
        if drifted:
            logger.error("credit ledger drift for %s organizer(s): %s", len(drifted), ", ".join(drifted))
        return {"checked": len(organizer_ids), "drifted": drifted}
    finally:
        db.close()
