import json
import uuid
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from travonex.db.session import SessionLocal
from travonex.models.cancellation_rule import CancellationRule
from travonex.models.lead import Lead
from travonex.models.lead_package import LeadPackage
from travonex.models.organizer import Organizer
from travonex.models.promo_code import PromoCode
from travonex.models.trip import Trip
from travonex.models.trip_batch import TripBatch
from travonex.models.user import User
from travonex.services import credit_ledger, wallet_service

logger = logging.getLogger(__name__)

DEMO_RULES = [(30, 100), (15, 50), (7, 25)]


def ensure_organizer(db: Session, email: str, name: str) -> Organizer:
    o = db.execute(select(Organizer).where(Organizer.email == email)).scalar_one_or_none()
    if o:
        return o
    o = Organizer(id=str(uuid.uuid4()), name=name, email=email, lead_credits_available=0)
    db.add(o)
    db.commit()
    return o


def ensure_user(db: Session, email: str, name: str, wallet: int = 0) -> User:
    u = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if u:
        return u
    u = User(id=str(uuid.uuid4()), email=email, full_name=name, wallet_balance=0)
    db.add(u)
    db.commit()
    if wallet:
        # Through the wallet service so the balance has a matching transaction row
        wallet_service.credit_wallet(db, u.id, wallet, "Promo", "Welcome credit", actor_id="seed")
    return u


def ensure_package(db: Session, name: str, lead_count: int, price: int, bonus: int = 0) -> LeadPackage:
    p = db.execute(select(LeadPackage).where(LeadPackage.name == name)).scalar_one_or_none()
    if p:
        return p
    p = LeadPackage(id=str(uuid.uuid4()), name=name, lead_count=lead_count, bonus_credits=bonus,
                    price=price, validity_days=90)
    db.add(p)
    db.commit()
    return p


def ensure_trip(db: Session, organizer: Organizer) -> Trip:
    title = "Hampi Heritage Weekend"
    t = db.execute(select(Trip).where(Trip.title == title)).scalar_one_or_none()
    if t:
        return t
    t = Trip(
        id=str(uuid.uuid4()),
        organizer_id=organizer.id,
        title=title,
        listing_model="Leads",
        price=5000,
        tax_included=False,
        tax_percentage=5,
        spot_reservation_enabled=True,
        advance_amount=1000,
        final_payment_due_days=7,
        pickup_city="Bengaluru",
        pickup_points_json=json.dumps([{"label": "Majestic", "time": "21:00"}, {"label": "Hebbal", "time": "21:45"}]),
        dropoff_points_json=json.dumps([{"label": "Majestic", "time": "06:00"}]),
    )
    db.add(t)
    for days, pct in DEMO_RULES:
        db.add(CancellationRule(id=str(uuid.uuid4()), trip_id=t.id, days_before_departure=days, refund_percentage=pct))
    start = datetime.now(timezone.utc).date() + timedelta(days=45)
    db.add(TripBatch(
        id=str(uuid.uuid4()),
        trip_id=t.id,
        start_date=start,
        end_date=start + timedelta(days=2),
        booking_cutoff_date=start - timedelta(days=2),
        max_participants=20,
        available_slots=20,
    ))
    db.commit()
    return t


def ensure_promo(db: Session, code: str, kind: str, value: int, limit: int) -> None:
    if db.execute(select(PromoCode).where(PromoCode.code == code)).scalar_one_or_none():
        return
    db.add(PromoCode(
        id=str(uuid.uuid4()), code=code, kind=kind, value=value, usage_limit=limit,
        expiry_date=datetime.now(timezone.utc) + timedelta(days=180),
    ))
    db.commit()


def run(db=None):
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM organizers LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("organizers table not found yet; skipping seed (run alembic upgrade head)")
            return

        organizer = ensure_organizer(db, "hello@westernghats.example", "Western Ghats Trails")
        ensure_user(db, "traveler@travonex.example", "Demo Traveler", wallet=500)
        starter = ensure_package(db, "Starter", 10, 999)
        ensure_package(db, "Growth", 50, 3999, bonus=5)
        trip = ensure_trip(db, organizer)
        ensure_promo(db, "WELCOME10", "Percentage", 10, 100)
        ensure_promo(db, "FLAT500", "Fixed", 500, 50)

        if credit_ledger.get_ledger(db, organizer.id)["total_purchased"] == 0:
            credit_ledger.purchase_credits(db, organizer.id, starter.id, payment_ref="seed")

        if not db.execute(select(Lead.id).where(Lead.trip_id == trip.id)).first():
            for name, email, phone in [
                ("Ananya Rao", "ananya@example.com", "+919800000001"),
                ("Rahul Mehta", "rahul@example.com", "+919800000002"),
            ]:
                db.add(Lead(id=str(uuid.uuid4()), trip_id=trip.id, name=name, email=email, phone=phone,
                            message="Is the batch still open?"))
            db.commit()
        logger.info("seed complete")
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    from travonex.core.logging import setup_logging
    setup_logging()
    run()
