"""Row builders shared by the test modules."""
import json
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select

from travonex.models.cancellation_rule import CancellationRule
from travonex.models.lead import Lead
from travonex.models.lead_package import LeadPackage
from travonex.models.organizer import Organizer
from travonex.models.promo_code import PromoCode
from travonex.models.trip import Trip
from travonex.models.trip_batch import TripBatch
from travonex.models.user import User
from travonex.services import credit_ledger

STANDARD_RULES = [(30, 100), (15, 50), (7, 25)]
PICKUP = "Majestic"
DROPOFF = "Majestic"


def _id() -> str:
    return str(uuid.uuid4())


def make_organizer(db, credits: int = 0) -> Organizer:
    o = Organizer(id=_id(), name="Western Ghats Trails", email=f"{_id()}@org.example", lead_credits_available=0)
    db.add(o)
    db.commit()
    if credits:
        credit_ledger.add_credits(db, o.id, "seed-package", credits, 0, package_name="Starter")
    return o


def make_user(db, wallet: int = 0) -> User:
    u = User(id=_id(), email=f"{_id()}@user.example", full_name="Priya", wallet_balance=wallet)
    db.add(u)
    db.commit()
    return u


def make_trip(db, organizer_id: str, rules=STANDARD_RULES, **overrides) -> Trip:
    fields = dict(
        id=_id(),
        organizer_id=organizer_id,
        title="Coorg Monsoon Trek",
        price=5000,
        tax_included=False,
        tax_percentage=5,
        spot_reservation_enabled=True,
        advance_amount=1000,
        final_payment_due_days=7,
        pickup_points_json=json.dumps([{"label": PICKUP, "time": "21:00"}]),
        dropoff_points_json=json.dumps([{"label": DROPOFF, "time": "06:00"}]),
    )
    fields.update(overrides)
    t = Trip(**fields)
    db.add(t)
    for days, pct in rules:
        db.add(CancellationRule(id=_id(), trip_id=t.id, days_before_departure=days, refund_percentage=pct))
    db.commit()
    return t


def make_batch(db, trip_id: str, slots: int = 20, start_in_days: int = 60, **overrides) -> TripBatch:
    start = date.today() + timedelta(days=start_in_days)
    fields = dict(
        id=_id(),
        trip_id=trip_id,
        start_date=start,
        end_date=start + timedelta(days=2),
        max_participants=slots,
        available_slots=slots,
    )
    fields.update(overrides)
    b = TripBatch(**fields)
    db.add(b)
    db.commit()
    return b


def make_promo(db, code: str = "FLAT500", kind: str = "Fixed", value: int = 500, limit: int = 10,
               status: str = "Active", expires_in_days: int = 30) -> PromoCode:
    p = PromoCode(
        id=_id(), code=code, kind=kind, value=value, usage_limit=limit, status=status,
        expiry_date=datetime.now(timezone.utc) + timedelta(days=expires_in_days),
    )
    db.add(p)
    db.commit()
    return p


def make_lead(db, trip_id: str, name: str = "Ananya Rao") -> Lead:
    lead = Lead(id=_id(), trip_id=trip_id, name=name, email="ananya@example.com", phone="+919812345678",
                message="Any seats left?")
    db.add(lead)
    db.commit()
    return lead


def make_package(db, lead_count: int = 10, bonus: int = 0, price: int = 999, status: str = "Active") -> LeadPackage:
    p = LeadPackage(id=_id(), name="Starter", lead_count=lead_count, bonus_credits=bonus, price=price,
                    validity_days=90, status=status)
    db.add(p)
    db.commit()
    return p


def column(db, col, row_id):
    """Read one column straight from the database, bypassing the identity map."""
    return db.execute(select(col).where(col.class_.id == row_id)).scalar_one()
