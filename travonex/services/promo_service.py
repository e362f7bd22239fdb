from datetime import datetime
from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from travonex.core.clock import as_utc, utcnow
from travonex.models.promo_code import PromoCode
from travonex.services.errors import Rejection, RejectionCode, not_found, violation, conflict, RejectedError

FIXED = "Fixed"
PERCENTAGE = "Percentage"
ACTIVE = "Active"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def check_promo(promo, now: datetime) -> Rejection | None:
    """Applicability check; does not touch usage_count."""
    if promo.status != ACTIVE:
        return violation(RejectionCode.PROMO_INACTIVE, "This coupon is not currently active.")
    if as_utc(now) >= as_utc(promo.expiry_date):
        return violation(RejectionCode.PROMO_EXPIRED, "This coupon has expired.")
    if promo.usage_count >= promo.usage_limit:
        return violation(RejectionCode.PROMO_EXHAUSTED, "This coupon has reached its usage limit.")
    return None


def find_promo(db: Session, code: str) -> PromoCode | None:
    return db.execute(
        select(PromoCode).where(func.upper(PromoCode.code) == normalize_code(code))
    ).scalar_one_or_none()


def validate_promo(db: Session, code: str, now: datetime | None = None) -> PromoCode | Rejection:
    if not normalize_code(code):
        return not_found("Coupon code is required.")
    promo = find_promo(db, code)
    if not promo:
        return not_found("Invalid coupon code.")
    rejection = check_promo(promo, now or utcnow())
    return rejection or promo


def consume_promo(db: Session, promo_id: str) -> None:
    """Count one use inside the caller's booking transaction; loses the race if the last use is gone."""
    result = db.execute(
        update(PromoCode)
        .where(PromoCode.id == promo_id, PromoCode.usage_count < PromoCode.usage_limit)
        .values(usage_count=PromoCode.usage_count + 1)
    )
    if result.rowcount != 1:
        raise RejectedError(conflict(RejectionCode.PROMO_EXHAUSTED, "This coupon has reached its usage limit."))
