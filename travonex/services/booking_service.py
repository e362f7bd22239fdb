"""Booking orchestration: the only place fares and refunds meet storage.

Each public function is one unit of work. Counter mutations (batch slots,
promo usage, wallet balance) are guarded single-statement UPDATEs issued
inside the same transaction as the booking row, so a lost race or any
failure rolls the whole group back.
"""
import uuid
import random
import string
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from travonex.core.clock import as_utc, utcnow
from travonex.core.config import settings
from travonex.models.booking import Booking, BookingStatus, PaymentStatus, RefundStatus
from travonex.models.cancellation import Cancellation
from travonex.models.cancellation_rule import CancellationRule
from travonex.models.promo_code import PromoCode
from travonex.models.traveler import Traveler
from travonex.models.trip import Trip
from travonex.models.trip_batch import TripBatch
from travonex.models.user import User
from travonex.services import promo_service, wallet_service
from travonex.services.audit_service import log_audit
from travonex.services.errors import (
    InvariantViolation, Rejection, RejectionCode, RejectedError,
    conflict, invalid, not_found, violation,
)
from travonex.services.fare_calculator import FareBreakdown, compute_fare, resolve_base_price
from travonex.services.refund_calculator import RefundEstimate, compute_refund, departure_at

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FareRequest:
    user_id: str
    trip_id: str
    batch_id: str
    traveler_count: int
    coupon_code: str | None = None
    use_wallet: bool = False
    is_partial: bool = False
    pickup_point: str = ""
    dropoff_point: str = ""


@dataclass(frozen=True)
class TravelerDetails:
    name: str
    email: str = ""
    phone: str = ""
    emergency_name: str = ""
    emergency_phone: str = ""
    gst_number: str = ""


@dataclass
class _Priced:
    trip: Trip
    batch: TripBatch
    promo: PromoCode | None
    fare: FareBreakdown


def make_booking_ref() -> str:
    return "TVX-" + "".join(random.choices(string.ascii_uppercase + string.digits, k=6))


def _local_today(now: datetime) -> date:
    return as_utc(now).astimezone(ZoneInfo(settings.DEPARTURE_TIMEZONE)).date()


def _price(db: Session, req: FareRequest, now: datetime, lock: bool = False, require_points: bool = False) -> _Priced:
    if req.traveler_count < 1:
        raise RejectedError(invalid(RejectionCode.INVALID_TRAVELER_COUNT, "At least one traveler is required."))

    q = select(TripBatch).where(TripBatch.id == req.batch_id, TripBatch.trip_id == req.trip_id)
    if lock:
        q = q.with_for_update()
    batch = db.execute(q).scalar_one_or_none()
    trip = db.get(Trip, req.trip_id) if batch else None
    if not batch or not trip:
        raise RejectedError(not_found("Trip batch not found."))

    if trip.status != "Published" or batch.status != "Active":
        raise RejectedError(violation(RejectionCode.BATCH_NOT_BOOKABLE, "This batch is not open for booking."))
    today = _local_today(now)
    if as_utc(now) >= departure_at(batch.start_date) or (
        batch.booking_cutoff_date is not None and today > batch.booking_cutoff_date
    ):
        raise RejectedError(violation(RejectionCode.BOOKING_CLOSED, "Bookings for this batch are closed."))
    if req.traveler_count > batch.available_slots:
        raise RejectedError(violation(
            RejectionCode.INSUFFICIENT_SLOTS,
            f"Only {batch.available_slots} spots left on this batch.",
        ))

    if require_points:
        if trip.pickup_labels and req.pickup_point not in trip.pickup_labels:
            raise RejectedError(invalid(RejectionCode.MISSING_PICKUP, "Please select a pickup point."))
        if trip.dropoff_labels and req.dropoff_point not in trip.dropoff_labels:
            raise RejectedError(invalid(RejectionCode.MISSING_DROPOFF, "Please select a drop-off point."))

    if req.is_partial and not trip.spot_reservation_enabled:
        raise RejectedError(violation(
            RejectionCode.SPOT_RESERVATION_UNAVAILABLE, "Spot reservation is not available for this trip.",
        ))

    wallet_balance = 0
    if req.use_wallet or require_points:
        user = db.get(User, req.user_id)
        if not user:
            raise RejectedError(not_found("User not found."))
        wallet_balance = wallet_service.get_balance(db, req.user_id)

    promo = None
    if req.coupon_code:
        promo = promo_service.find_promo(db, req.coupon_code)
        if not promo:
            raise RejectedError(not_found("Invalid coupon code."))

    fare = compute_fare(
        base_price_per_person=resolve_base_price(trip.price, batch.price_override),
        traveler_count=req.traveler_count,
        promo=promo,
        wallet_balance=wallet_balance,
        use_wallet=req.use_wallet,
        tax_included=trip.tax_included,
        tax_percentage=trip.tax_percentage,
        is_partial=req.is_partial,
        advance_amount=trip.advance_amount,
        now=now,
    )
    if isinstance(fare, Rejection):
        raise RejectedError(fare)
    return _Priced(trip=trip, batch=batch, promo=promo, fare=fare)


def quote_fare(db: Session, req: FareRequest, now: datetime | None = None) -> FareBreakdown | Rejection:
    try:
        return _price(db, req, now or utcnow()).fare
    except RejectedError as e:
        return e.rejection
    finally:
        # Quotes never write; release any read transaction
        db.rollback()


def _take_slots(db: Session, batch_id: str, count: int) -> None:
    result = db.execute(
        update(TripBatch)
        .where(TripBatch.id == batch_id, TripBatch.available_slots >= count)
        .values(available_slots=TripBatch.available_slots - count)
    )
    if result.rowcount != 1:
        raise RejectedError(conflict(
            RejectionCode.INSUFFICIENT_SLOTS, "Someone just booked the last spots on this batch. Please try again.",
        ))


def _release_slots(db: Session, batch_id: str, count: int) -> None:
    result = db.execute(
        update(TripBatch)
        .where(TripBatch.id == batch_id, TripBatch.available_slots + count <= TripBatch.max_participants)
        .values(available_slots=TripBatch.available_slots + count)
    )
    if result.rowcount != 1:
        raise InvariantViolation("slot release would exceed batch capacity", batch_id=batch_id, count=count)


def _unique_ref(db: Session) -> str:
    for _ in range(10):
        ref = make_booking_ref()
        if not db.execute(select(Booking.id).where(Booking.booking_ref == ref)).first():
            return ref
    raise InvariantViolation("could not allocate booking reference")


def confirm_booking(
    db: Session,
    req: FareRequest,
    travelers: list[TravelerDetails],
    expected_payable: int | None = None,
    now: datetime | None = None,
) -> Booking | Rejection:
    """Create the booking, take the slots, count the coupon use and debit the wallet, all or nothing."""
    now = now or utcnow()
    try:
        if len(travelers) != req.traveler_count:
            raise RejectedError(invalid(
                RejectionCode.INVALID_TRAVELER_COUNT, "Traveler details are required for every traveler.",
            ))
        if any(not (t.name or "").strip() for t in travelers):
            raise RejectedError(invalid(RejectionCode.MISSING_FIELDS, "Every traveler needs a name."))

        # The fare is re-derived from live rows; a client-held breakdown is never trusted
        priced = _price(db, req, now, lock=True, require_points=True)
        fare = priced.fare
        if expected_payable is not None and int(expected_payable) != fare.final_payable:
            raise RejectedError(conflict(
                RejectionCode.FARE_CHANGED, "The fare has changed. Please review the updated total.",
            ))

        booking_id = str(uuid.uuid4())
        ref = _unique_ref(db)

        _take_slots(db, priced.batch.id, req.traveler_count)
        if priced.promo is not None:
            promo_service.consume_promo(db, priced.promo.id)
        if fare.wallet_discount > 0:
            wallet_service.debit_for_booking(db, req.user_id, fare.wallet_discount, booking_id, ref)

        booking = Booking(
            id=booking_id,
            booking_ref=ref,
            trip_id=priced.trip.id,
            batch_id=priced.batch.id,
            user_id=req.user_id,
            traveler_count=req.traveler_count,
            pickup_point=req.pickup_point or "",
            dropoff_point=req.dropoff_point or "",
            unit_price=fare.base_price,
            subtotal=fare.subtotal,
            coupon_code=fare.coupon_code,
            coupon_discount=fare.coupon_discount,
            wallet_amount_used=fare.wallet_discount,
            tax_amount=fare.tax,
            total_payable=fare.total_payable,
            amount=fare.final_payable,
            is_partial_booking=fare.is_partial,
            advance_paid=fare.advance_amount if fare.is_partial else None,
            remaining_amount=fare.remaining_amount if fare.is_partial else None,
            final_payment_due_date=(
                priced.batch.start_date - timedelta(days=priced.trip.final_payment_due_days or 0)
                if fare.is_partial else None
            ),
            payment_status=PaymentStatus.PARTIAL if fare.is_partial else PaymentStatus.FULL,
            status=BookingStatus.CONFIRMED,
            created_at=now,
        )
        if booking.amount < 0 or (
            fare.is_partial and booking.advance_paid + booking.remaining_amount != booking.total_payable
        ):
            raise InvariantViolation("booking amounts do not reconcile", booking_ref=ref, fare=fare.as_dict())
        db.add(booking)
        for t in travelers:
            db.add(Traveler(
                id=str(uuid.uuid4()),
                booking_id=booking_id,
                name=t.name.strip(),
                email=t.email or "",
                phone=t.phone or "",
                emergency_name=t.emergency_name or "",
                emergency_phone=t.emergency_phone or "",
                gst_number=t.gst_number or "",
            ))
        log_audit(db, req.user_id, "booking.confirm", "booking", booking_id, {
            "booking_ref": ref, "batch_id": priced.batch.id, "travelers": req.traveler_count, **fare.as_dict(),
        })
        db.commit()
    except RejectedError as e:
        db.rollback()
        logger.info("booking rejected batch=%s user=%s code=%s", req.batch_id, req.user_id, e.rejection.code.value)
        return e.rejection
    except Exception:
        db.rollback()
        raise
    logger.info("booking confirmed ref=%s batch=%s amount=%s", booking.booking_ref, booking.batch_id, booking.amount)
    return booking


def get_booking(db: Session, booking_id: str) -> Booking | None:
    return db.get(Booking, booking_id)


def _rules_for(db: Session, trip_id: str) -> list[CancellationRule]:
    return db.execute(select(CancellationRule).where(CancellationRule.trip_id == trip_id)).scalars().all()


def _check_cancellable(booking: Booking) -> None:
    if booking.status == BookingStatus.CANCELLED:
        raise RejectedError(violation(RejectionCode.ALREADY_CANCELLED, "This booking has already been cancelled."))
    if booking.status != BookingStatus.CONFIRMED:
        raise RejectedError(violation(RejectionCode.NOT_CANCELLABLE, "Only confirmed bookings can be cancelled."))


def _estimate(db: Session, booking: Booking, now: datetime) -> RefundEstimate:
    batch = db.get(TripBatch, booking.batch_id)
    if not batch:
        raise InvariantViolation("booking references a missing batch", booking_id=booking.id)
    return compute_refund(booking.amount, batch.start_date, now, _rules_for(db, booking.trip_id))


def estimate_refund(db: Session, booking_id: str, now: datetime | None = None) -> RefundEstimate | Rejection:
    booking = db.get(Booking, booking_id)
    if not booking:
        return not_found("Booking not found.")
    try:
        _check_cancellable(booking)
    except RejectedError as e:
        return e.rejection
    return _estimate(db, booking, now or utcnow())


def _window_closed_message() -> str:
    hours = settings.CANCELLATION_BUFFER_HOURS
    return f"Cancellation is not allowed within {hours} hours of the trip start date."


def cancel_booking(
    db: Session,
    booking_id: str,
    reason: str = "",
    now: datetime | None = None,
    actor_id: str | None = None,
) -> Booking | Rejection:
    """Cancel, free the slots and record the refund owed, all or nothing."""
    now = now or utcnow()
    try:
        booking = db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        ).scalar_one_or_none()
        if not booking:
            raise RejectedError(not_found("Booking not found."))
        _check_cancellable(booking)

        estimate = _estimate(db, booking, now)
        if not estimate.eligible:
            raise RejectedError(violation(RejectionCode.CANCELLATION_WINDOW_CLOSED, _window_closed_message()))

        refund_status = RefundStatus.PENDING if estimate.refund_amount > 0 else RefundStatus.NONE
        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == BookingStatus.CONFIRMED)
            .values(
                status=BookingStatus.CANCELLED,
                refund_status=refund_status,
                refund_percentage=estimate.refund_percentage,
                refund_amount=estimate.refund_amount,
                cancellation_reason=(reason or "")[:500],
                cancelled_at=now,
            )
        )
        if result.rowcount != 1:
            raise RejectedError(conflict(RejectionCode.ALREADY_CANCELLED, "This booking has already been cancelled."))

        _release_slots(db, booking.batch_id, booking.traveler_count)
        db.add(Cancellation(
            id=str(uuid.uuid4()),
            booking_id=booking.id,
            booking_ref=booking.booking_ref,
            requested_by_user_id=actor_id or booking.user_id,
            reason=(reason or "")[:500],
            lead_days=estimate.lead_days,
            slots_released=booking.traveler_count,
            refund_percentage=estimate.refund_percentage,
            refund_amount=estimate.refund_amount,
            refund_status=refund_status,
        ))
        log_audit(db, actor_id or booking.user_id, "booking.cancel", "booking", booking.id, {
            "booking_ref": booking.booking_ref,
            "lead_days": estimate.lead_days,
            "refund_percentage": estimate.refund_percentage,
            "refund_amount": estimate.refund_amount,
        })
        db.commit()
    except RejectedError as e:
        db.rollback()
        logger.info("cancellation rejected booking=%s code=%s", booking_id, e.rejection.code.value)
        return e.rejection
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info("booking cancelled ref=%s refund=%s (%s%%)", booking.booking_ref, booking.refund_amount,
                booking.refund_percentage)
    return booking


def process_refund(db: Session, booking_id: str, payment_ref: str, actor_id: str = "admin",
                   now: datetime | None = None) -> Booking | Rejection:
    """Mark a pending refund as paid out. The payout itself happens outside the engine."""
    now = now or utcnow()
    if not (payment_ref or "").strip():
        return invalid(RejectionCode.MISSING_FIELDS, "A payment reference is required.")
    try:
        booking = db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        ).scalar_one_or_none()
        if not booking:
            raise RejectedError(not_found("Booking not found."))
        result = db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BookingStatus.CANCELLED,
                Booking.refund_status == RefundStatus.PENDING,
            )
            .values(refund_status=RefundStatus.PROCESSED)
        )
        if result.rowcount != 1:
            raise RejectedError(violation(RejectionCode.REFUND_NOT_PENDING, "This booking has no pending refund."))
        cancellation = db.execute(
            select(Cancellation).where(Cancellation.booking_id == booking_id)
        ).scalar_one_or_none()
        if not cancellation:
            raise InvariantViolation("pending refund without a cancellation record", booking_id=booking_id)
        cancellation.refund_status = RefundStatus.PROCESSED
        cancellation.payment_ref = payment_ref.strip()
        cancellation.processed_at = now
        log_audit(db, actor_id, "booking.refund_processed", "booking", booking_id, {
            "booking_ref": booking.booking_ref, "refund_amount": booking.refund_amount, "payment_ref": payment_ref,
        })
        db.commit()
    except RejectedError as e:
        db.rollback()
        return e.rejection
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info("refund processed ref=%s amount=%s", booking.booking_ref, booking.refund_amount)
    return booking


def complete_finished_bookings(db: Session, today: date | None = None) -> int:
    """Confirmed bookings whose batch has ended become Completed."""
    today = today or _local_today(utcnow())
    rows = db.execute(
        select(Booking)
        .join(TripBatch, TripBatch.id == Booking.batch_id)
        .where(Booking.status == BookingStatus.CONFIRMED, TripBatch.end_date < today)
    ).scalars().all()
    now = utcnow()
    for b in rows:
        b.status = BookingStatus.COMPLETED
        b.completed_at = now
        log_audit(db, "system", "booking.complete", "booking", b.id, {"booking_ref": b.booking_ref})
    db.commit()
    if rows:
        logger.info("completed %s bookings", len(rows))
    return len(rows)
