from datetime import date, timedelta

import pytest
from sqlalchemy import select, func

from factories import DROPOFF, PICKUP, column, make_batch, make_organizer, make_promo, make_trip, make_user
from travonex.core.clock import utcnow
from travonex.models.audit_log import AuditLog
from travonex.models.booking import Booking, BookingStatus, PaymentStatus, RefundStatus
from travonex.models.cancellation import Cancellation
from travonex.models.promo_code import PromoCode
from travonex.models.traveler import Traveler
from travonex.models.trip_batch import TripBatch
from travonex.models.user import User
from travonex.models.wallet_transaction import WalletTransaction
from travonex.services import booking_service, wallet_service
from travonex.services.booking_service import FareRequest, TravelerDetails
from travonex.services.errors import (
    InvariantViolation, Rejection, RejectionCode, RejectionKind, RejectedError, conflict,
)
from travonex.services.fare_calculator import FareBreakdown
from travonex.services.refund_calculator import departure_at


@pytest.fixture
def world(db):
    organizer = make_organizer(db)
    trip = make_trip(db, organizer.id)
    batch = make_batch(db, trip.id, slots=5)
    user = make_user(db, wallet=300)
    promo = make_promo(db, code="FLAT500", value=500, limit=3)
    return trip, batch, user, promo


def request(world, count=2, **kw):
    trip, batch, user, _ = world
    fields = dict(user_id=user.id, trip_id=trip.id, batch_id=batch.id, traveler_count=count,
                  pickup_point=PICKUP, dropoff_point=DROPOFF)
    fields.update(kw)
    return FareRequest(**fields)


def travelers(n):
    return [TravelerDetails(name=f"Traveler {i}", phone="+9198") for i in range(n)]


def book(db, world, count=2, **kw):
    return booking_service.confirm_booking(db, request(world, count, **kw), travelers(count))


def test_quote_reads_live_prices_without_writing(db, world):
    _, batch, _, promo = world
    fare = booking_service.quote_fare(db, request(world, coupon_code="flat500"))
    assert isinstance(fare, FareBreakdown)
    assert fare.final_payable == 9975
    assert column(db, TripBatch.available_slots, batch.id) == 5
    assert column(db, PromoCode.usage_count, promo.id) == 0


def test_quote_uses_batch_price_override(db, world):
    trip, _, user, _ = world
    cheaper = make_batch(db, trip.id, slots=5, price_override=4000)
    fare = booking_service.quote_fare(db, FareRequest(user.id, trip.id, cheaper.id, 1))
    assert fare.base_price == 4000
    assert fare.final_payable == 4200


def test_confirm_takes_slots_and_counts_coupon(db, world):
    _, batch, user, promo = world
    booking = book(db, world, coupon_code="FLAT500")
    assert isinstance(booking, Booking)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.amount == 9975
    assert booking.booking_ref.startswith("TVX-")
    assert column(db, TripBatch.available_slots, batch.id) == 3
    assert column(db, PromoCode.usage_count, promo.id) == 1
    count = db.execute(
        select(func.count()).select_from(Traveler).where(Traveler.booking_id == booking.id)
    ).scalar_one()
    assert count == 2


def test_confirm_debits_wallet_with_history(db, world):
    _, _, user, _ = world
    booking = book(db, world, count=1, use_wallet=True)
    assert booking.wallet_amount_used == 300
    assert booking.amount == 4950
    assert column(db, User.wallet_balance, user.id) == 0
    tx = db.execute(select(WalletTransaction).where(WalletTransaction.booking_id == booking.id)).scalar_one()
    assert tx.amount == -300
    assert tx.balance_after == 0
    assert tx.description == f"Used for Booking {booking.booking_ref}"


def test_stale_client_total_is_rejected(db, world):
    _, batch, _, _ = world
    result = booking_service.confirm_booking(db, request(world), travelers(2), expected_payable=10000)
    assert result.code == RejectionCode.FARE_CHANGED
    assert result.retryable
    assert column(db, TripBatch.available_slots, batch.id) == 5


def test_not_enough_slots(db, world):
    result = book(db, world, count=6)
    assert result.code == RejectionCode.INSUFFICIENT_SLOTS
    assert "Only 5 spots left" in result.message


def test_traveler_details_must_match_count(db, world):
    result = booking_service.confirm_booking(db, request(world, 2), travelers(1))
    assert result.code == RejectionCode.INVALID_TRAVELER_COUNT
    result = booking_service.confirm_booking(db, request(world, 1), [TravelerDetails(name="  ")])
    assert result.code == RejectionCode.MISSING_FIELDS


def test_pickup_point_must_be_offered(db, world):
    result = book(db, world, pickup_point="Somewhere else")
    assert result.kind == RejectionKind.VALIDATION
    assert result.code == RejectionCode.MISSING_PICKUP


def test_unknown_coupon(db, world):
    assert book(db, world, coupon_code="NOPE").kind == RejectionKind.NOT_FOUND


def test_late_failure_rolls_back_everything(db, world, monkeypatch):
    _, batch, user, promo = world

    def lose_race(*args, **kwargs):
        raise RejectedError(conflict(RejectionCode.INSUFFICIENT_WALLET_BALANCE, "changed"))

    monkeypatch.setattr(wallet_service, "debit_for_booking", lose_race)
    result = book(db, world, count=1, coupon_code="FLAT500", use_wallet=True)
    assert result.code == RejectionCode.INSUFFICIENT_WALLET_BALANCE
    assert column(db, TripBatch.available_slots, batch.id) == 5
    assert column(db, PromoCode.usage_count, promo.id) == 0
    assert column(db, User.wallet_balance, user.id) == 300
    assert db.execute(select(func.count()).select_from(Booking)).scalar_one() == 0


def test_closed_batches_take_no_bookings(db, world):
    trip, batch, user, _ = world
    after_departure = departure_at(batch.start_date) + timedelta(hours=1)
    result = booking_service.confirm_booking(db, request(world), travelers(2), now=after_departure)
    assert result.code == RejectionCode.BOOKING_CLOSED

    cutoff_passed = make_batch(db, trip.id, booking_cutoff_date=date.today() - timedelta(days=1))
    result = booking_service.confirm_booking(
        db, request(world, batch_id=cutoff_passed.id), travelers(2),
    )
    assert result.code == RejectionCode.BOOKING_CLOSED


def test_spot_reservation(db, world):
    _, batch, _, _ = world
    booking = book(db, world, count=1, is_partial=True)
    assert booking.is_partial_booking
    assert booking.payment_status == PaymentStatus.PARTIAL
    assert booking.amount == booking.advance_paid == 1000
    assert booking.advance_paid + booking.remaining_amount == booking.total_payable
    assert booking.final_payment_due_date == batch.start_date - timedelta(days=7)


def test_spot_reservation_must_be_enabled(db):
    organizer = make_organizer(db)
    trip = make_trip(db, organizer.id, spot_reservation_enabled=False)
    batch = make_batch(db, trip.id)
    user = make_user(db)
    req = FareRequest(user.id, trip.id, batch.id, 1, is_partial=True, pickup_point=PICKUP, dropoff_point=DROPOFF)
    assert booking_service.quote_fare(db, req).code == RejectionCode.SPOT_RESERVATION_UNAVAILABLE


def test_cancel_twenty_days_out_refunds_half(db, world):
    _, batch, _, _ = world
    booking = book(db, world, coupon_code="FLAT500")
    now = departure_at(batch.start_date) - timedelta(days=20, hours=1)

    estimate = booking_service.estimate_refund(db, booking.id, now=now)
    assert (estimate.lead_days, estimate.refund_percentage, estimate.refund_amount) == (20, 50, 4988)

    cancelled = booking_service.cancel_booking(db, booking.id, reason="plans changed", now=now)
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.refund_status == RefundStatus.PENDING
    assert cancelled.refund_amount == 4988
    assert column(db, TripBatch.available_slots, batch.id) == 5
    record = db.execute(select(Cancellation).where(Cancellation.booking_id == booking.id)).scalar_one()
    assert record.slots_released == 2
    assert record.lead_days == 20

    again = booking_service.cancel_booking(db, booking.id, now=now)
    assert again.code == RejectionCode.ALREADY_CANCELLED
    assert column(db, TripBatch.available_slots, batch.id) == 5


def test_cancel_inside_buffer_rejected(db, world):
    _, batch, _, _ = world
    booking = book(db, world)
    now = departure_at(batch.start_date) - timedelta(hours=12)
    result = booking_service.cancel_booking(db, booking.id, now=now)
    assert result.code == RejectionCode.CANCELLATION_WINDOW_CLOSED
    assert "24 hours" in result.message
    assert column(db, Booking.status, booking.id) == BookingStatus.CONFIRMED
    assert column(db, TripBatch.available_slots, batch.id) == 3


def test_cancel_with_no_refund_owed(db, world):
    _, batch, _, _ = world
    booking = book(db, world)
    now = departure_at(batch.start_date) - timedelta(days=3)
    cancelled = booking_service.cancel_booking(db, booking.id, now=now)
    assert cancelled.refund_amount == 0
    assert cancelled.refund_status == RefundStatus.NONE


def test_process_refund_once(db, world):
    _, batch, _, _ = world
    booking = book(db, world)
    now = departure_at(batch.start_date) - timedelta(days=40)
    booking_service.cancel_booking(db, booking.id, now=now)

    assert booking_service.process_refund(db, booking.id, " ").code == RejectionCode.MISSING_FIELDS
    processed = booking_service.process_refund(db, booking.id, "UTR123")
    assert processed.refund_status == RefundStatus.PROCESSED
    record = db.execute(select(Cancellation).where(Cancellation.booking_id == booking.id)).scalar_one()
    assert record.payment_ref == "UTR123"
    assert record.processed_at is not None
    assert booking_service.process_refund(db, booking.id, "UTR123").code == RejectionCode.REFUND_NOT_PENDING


def test_finished_trips_complete_and_stop_being_cancellable(db, world):
    _, batch, _, _ = world
    booking = book(db, world)
    assert booking_service.complete_finished_bookings(db, today=batch.end_date) == 0
    assert booking_service.complete_finished_bookings(db, today=batch.end_date + timedelta(days=1)) == 1
    assert column(db, Booking.status, booking.id) == BookingStatus.COMPLETED

    result = booking_service.cancel_booking(db, booking.id, now=utcnow())
    assert result.code == RejectionCode.NOT_CANCELLABLE
    assert isinstance(booking_service.estimate_refund(db, booking.id), Rejection)


def test_failed_cancellation_rolls_back_everything(db, world, monkeypatch):
    _, batch, _, _ = world
    booking = book(db, world)
    now = departure_at(batch.start_date) - timedelta(days=20)

    def overflow(*args, **kwargs):
        raise InvariantViolation("slot release would exceed batch capacity")

    monkeypatch.setattr(booking_service, "_release_slots", overflow)
    with pytest.raises(InvariantViolation):
        booking_service.cancel_booking(db, booking.id, reason="plans changed", now=now)

    assert column(db, Booking.status, booking.id) == BookingStatus.CONFIRMED
    assert column(db, Booking.refund_status, booking.id) is None
    assert column(db, TripBatch.available_slots, batch.id) == 3
    assert db.execute(select(func.count()).select_from(Cancellation)).scalar_one() == 0
    cancel_audits = db.execute(
        select(func.count()).select_from(AuditLog).where(AuditLog.action == "booking.cancel")
    ).scalar_one()
    assert cancel_audits == 0
