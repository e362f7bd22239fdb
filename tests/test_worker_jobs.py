from datetime import date, timedelta

from sqlalchemy import update

from factories import DROPOFF, PICKUP, column, make_batch, make_organizer, make_trip, make_user
from travonex.models.booking import Booking, BookingStatus
from travonex.models.organizer import Organizer
from travonex.services import booking_service
from travonex.services.booking_service import FareRequest, TravelerDetails
from travonex.tasks import worker_jobs


def test_complete_bookings_job(db, session_factory):
    organizer = make_organizer(db)
    trip = make_trip(db, organizer.id)
    # Ends before today so the job has something to close
    batch = make_batch(db, trip.id, start_in_days=5, end_date=date.today() - timedelta(days=1))
    user = make_user(db)
    booking = booking_service.confirm_booking(
        db,
        FareRequest(user.id, trip.id, batch.id, 1, pickup_point=PICKUP, dropoff_point=DROPOFF),
        [TravelerDetails(name="Isha")],
    )
    assert worker_jobs.complete_bookings(session_factory=session_factory) == {"completed": 1}
    assert column(db, Booking.status, booking.id) == BookingStatus.COMPLETED
    assert worker_jobs.complete_bookings(session_factory=session_factory) == {"completed": 0}


def test_verify_ledgers_job_reports_drift(db, session_factory):
    healthy = make_organizer(db, credits=3)
    drifted = make_organizer(db, credits=3)
    db.execute(update(Organizer).where(Organizer.id == drifted.id).values(lead_credits_available=9))
    db.commit()

    result = worker_jobs.verify_ledgers(session_factory=session_factory)
    assert result["checked"] == 2
    assert result["drifted"] == [drifted.id]
    assert healthy.id not in result["drifted"]
