import pytest

from factories import DROPOFF, PICKUP, make_batch, make_lead, make_organizer, make_promo, make_trip, make_user


@pytest.fixture
def catalog(db):
    organizer = make_organizer(db, credits=1)
    trip = make_trip(db, organizer.id)
    batch = make_batch(db, trip.id, slots=4)
    user = make_user(db, wallet=200)
    make_promo(db, code="FLAT500", value=500)
    lead = make_lead(db, trip.id)
    return {"organizer": organizer.id, "trip": trip.id, "batch": batch.id, "user": user.id, "lead": lead.id}


def booking_body(catalog, **overrides):
    body = {
        "userId": catalog["user"],
        "tripId": catalog["trip"],
        "batchId": catalog["batch"],
        "travelers": [{"name": "Meera"}, {"name": "Arjun"}],
        "pickupPoint": PICKUP,
        "dropoffPoint": DROPOFF,
    }
    body.update(overrides)
    return body


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_quote(client, catalog):
    r = client.post("/api/v1/fares/quote", json={
        "userId": catalog["user"], "tripId": catalog["trip"], "batchId": catalog["batch"],
        "travelerCount": 2, "couponCode": "FLAT500",
    })
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["subtotal"] == 10000
    assert data["couponDiscount"] == 500
    assert data["tax"] == 475
    assert data["finalPayable"] == 9975
    assert data["currency"] == "INR"


def test_rejections_carry_kind_and_code(client, catalog):
    r = client.post("/api/v1/fares/quote", json={
        "userId": catalog["user"], "tripId": catalog["trip"], "batchId": catalog["batch"], "travelerCount": 0,
    })
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "INVALID_TRAVELER_COUNT"

    r = client.post("/api/v1/bookings", json=booking_body(catalog, travelers=[{"name": "x"}] * 5))
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["kind"] == "BusinessRuleViolation"
    assert detail["code"] == "INSUFFICIENT_SLOTS"
    assert detail["retryable"] is False

    assert client.get("/api/v1/bookings/does-not-exist/refund-estimate").status_code == 404


def test_book_estimate_cancel_and_refund(client, catalog):
    r = client.post("/api/v1/bookings", json=booking_body(catalog, couponCode="FLAT500", expectedPayable=9975))
    assert r.status_code == 200, r.text
    booking = r.json()
    assert booking["status"] == "Confirmed"
    assert booking["amount"] == 9975

    assert client.get(f"/api/v1/bookings/{booking['id']}").json()["bookingRef"] == booking["bookingRef"]

    est = client.get(f"/api/v1/bookings/{booking['id']}/refund-estimate").json()
    assert est["eligible"] is True
    assert est["refundPercentage"] == 100
    assert est["refundAmount"] == 9975

    r = client.post(f"/api/v1/bookings/{booking['id']}/cancel", json={"reason": "Exams"})
    assert r.status_code == 200
    assert r.json()["status"] == "Cancelled"
    assert r.json()["refundStatus"] == "Pending"

    r = client.post(f"/api/v1/bookings/{booking['id']}/cancel", json={})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "ALREADY_CANCELLED"

    r = client.post(f"/api/v1/admin/bookings/{booking['id']}/refund-processed", json={"paymentRef": "UTR9"})
    assert r.status_code == 200
    assert r.json()["refundStatus"] == "Processed"


def test_coupon_validation(client, catalog):
    r = client.post("/api/v1/coupons/validate", json={"code": "flat500"})
    assert r.status_code == 200
    assert r.json()["type"] == "Fixed"
    assert client.post("/api/v1/coupons/validate", json={"code": "BOGUS"}).status_code == 404


def test_lead_flow(client, catalog):
    org = catalog["organizer"]
    r = client.post("/api/v1/leads", json={
        "tripId": catalog["trip"], "name": "Kabir", "email": "kabir@example.com", "phone": "+919811111111",
    })
    assert r.status_code == 201

    leads = client.get(f"/api/v1/organizers/{org}/leads").json()
    assert len(leads) == 2
    assert not any(lead["isUnlocked"] for lead in leads)

    r = client.post(f"/api/v1/organizers/{org}/leads/{catalog['lead']}/unlock")
    assert r.status_code == 200
    assert r.json()["remainingCredits"] == 0
    assert r.json()["contactDetails"]["email"] == "ananya@example.com"

    again = client.post(f"/api/v1/organizers/{org}/leads/{catalog['lead']}/unlock").json()
    assert again["alreadyUnlocked"] is True
    assert again["remainingCredits"] == 0

    other = leads[0]["id"] if leads[0]["id"] != catalog["lead"] else leads[1]["id"]
    r = client.post(f"/api/v1/organizers/{org}/leads/{other}/unlock")
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "INSUFFICIENT_CREDITS"


def test_packages_purchase_and_ledger(client, catalog):
    org = catalog["organizer"]
    r = client.post("/api/v1/admin/lead-packages", json={"name": "Growth", "leadCount": 20, "price": 2999, "bonusCredits": 5})
    assert r.status_code == 201
    package_id = r.json()["id"]
    assert [p["name"] for p in client.get("/api/v1/admin/lead-packages").json()] == ["Growth"]

    r = client.post(f"/api/v1/organizers/{org}/credits/purchase", json={"packageId": package_id, "paymentRef": "pay_1"})
    assert r.status_code == 200
    assert r.json()["newBalance"] == 26

    ledger = client.get(f"/api/v1/organizers/{org}/credits").json()
    assert ledger["available"] == 26
    assert ledger["planName"] == "Growth"
    assert ledger["totalPurchased"] == 26

    verify = client.get(f"/api/v1/admin/organizers/{org}/ledger/verify").json()
    assert verify == {"ok": True, "available": 26}


def test_admin_wallet_credit(client, catalog):
    r = client.post(f"/api/v1/admin/users/{catalog['user']}/wallet/credit",
                    json={"amount": 150, "source": "Referral"})
    assert r.status_code == 200
    assert r.json()["walletBalance"] == 350
    assert client.post(f"/api/v1/admin/users/{catalog['user']}/wallet/credit", json={"amount": 0}).status_code == 422


def test_wallet_history_lists_credits_and_booking_debits(client, catalog):
    client.post(f"/api/v1/admin/users/{catalog['user']}/wallet/credit", json={"amount": 100, "source": "Refund"})
    r = client.post("/api/v1/bookings", json=booking_body(catalog, travelers=[{"name": "Meera"}], useWallet=True))
    assert r.status_code == 200, r.text
    assert r.json()["walletAmountUsed"] == 300

    wallet = client.get(f"/api/v1/users/{catalog['user']}/wallet").json()
    assert wallet["walletBalance"] == 0
    assert wallet["currency"] == "INR"
    debit = next(t for t in wallet["transactions"] if t["type"] == "Debit")
    assert debit["amount"] == -300
    assert debit["bookingId"] == r.json()["id"]
    assert debit["balanceAfter"] == 0
    assert any(t["type"] == "Credit" and t["amount"] == 100 for t in wallet["transactions"])

    assert client.get("/api/v1/users/nobody/wallet").status_code == 404
