from __future__ import annotations

import pytest

from cleanbuddy.domain.bookings.service import BookingService
from cleanbuddy.enums import UserRole
from cleanbuddy.errors import ConflictError
from cleanbuddy.models import Address, Booking, User


@pytest.fixture()
def cleaner(make_cleaner):
    return make_cleaner()


@pytest.fixture()
def customer(make_user):
    return make_user(email="maria@example.com")


def _post(client, path: str, user: User, auth_headers, json: dict | None = None):
    return client.post(path, json=json, headers=auth_headers(user))


# ============================================================================
# CREATION
# ============================================================================


def test_create_booking_freezes_price_snapshot(client, db, cleaner, customer, create_booking) -> None:
    booking = create_booking(customer, cleaner, addOns=["oven"])

    assert booking["status"] == "pending"
    assert booking["customerId"] == customer.id
    assert booking["cleanerId"] == cleaner.user_id
    assert booking["cleanerHourlyRate"] == 6000
    assert booking["servicePrice"] == 18000
    assert booking["addOnsPrice"] == 5000
    assert booking["platformFee"] == 3450
    assert booking["totalPrice"] == 26450
    assert booking["cleanerPayout"] == 19550
    assert booking["duration"] == 4.0
    assert booking["isRecurring"] is False

    db.refresh(cleaner)
    assert cleaner.total_bookings == 1

    address = db.get(Address, booking["addressId"])
    assert address.user_id == customer.id
    assert address.is_default is True


def test_rate_change_does_not_touch_existing_bookings(client, db, cleaner, customer, create_booking) -> None:
    booking = create_booking(customer, cleaner)

    cleaner.hourly_rate = 7000
    db.commit()

    stored = db.get(Booking, booking["id"])
    assert stored.cleaner_hourly_rate == 6000
    assert stored.total_price == 20700


def test_travel_fee_comes_from_service_area(client, make_cleaner, customer, create_booking) -> None:
    cleaner = make_cleaner(areas=[{"city": "Bucharest", "travel_fee": 2000}])

    booking = create_booking(customer, cleaner)

    assert booking["travelFee"] == 2000
    assert booking["platformFee"] == 3000
    assert booking["totalPrice"] == 23000
    assert booking["cleanerPayout"] == 17000


def test_second_address_is_not_default(client, db, cleaner, customer, create_booking, auth_headers) -> None:
    create_booking(customer, cleaner)
    create_booking(customer, cleaner, address={"streetAddress": "Calea Victoriei 1", "city": "Bucharest"})

    addresses = client.get("/addresses/mine", headers=auth_headers(customer)).json()
    assert [a["isDefault"] for a in addresses] == [True, False]


def test_saved_address_must_belong_to_customer(
    client, cleaner, customer, make_user, create_booking, auth_headers, booking_payload
) -> None:
    first = create_booking(customer, cleaner)
    stranger = make_user()

    response = client.post(
        "/bookings",
        json=booking_payload(cleaner, address=None, addressId=first["addressId"]),
        headers=auth_headers(stranger),
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "address does not belong to user"


def test_cleaner_not_accepting_bookings(client, make_cleaner, customer, auth_headers, booking_payload) -> None:
    cleaner = make_cleaner(is_available_for_booking=False)

    response = client.post("/bookings", json=booking_payload(cleaner), headers=auth_headers(customer))

    assert response.status_code == 400


def test_slot_taken_by_confirmed_booking(
    client, cleaner, customer, make_user, create_booking, auth_headers, booking_payload
) -> None:
    first = create_booking(customer, cleaner)
    assert _post(client, f"/bookings/{first['id']}/confirm", cleaner.user, auth_headers).status_code == 200

    other = make_user()
    overlapping = client.post(
        "/bookings", json=booking_payload(cleaner, scheduledTime="11:00"), headers=auth_headers(other)
    )
    assert overlapping.status_code == 400
    assert overlapping.json()["detail"] == "cleaner is not available at the requested time"

    after = client.post(
        "/bookings", json=booking_payload(cleaner, scheduledTime="12:00"), headers=auth_headers(other)
    )
    assert after.status_code == 201


def test_slot_blocked_by_unavailable_window(client, cleaner, customer, auth_headers, booking_payload) -> None:
    blocked = client.post(
        "/availability",
        json={"date": "2030-06-01", "startTime": "10:00", "endTime": "11:00"},
        headers=auth_headers(cleaner.user),
    )
    assert blocked.status_code == 201

    response = client.post("/bookings", json=booking_payload(cleaner), headers=auth_headers(customer))
    assert response.status_code == 400


def test_invalid_time_is_rejected(client, cleaner, customer, auth_headers, booking_payload) -> None:
    response = client.post(
        "/bookings", json=booking_payload(cleaner, scheduledTime="25:00"), headers=auth_headers(customer)
    )
    assert response.status_code == 422


# ============================================================================
# GUEST CHECKOUT
# ============================================================================


def _guest(email: str = "elena@example.com") -> dict:
    return {"email": email, "firstName": "Elena", "lastName": "Radu", "phone": "+40700000000"}


def test_guest_booking_creates_client_account(client, db, cleaner, booking_payload) -> None:
    response = client.post("/bookings", json=booking_payload(cleaner, guest=_guest()))

    assert response.status_code == 201, response.text
    guest = db.query(User).filter(User.email == "elena@example.com").one()
    assert guest.role == UserRole.CLIENT.value
    assert response.json()["customerId"] == guest.id


def test_guest_email_collision_is_case_insensitive(client, db, cleaner, make_user, booking_payload) -> None:
    make_user(email="Elena@Example.com")

    response = client.post("/bookings", json=booking_payload(cleaner, guest=_guest("elena@example.com")))

    assert response.status_code == 409
    assert db.query(Booking).count() == 0
    assert db.query(User).filter(User.email == "elena@example.com").count() == 0


def test_anonymous_booking_needs_guest_details(client, cleaner, booking_payload) -> None:
    response = client.post("/bookings", json=booking_payload(cleaner))

    assert response.status_code == 401
    assert response.json()["detail"] == "authentication required or user details must be provided"


def test_guest_cannot_use_saved_address(client, cleaner, booking_payload) -> None:
    response = client.post(
        "/bookings", json=booking_payload(cleaner, address=None, addressId="addr_123", guest=_guest())
    )
    assert response.status_code == 400


def test_guest_bookings_are_rate_limited(client, cleaner, booking_payload) -> None:
    for i in range(5):
        response = client.post("/bookings", json=booking_payload(cleaner, guest=_guest(f"guest{i}@example.com")))
        assert response.status_code == 201, response.text

    blocked = client.post("/bookings", json=booking_payload(cleaner, guest=_guest("guest9@example.com")))
    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers


# ============================================================================
# TRANSITIONS
# ============================================================================


def test_full_lifecycle_updates_rollups_and_notifies(
    client, db, cleaner, customer, create_booking, auth_headers, mail_service
) -> None:
    booking = create_booking(customer, cleaner)
    booking_id = booking["id"]

    confirmed = _post(client, f"/bookings/{booking_id}/confirm", cleaner.user, auth_headers)
    assert confirmed.json()["status"] == "confirmed"
    assert confirmed.json()["confirmedAt"] is not None

    started = _post(client, f"/bookings/{booking_id}/start", cleaner.user, auth_headers)
    assert started.json()["status"] == "in_progress"

    completed = _post(
        client, f"/bookings/{booking_id}/complete", cleaner.user, auth_headers, json={"notes": "Left keys at desk"}
    )
    body = completed.json()
    assert body["status"] == "completed"
    assert body["cleanerNotes"] == "Left keys at desk"
    assert body["completedAt"] is not None

    db.refresh(cleaner)
    assert cleaner.total_bookings == 1
    assert cleaner.completed_bookings == 1
    assert cleaner.total_earnings == 15300

    assert mail_service.subjects_to(customer.email) == ["Your cleaning is confirmed", "Your cleaning is complete"]


@pytest.mark.parametrize(
    ("action", "detail"),
    [
        ("confirm", "only the assigned cleaner can confirm this booking"),
        ("start", "only the assigned cleaner can start this booking"),
        ("complete", "only the assigned cleaner can complete this booking"),
        ("no-show", "only the assigned cleaner can mark customer as no-show"),
    ],
)
def test_only_assigned_cleaner_drives_the_job(
    client, cleaner, customer, create_booking, auth_headers, action, detail
) -> None:
    booking = create_booking(customer, cleaner)

    response = _post(client, f"/bookings/{booking['id']}/{action}", customer, auth_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == detail


def test_out_of_order_transitions_are_rejected(client, cleaner, customer, create_booking, auth_headers) -> None:
    booking = create_booking(customer, cleaner)
    path = f"/bookings/{booking['id']}"

    start = _post(client, f"{path}/start", cleaner.user, auth_headers)
    assert start.status_code == 400
    assert start.json()["detail"] == "can only start confirmed bookings"

    complete = _post(client, f"{path}/complete", cleaner.user, auth_headers)
    assert complete.json()["detail"] == "can only complete bookings that are in progress"

    no_show = _post(client, f"{path}/no-show", cleaner.user, auth_headers)
    assert no_show.json()["detail"] == "can only mark no-show for confirmed bookings"

    _post(client, f"{path}/confirm", cleaner.user, auth_headers)
    again = _post(client, f"{path}/confirm", cleaner.user, auth_headers)
    assert again.json()["detail"] == "can only confirm pending bookings"


def test_no_show_from_confirmed(client, cleaner, customer, create_booking, auth_headers) -> None:
    booking = create_booking(customer, cleaner)
    _post(client, f"/bookings/{booking['id']}/confirm", cleaner.user, auth_headers)

    response = _post(client, f"/bookings/{booking['id']}/no-show", cleaner.user, auth_headers)

    assert response.json()["status"] == "no_show"
    cancel = _post(client, f"/bookings/{booking['id']}/cancel", customer, auth_headers, json={"reason": "other"})
    assert cancel.status_code == 400


def test_customer_cancellation(client, db, cleaner, customer, create_booking, auth_headers, mail_service) -> None:
    booking = create_booking(customer, cleaner)

    response = _post(
        client,
        f"/bookings/{booking['id']}/cancel",
        customer,
        auth_headers,
        json={"reason": "customer_request", "note": "Plans changed"},
    )

    body = response.json()
    assert body["status"] == "cancelled"
    assert body["cancellationReason"] == "customer_request"
    assert body["cancellationNote"] == "Plans changed"
    assert body["cancelledBy"] == customer.id
    assert body["cancelledAt"] is not None

    db.refresh(cleaner)
    assert cleaner.cancelled_bookings == 1
    assert mail_service.subjects_to(cleaner.user.email) == ["Your booking was cancelled"]
    assert mail_service.subjects_to(customer.email) == []

    again = _post(client, f"/bookings/{booking['id']}/cancel", customer, auth_headers, json={"reason": "other"})
    assert again.status_code == 400
    assert again.json()["detail"] == "cannot cancel completed or already cancelled bookings"


def test_admin_can_cancel_confirmed_booking(client, cleaner, customer, make_user, create_booking, auth_headers) -> None:
    admin = make_user(UserRole.GLOBAL_ADMIN)
    booking = create_booking(customer, cleaner)
    _post(client, f"/bookings/{booking['id']}/confirm", cleaner.user, auth_headers)

    response = _post(client, f"/bookings/{booking['id']}/cancel", admin, auth_headers, json={"reason": "emergency"})

    assert response.json()["status"] == "cancelled"


def test_strangers_cannot_see_or_cancel(client, cleaner, customer, make_user, create_booking, auth_headers) -> None:
    booking = create_booking(customer, cleaner)
    stranger = make_user()

    assert client.get(f"/bookings/{booking['id']}", headers=auth_headers(stranger)).status_code == 404
    cancel = _post(client, f"/bookings/{booking['id']}/cancel", stranger, auth_headers, json={"reason": "other"})
    assert cancel.status_code == 404
    assert client.get(f"/bookings/{booking['id']}", headers=auth_headers(cleaner.user)).status_code == 200


@pytest.mark.parametrize("action", ["confirm", "start", "complete", "no-show"])
def test_strangers_cannot_tell_bookings_exist(
    client, cleaner, customer, make_cleaner, create_booking, auth_headers, action
) -> None:
    booking = create_booking(customer, cleaner)
    other = make_cleaner()

    existing = _post(client, f"/bookings/{booking['id']}/{action}", other.user, auth_headers)
    missing = _post(client, f"/bookings/bkg_missing/{action}", other.user, auth_headers)

    assert existing.status_code == missing.status_code == 404
    assert existing.json() == missing.json()

    update = client.patch(f"/bookings/{booking['id']}", json={"customerNotes": "x"}, headers=auth_headers(other.user))
    assert update.status_code == 404


def test_update_pending_booking(client, cleaner, customer, create_booking, auth_headers) -> None:
    booking = create_booking(customer, cleaner)
    path = f"/bookings/{booking['id']}"

    updated = client.patch(
        path, json={"scheduledTime": "14:00", "customerNotes": "Ring twice"}, headers=auth_headers(customer)
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["scheduledTime"] == "14:00"
    assert updated.json()["customerNotes"] == "Ring twice"

    by_cleaner = client.patch(path, json={"customerNotes": "x"}, headers=auth_headers(cleaner.user))
    assert by_cleaner.status_code == 403

    _post(client, f"{path}/confirm", cleaner.user, auth_headers)
    locked = client.patch(path, json={"scheduledTime": "15:00"}, headers=auth_headers(customer))
    assert locked.status_code == 400
    assert locked.json()["detail"] == "can only update pending bookings"


def test_reschedule_into_taken_slot(client, cleaner, customer, make_user, create_booking, auth_headers) -> None:
    taken = create_booking(make_user(), cleaner, scheduledTime="14:00")
    _post(client, f"/bookings/{taken['id']}/confirm", cleaner.user, auth_headers)
    booking = create_booking(customer, cleaner)

    response = client.patch(
        f"/bookings/{booking['id']}", json={"scheduledTime": "13:00"}, headers=auth_headers(customer)
    )

    assert response.status_code == 400


def test_concurrent_confirmation_conflicts(app, db, cleaner, customer, create_booking, mail_service) -> None:
    booking = create_booking(customer, cleaner)
    other_session = app.state.session_factory()
    try:
        stale_service = BookingService(other_session, mail_service, 15.0)
        held = stale_service.repo.get_by_id(other_session, booking["id"])
        assert held.status == "pending"

        BookingService(db, mail_service, 15.0).confirm_booking(booking["id"], cleaner.user)

        with pytest.raises(ConflictError):
            stale_service.confirm_booking(booking["id"], other_session.get(User, cleaner.user_id))
    finally:
        other_session.close()

    db.expire_all()
    assert db.get(Booking, booking["id"]).status == "confirmed"


# ============================================================================
# LISTINGS
# ============================================================================


def test_listings_and_filters(client, cleaner, customer, make_user, create_booking, auth_headers) -> None:
    first = create_booking(customer, cleaner)
    second = create_booking(customer, cleaner, scheduledDate="2030-06-02", frequency="weekly")
    _post(client, f"/bookings/{first['id']}/confirm", cleaner.user, auth_headers)

    mine = client.get("/bookings/mine", headers=auth_headers(customer)).json()
    assert mine["totalCount"] == 2
    assert [b["id"] for b in mine["items"]] == [second["id"], first["id"]]

    confirmed = client.get("/bookings/mine", params={"status": "confirmed"}, headers=auth_headers(customer)).json()
    assert [b["id"] for b in confirmed["items"]] == [first["id"]]

    recurring = client.get("/bookings/mine", params={"isRecurring": "true"}, headers=auth_headers(customer)).json()
    assert [b["id"] for b in recurring["items"]] == [second["id"]]

    page = client.get("/bookings/mine", params={"limit": 1, "offset": 1}, headers=auth_headers(customer)).json()
    assert page["totalCount"] == 2
    assert [b["id"] for b in page["items"]] == [first["id"]]

    jobs = client.get("/bookings/jobs", headers=auth_headers(cleaner.user)).json()
    assert jobs["totalCount"] == 2
    assert client.get("/bookings/jobs", headers=auth_headers(customer)).status_code == 403

    upcoming = client.get("/bookings/upcoming", headers=auth_headers(customer)).json()
    assert [b["id"] for b in upcoming] == [first["id"], second["id"]]

    assert client.get("/bookings/mine", headers=auth_headers(make_user())).json()["totalCount"] == 0


def test_admin_lists_all_bookings(client, make_cleaner, customer, make_user, create_booking, auth_headers) -> None:
    cleaner = make_cleaner()
    other_customer = make_user()
    first = create_booking(customer, cleaner)
    second = create_booking(other_customer, cleaner, scheduledDate="2030-06-02", serviceType="deep")
    admin = make_user(UserRole.GLOBAL_ADMIN)

    everything = client.get("/bookings/all", headers=auth_headers(admin)).json()
    assert everything["totalCount"] == 2
    assert [b["id"] for b in everything["items"]] == [second["id"], first["id"]]

    by_customer = client.get(
        "/bookings/all", params={"customerId": customer.id}, headers=auth_headers(admin)
    ).json()
    assert [b["id"] for b in by_customer["items"]] == [first["id"]]

    deep = client.get("/bookings/all", params={"serviceType": "deep"}, headers=auth_headers(admin)).json()
    assert [b["id"] for b in deep["items"]] == [second["id"]]


@pytest.mark.parametrize("role", [UserRole.CLIENT, UserRole.CLEANER, UserRole.COMPANY_ADMIN])
def test_all_bookings_is_admin_only(client, make_user, auth_headers, role: UserRole) -> None:
    response = client.get("/bookings/all", headers=auth_headers(make_user(role)))

    assert response.status_code == 403
    assert response.json()["detail"] == "access forbidden, global admin access required"
