from __future__ import annotations

import pytest

from cleanbuddy.enums import CleanerTier, UserRole


@pytest.fixture()
def admin(make_user):
    return make_user(UserRole.GLOBAL_ADMIN)


def test_default_catalog_is_seeded(client) -> None:
    services = client.get("/pricing/services").json()
    add_ons = client.get("/pricing/add-ons").json()

    assert [s["serviceType"] for s in services] == ["general", "deep", "move_in_out"]
    assert {a["addOn"]: a["price"] for a in add_ons} == {
        "oven": 5000,
        "windows": 8000,
        "fridge": 4000,
        "garage": 10000,
    }


def test_quote_for_inline_location(client, make_cleaner) -> None:
    cleaner = make_cleaner(areas=[{"city": "Bucharest", "postal_code": "010101", "travel_fee": 2500}])

    response = client.post(
        "/pricing/quote",
        json={
            "cleanerProfileId": cleaner.id,
            "serviceType": "general",
            "location": {"city": "Bucharest", "postalCode": "010101"},
        },
    )

    assert response.status_code == 200, response.text
    assert response.json() == {
        "cleanerHourlyRate": 6000,
        "servicePrice": 18000,
        "addOnsPrice": 0,
        "travelFee": 2500,
        "subtotal": 20500,
        "platformFee": 3075,
        "totalPrice": 23575,
        "cleanerPayout": 17425,
        "estimatedDuration": 3.0,
    }


def test_quote_with_saved_address_needs_owner(client, make_cleaner, make_user, create_booking, auth_headers) -> None:
    cleaner = make_cleaner()
    customer = make_user()
    address_id = create_booking(customer, cleaner)["addressId"]
    payload = {"cleanerProfileId": cleaner.id, "serviceType": "deep", "addressId": address_id}

    assert client.post("/pricing/quote", json=payload).status_code == 401
    assert client.post("/pricing/quote", json=payload, headers=auth_headers(make_user())).status_code == 403

    own = client.post("/pricing/quote", json=payload, headers=auth_headers(customer))
    assert own.status_code == 200
    assert own.json()["servicePrice"] == 45000


def test_quote_needs_a_location(client, make_cleaner) -> None:
    cleaner = make_cleaner()

    response = client.post("/pricing/quote", json={"cleanerProfileId": cleaner.id, "serviceType": "general"})

    assert response.status_code == 422


def test_disabled_service_cannot_be_quoted(client, make_cleaner, admin, auth_headers) -> None:
    cleaner = make_cleaner()
    disabled = client.patch("/pricing/services/deep", json={"isActive": False}, headers=auth_headers(admin))
    assert disabled.json()["isActive"] is False

    response = client.post(
        "/pricing/quote",
        json={"cleanerProfileId": cleaner.id, "serviceType": "deep", "location": {"city": "Bucharest"}},
    )

    assert response.status_code == 400
    active = [s["serviceType"] for s in client.get("/pricing/services").json()]
    assert "deep" not in active
    everything = client.get("/pricing/services", params={"activeOnly": "false"}).json()
    assert "deep" in [s["serviceType"] for s in everything]


def test_catalog_changes_are_admin_only(client, make_user, admin, auth_headers) -> None:
    client_user = make_user()
    update = {"price": 6000}

    assert client.patch("/pricing/add-ons/oven", json=update, headers=auth_headers(client_user)).status_code == 403

    response = client.patch("/pricing/add-ons/oven", json=update, headers=auth_headers(admin))
    assert response.json()["price"] == 6000

    duplicate = client.post(
        "/pricing/services",
        json={"serviceType": "general", "name": "General", "baseHours": 2},
        headers=auth_headers(admin),
    )
    assert duplicate.status_code == 400


# ============================================================================
# CLEANER PROFILES AND COMPANIES
# ============================================================================


def test_profile_rate_must_fit_tier(client, make_user, auth_headers) -> None:
    cleaner = make_user(UserRole.CLEANER)

    too_high = client.post("/cleaner-profiles", json={"hourlyRate": 6000}, headers=auth_headers(cleaner))
    assert too_high.status_code == 400

    created = client.post("/cleaner-profiles", json={"hourlyRate": 4500}, headers=auth_headers(cleaner))
    assert created.status_code == 201
    assert created.json()["hourlyRate"] == 4500

    duplicate = client.post("/cleaner-profiles", json={}, headers=auth_headers(cleaner))
    assert duplicate.status_code == 400


def test_clients_cannot_create_profiles(client, make_user, auth_headers) -> None:
    response = client.post("/cleaner-profiles", json={}, headers=auth_headers(make_user()))

    assert response.status_code == 403


def test_tier_change_clamps_rate(client, make_cleaner, make_user, admin, auth_headers) -> None:
    cleaner = make_cleaner(hourly_rate=6000)

    premium = client.put(f"/cleaner-profiles/{cleaner.id}/tier", json={"tier": "premium"}, headers=auth_headers(admin))
    assert premium.json()["tier"] == "premium"
    assert premium.json()["hourlyRate"] == 7000
    assert premium.json()["minRate"] == 7000

    denied = client.put(
        f"/cleaner-profiles/{cleaner.id}/tier", json={"tier": "pro"}, headers=auth_headers(make_user())
    )
    assert denied.status_code == 403


def test_company_admin_profile_links_company(client, db, make_user, auth_headers) -> None:
    admin_user = make_user(UserRole.COMPANY_ADMIN)

    company = client.post(
        "/companies", json={"companyName": "  Fresh Home SRL ", "city": "Bucharest"}, headers=auth_headers(admin_user)
    )
    assert company.status_code == 201, company.text
    assert company.json()["companyName"] == "Fresh Home SRL"
    assert company.json()["companyType"] == "business"

    profile = client.post("/cleaner-profiles", json={}, headers=auth_headers(admin_user))
    assert profile.json()["companyId"] == company.json()["id"]

    mine = client.get("/companies/mine", headers=auth_headers(admin_user)).json()
    assert mine["totalCleaners"] == 1
    assert client.post("/companies", json={"companyName": "Again"}, headers=auth_headers(admin_user)).status_code == 400


def test_deactivating_profile_updates_company_counters(client, make_user, auth_headers) -> None:
    admin_user = make_user(UserRole.COMPANY_ADMIN)
    headers = auth_headers(admin_user)
    client.post("/companies", json={"companyName": "Fresh Home SRL"}, headers=headers)
    client.post("/cleaner-profiles", json={}, headers=headers)

    paused = client.patch("/cleaner-profiles/mine", json={"isActive": False}, headers=headers)
    assert paused.status_code == 200, paused.text
    assert paused.json()["isActive"] is False
    client.patch("/cleaner-profiles/mine", json={"isActive": False}, headers=headers)

    company = client.get("/companies/mine", headers=headers).json()
    assert company["totalCleaners"] == 1
    assert company["activeCleaners"] == 0

    client.patch("/cleaner-profiles/mine", json={"isActive": True}, headers=headers)
    assert client.get("/companies/mine", headers=headers).json()["activeCleaners"] == 1


def test_profile_by_user(client, make_cleaner, make_user) -> None:
    cleaner = make_cleaner()

    found = client.get(f"/cleaner-profiles/by-user/{cleaner.user_id}")
    assert found.status_code == 200
    assert found.json()["id"] == cleaner.id

    missing = client.get(f"/cleaner-profiles/by-user/{make_user().id}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "cleaner profile not found"


def test_search_cleaner_profiles(client, make_cleaner) -> None:
    bucharest = [{"city": "Bucharest", "neighborhood": "Floreasca", "postal_code": "014453"}]
    top = make_cleaner(
        hourly_rate=9000, tier=CleanerTier.PREMIUM, average_rating=4.9, is_verified=True, areas=bucharest
    )
    cheap = make_cleaner(hourly_rate=5000, average_rating=4.2, completed_bookings=30, areas=bucharest)
    make_cleaner(average_rating=3.1, areas=[{"city": "Cluj-Napoca"}])
    make_cleaner(average_rating=5.0, is_active=False, areas=bucharest)

    def ids(**params) -> list[str]:
        response = client.get("/cleaner-profiles/search", params=params)
        assert response.status_code == 200, response.text
        return [p["id"] for p in response.json()["items"]]

    assert ids(city="bucharest") == [top.id, cheap.id]
    assert ids(city="Bucharest", orderBy="rate") == [cheap.id, top.id]
    assert ids(orderBy="experience")[0] == cheap.id
    assert ids(tier="premium") == [top.id]
    assert ids(isVerified="true") == [top.id]
    assert ids(minRating=4.0, maxRating=4.5) == [cheap.id]
    assert ids(postalCode="014453", neighborhood="Floreasca") == [top.id, cheap.id]

    page = client.get("/cleaner-profiles/search", params={"limit": 1, "offset": 1}).json()
    assert page["totalCount"] == 3
    assert [p["id"] for p in page["items"]] == [cheap.id]


def test_search_rejects_inverted_rating_range(client) -> None:
    response = client.get("/cleaner-profiles/search", params={"minRating": 4.5, "maxRating": 4.0})

    assert response.status_code == 400
    assert response.json()["detail"] == "minimum rating must not exceed maximum rating"
