from __future__ import annotations

import pytest

from cleanbuddy.domain.applications.service import ApplicationService
from cleanbuddy.enums import UserRole
from cleanbuddy.errors import ConflictError, InvariantViolation
from cleanbuddy.models import Application, User

CLEANER_APPLICATION = {
    "applicationType": "cleaner",
    "message": "Five years of experience with residential cleaning",
    "companyInfo": {"companyName": "Ana Clean PFA", "companyCity": "Bucharest"},
    "documents": {"identityDocumentUrl": "r2://test-documents/applications/usr_1/identity-document-1.pdf"},
}


@pytest.fixture()
def admin(make_user):
    return make_user(UserRole.GLOBAL_ADMIN, first_name="Admin", last_name="User")


@pytest.fixture()
def applicant(make_user):
    return make_user(email="ana@example.com", first_name="Ana", last_name="Popescu")


def _submit(client, user, auth_headers, payload=None):
    return client.post("/applications", json=payload or CLEANER_APPLICATION, headers=auth_headers(user))


def _role(db, user) -> str:
    db.refresh(user)
    return user.role


# ============================================================================
# SUBMISSION
# ============================================================================


def test_cleaner_application_moves_applicant_to_pending(
    client, db, applicant, auth_headers, notification_service
) -> None:
    response = _submit(client, applicant, auth_headers)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "pending"
    assert body["companyInfo"]["companyName"] == "Ana Clean PFA"
    assert body["documents"]["identityDocumentUrl"].endswith("identity-document-1.pdf")
    assert _role(db, applicant) == UserRole.PENDING_CLEANER.value
    assert notification_service.messages == ["New cleaner application from Ana Popescu (ana@example.com)"]


@pytest.mark.parametrize(
    ("missing", "detail"),
    [
        ("companyInfo", "company information is required for cleaner applications"),
        ("documents", "documents are required for cleaner applications"),
    ],
)
def test_cleaner_application_requires_details(client, db, applicant, auth_headers, missing, detail) -> None:
    payload = {k: v for k, v in CLEANER_APPLICATION.items() if k != missing}

    response = _submit(client, applicant, auth_headers, payload)

    assert response.status_code == 400
    assert response.json()["detail"] == detail
    assert _role(db, applicant) == UserRole.CLIENT.value


def test_duplicate_pending_application_rejected(client, applicant, auth_headers) -> None:
    payload = {"applicationType": "company_admin", "message": "We run a cleaning company"}
    assert _submit(client, applicant, auth_headers, payload).status_code == 201

    again = _submit(client, applicant, auth_headers, payload)

    assert again.status_code == 400
    assert again.json()["detail"] == "you already have a pending application of this type"


def test_pending_cleaner_cannot_reapply(client, applicant, auth_headers) -> None:
    _submit(client, applicant, auth_headers)

    again = _submit(client, applicant, auth_headers)

    assert again.status_code == 400
    assert again.json()["detail"] == "you cannot submit a cleaner application in your current state"


def test_notification_failure_does_not_fail_submission(
    client, applicant, auth_headers, notification_service, monkeypatch
) -> None:
    def broken(*args, **kwargs):
        raise RuntimeError("slack is down")

    monkeypatch.setattr(notification_service, "post_message", broken)

    assert _submit(client, applicant, auth_headers).status_code == 201


# ============================================================================
# REVIEW
# ============================================================================


@pytest.mark.parametrize(
    ("payload", "granted"),
    [
        (CLEANER_APPLICATION, UserRole.CLEANER),
        ({"applicationType": "company_admin"}, UserRole.COMPANY_ADMIN),
    ],
)
def test_approval_grants_role(client, db, admin, applicant, auth_headers, mail_service, payload, granted) -> None:
    application = _submit(client, applicant, auth_headers, payload).json()

    response = client.post(f"/applications/{application['id']}/approve", headers=auth_headers(admin))

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "approved"
    assert response.json()["reviewedBy"] == admin.id
    assert _role(db, applicant) == granted.value
    assert mail_service.subjects_to(applicant.email) == ["Your application was approved"]


def test_application_is_decided_once(client, admin, applicant, auth_headers) -> None:
    application = _submit(client, applicant, auth_headers).json()
    client.post(f"/applications/{application['id']}/approve", headers=auth_headers(admin))

    again = client.post(f"/applications/{application['id']}/reject", headers=auth_headers(admin))

    assert again.status_code == 400
    assert again.json()["detail"] == "application already approved"


def test_rejection_marks_rejected_cleaner(client, db, admin, applicant, auth_headers, mail_service) -> None:
    application = _submit(client, applicant, auth_headers).json()

    response = client.post(
        f"/applications/{application['id']}/reject",
        json={"reason": "Identity document is unreadable"},
        headers=auth_headers(admin),
    )

    assert response.json()["status"] == "rejected"
    assert response.json()["rejectionReason"] == "Identity document is unreadable"
    assert _role(db, applicant) == UserRole.REJECTED_CLEANER.value
    assert mail_service.subjects_to(applicant.email) == ["Update on your application"]


def test_only_global_admins_review(client, applicant, make_user, auth_headers) -> None:
    application = _submit(client, applicant, auth_headers).json()
    company_admin = make_user(UserRole.COMPANY_ADMIN)

    for user in (applicant, company_admin):
        response = client.post(f"/applications/{application['id']}/approve", headers=auth_headers(user))
        assert response.status_code == 403
    assert client.get("/applications/pending", headers=auth_headers(applicant)).status_code == 403


def test_application_visibility(client, admin, applicant, make_user, auth_headers) -> None:
    application = _submit(client, applicant, auth_headers).json()
    path = f"/applications/{application['id']}"

    assert client.get(path, headers=auth_headers(applicant)).status_code == 200
    assert client.get(path, headers=auth_headers(admin)).status_code == 200
    assert client.get(path, headers=auth_headers(make_user())).status_code == 404

    mine = client.get("/applications/mine", headers=auth_headers(applicant)).json()
    assert [a["id"] for a in mine] == [application["id"]]


def test_pending_queue_is_oldest_first(client, admin, make_user, auth_headers) -> None:
    first = _submit(client, make_user(), auth_headers).json()
    second = _submit(client, make_user(), auth_headers).json()
    client.post(f"/applications/{first['id']}/reject", headers=auth_headers(admin))
    third = _submit(client, make_user(), auth_headers).json()

    pending = client.get("/applications/pending", headers=auth_headers(admin)).json()

    assert [a["id"] for a in pending] == [second["id"], third["id"]]


def test_unknown_application_type_cannot_be_approved(db, admin, applicant, mail_service) -> None:
    application = Application(user_id=applicant.id, application_type="partner", status="pending")
    db.add(application)
    db.commit()

    with pytest.raises(InvariantViolation):
        ApplicationService(db, mail_service, None, None).approve_application(application.id, admin)

    db.expire_all()
    assert db.get(Application, application.id).status == "pending"
    assert db.get(Application, application.id).reviewed_by is None
    assert _role(db, applicant) == UserRole.CLIENT.value
    assert mail_service.sent == []


def test_concurrent_review_conflicts(app, db, admin, applicant, client, auth_headers, mail_service) -> None:
    application = _submit(client, applicant, auth_headers).json()
    other_session = app.state.session_factory()
    try:
        stale_service = ApplicationService(other_session, mail_service, None, None)
        held = stale_service.repo.get_by_id(other_session, application["id"])
        assert held.status == "pending"

        ApplicationService(db, mail_service, None, None).reject_application(application["id"], admin)

        with pytest.raises(ConflictError):
            stale_service.approve_application(application["id"], other_session.get(User, admin.id))
    finally:
        other_session.close()

    db.expire_all()
    assert db.get(Application, application["id"]).status == "rejected"
    assert _role(db, applicant) == UserRole.REJECTED_CLEANER.value


# ============================================================================
# DOCUMENTS
# ============================================================================


def test_document_upload_and_signed_url(client, admin, applicant, auth_headers, storage_service) -> None:
    response = client.post(
        "/applications/documents",
        data={"documentType": "identity document"},
        files={"file": ("id-card.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=auth_headers(applicant),
    )

    assert response.status_code == 201, response.text
    url = response.json()["url"]
    assert url.startswith(f"r2://test-documents/applications/{applicant.id}/identity-document-")
    assert url.endswith(".pdf")
    assert len(storage_service.objects) == 1

    signed = client.get(
        "/applications/documents/signed-url", params={"documentUrl": url}, headers=auth_headers(admin)
    )
    assert signed.status_code == 200
    assert signed.json()["url"].startswith("https://signed.test/applications/")
    assert signed.json()["expiresIn"] == 24 * 60 * 60

    denied = client.get(
        "/applications/documents/signed-url", params={"documentUrl": url}, headers=auth_headers(applicant)
    )
    assert denied.status_code == 403


def test_document_type_is_validated(client, applicant, auth_headers, storage_service) -> None:
    response = client.post(
        "/applications/documents",
        data={"documentType": "identity document"},
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(applicant),
    )

    assert response.status_code == 400
    assert storage_service.objects == {}


# ============================================================================
# ONBOARDING
# ============================================================================


def test_rejected_cleaner_reapplies_and_starts_working(client, db, admin, applicant, auth_headers) -> None:
    first = _submit(client, applicant, auth_headers).json()
    client.post(f"/applications/{first['id']}/reject", headers=auth_headers(admin))

    role = client.put("/users/me/role", json={"role": "pending_application"}, headers=auth_headers(applicant))
    assert role.status_code == 200
    assert role.json()["role"] == "pending_application"

    second = _submit(client, applicant, auth_headers)
    assert second.status_code == 201
    assert _role(db, applicant) == UserRole.PENDING_CLEANER.value

    client.post(f"/applications/{second.json()['id']}/approve", headers=auth_headers(admin))
    assert _role(db, applicant) == UserRole.CLEANER.value

    profile = client.post("/cleaner-profiles", json={"bio": "Detail oriented"}, headers=auth_headers(applicant))
    assert profile.status_code == 201, profile.text
    assert profile.json()["tier"] == "new"
    assert profile.json()["hourlyRate"] == 4000
    assert profile.json()["minRate"] == 4000
    assert profile.json()["maxRate"] == 5000
