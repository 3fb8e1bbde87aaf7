"""Shared pytest fixtures: an app on a throwaway SQLite file plus recording collaborators."""
from __future__ import annotations

import os
from typing import Optional, Union
from uuid import uuid4

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
for _key in ("REDIS_URL", "RESEND_API_KEY", "SLACK_WEBHOOK_URL", "R2_ACCOUNT_ID"):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient

from cleanbuddy.auth import create_access_token
from cleanbuddy.email_service import MailService
from cleanbuddy.enums import CleanerTier, CompanyType, UserRole
from cleanbuddy.main import create_app
from cleanbuddy.models import CleanerProfile, Company, ServiceArea, User
from cleanbuddy.rate_limiter import reset_rate_limits
from cleanbuddy.services.document_storage import DocumentStorage
from cleanbuddy.services.notification_service import NotificationService


class RecordingMailService(MailService):
    """Keeps outgoing mail in memory instead of calling Resend."""

    def __init__(self) -> None:
        super().__init__(api_key="test-key", from_address="CleanBuddy <test@cleanbuddy.ro>")
        self.sent: list[dict] = []

    def send(self, to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
        self.sent.append({"to": to, "subject": subject})
        return {"id": f"email_{len(self.sent)}"}

    def subjects_to(self, email: str) -> list[str]:
        return [m["subject"] for m in self.sent if m["to"] == email]


class RecordingNotificationService(NotificationService):
    def __init__(self) -> None:
        super().__init__(webhook_url="https://hooks.slack.test/services/T000/B000")
        self.messages: list[str] = []

    def post_message(self, text: str, context: Optional[dict[str, str]] = None) -> None:
        self.messages.append(text)


class InMemoryDocumentStorage(DocumentStorage):
    def __init__(self) -> None:
        super().__init__("account", "key-id", "secret", "test-documents")
        self.objects: dict[str, bytes] = {}

    def upload(self, key: str, content: bytes, content_type: Optional[str]) -> str:
        self.objects[key] = content
        return f"{self.url_prefix}{key}"

    def generate_presigned_url(self, document_url: str, expiration: int = 3600) -> str:
        return f"https://signed.test/{document_url.removeprefix(self.url_prefix)}?expires={expiration}"


@pytest.fixture()
def mail_service() -> RecordingMailService:
    return RecordingMailService()


@pytest.fixture()
def notification_service() -> RecordingNotificationService:
    return RecordingNotificationService()


@pytest.fixture()
def storage_service() -> InMemoryDocumentStorage:
    return InMemoryDocumentStorage()


@pytest.fixture()
def app(tmp_path, mail_service, notification_service, storage_service):
    reset_rate_limits()
    return create_app(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        mail_service=mail_service,
        notification_service=notification_service,
        storage_service=storage_service,
        platform_fee_percentage=15.0,
    )


@pytest.fixture()
def client(app):
    """Entering the client runs startup: tables are created and the catalog seeded."""
    with TestClient(app) as test_client:
        yield test_client
    reset_rate_limits()


@pytest.fixture()
def db(client, app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture()
def make_user(db):
    def _make(
        role: UserRole = UserRole.CLIENT,
        email: Optional[str] = None,
        first_name: str = "Maria",
        last_name: str = "Ionescu",
    ) -> User:
        user = User(
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_cleaner(db, make_user):
    """A cleaner user with an active standard-tier profile at 6000 bani/hour."""

    def _make(
        hourly_rate: int = 6000,
        tier: CleanerTier = CleanerTier.STANDARD,
        areas: Optional[list[dict]] = None,
        **profile_fields,
    ) -> CleanerProfile:
        user = make_user(UserRole.CLEANER, first_name="Ana", last_name="Popescu")
        profile = CleanerProfile(user_id=user.id, tier=tier.value, hourly_rate=hourly_rate, **profile_fields)
        db.add(profile)
        db.flush()
        for area in areas or []:
            db.add(ServiceArea(cleaner_profile_id=profile.id, **area))
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture()
def make_company(db, make_user):
    def _make(company_type: CompanyType = CompanyType.BUSINESS) -> Company:
        admin = make_user(UserRole.COMPANY_ADMIN, first_name="Ion", last_name="Vasile")
        company = Company(admin_user_id=admin.id, company_name="Sparkle SRL", company_type=company_type.value)
        db.add(company)
        db.commit()
        db.refresh(company)
        return company

    return _make


@pytest.fixture()
def booking_payload():
    def _payload(profile: CleanerProfile, **overrides) -> dict:
        payload = {
            "cleanerProfileId": profile.id,
            "serviceType": "general",
            "scheduledDate": "2030-06-01",
            "scheduledTime": "09:00",
            "address": {"streetAddress": "Strada Lipscani 10", "city": "Bucharest"},
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture()
def create_booking(client, auth_headers, booking_payload):
    """POST a booking as the given customer and return the response body."""

    def _create(customer: User, profile: CleanerProfile, **overrides) -> dict:
        response = client.post(
            "/bookings", json=booking_payload(profile, **overrides), headers=auth_headers(customer)
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
