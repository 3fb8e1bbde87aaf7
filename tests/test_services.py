from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cleanbuddy.config import DEFAULT_PLATFORM_FEE_PERCENTAGE, parse_platform_fee_percentage
from cleanbuddy.email_service import NullMailService
from cleanbuddy.email_templates import (
    application_decision_template,
    booking_cancelled_template,
    cleaner_invite_template,
)
from cleanbuddy.main import create_app
from cleanbuddy.models import User
from cleanbuddy.rate_limiter import check_rate_limit, reset_rate_limits
from cleanbuddy.services.document_storage import (
    MAX_DOCUMENT_SIZE,
    NullDocumentStorage,
    build_document_key,
    validate_document,
)
from cleanbuddy.services.notification_service import notify_safely
from cleanbuddy.shared.validators import intervals_overlap, minutes_to_time, time_to_minutes, window_end_minutes


def test_notify_safely_swallows_failures() -> None:
    def failing() -> None:
        raise RuntimeError("provider down")

    assert notify_safely("test notification", failing) is False
    assert notify_safely("test notification", lambda: None) is True


def test_null_mail_service_skips_sending() -> None:
    assert NullMailService().send_booking_completed("a@example.com", "Maria", "Ana", "2030-06-01") == {}


def test_platform_fee_override_parsing() -> None:
    assert parse_platform_fee_percentage(None) == DEFAULT_PLATFORM_FEE_PERCENTAGE
    assert parse_platform_fee_percentage(" ") == DEFAULT_PLATFORM_FEE_PERCENTAGE
    assert parse_platform_fee_percentage("12.5") == 12.5
    assert parse_platform_fee_percentage("ten") == DEFAULT_PLATFORM_FEE_PERCENTAGE


def test_fixed_window_rate_limit() -> None:
    reset_rate_limits()
    results = [check_rate_limit("test:127.0.0.1", 3, 60)[0] for _ in range(4)]

    assert results == [True, True, True, False]
    assert check_rate_limit("test:10.0.0.1", 3, 60)[0] is True
    reset_rate_limits()


def test_time_helpers() -> None:
    assert time_to_minutes("09:30") == 570
    assert minutes_to_time(570) == "09:30"
    assert minutes_to_time(2000) == "23:59"
    assert window_end_minutes("09:00", 2.5) == 690
    assert window_end_minutes("22:00", 7.5) == 24 * 60
    assert minutes_to_time(window_end_minutes("22:00", 7.5)) == "23:59"
    assert intervals_overlap(540, 720, 660, 780)
    assert not intervals_overlap(540, 720, 720, 840)
    with pytest.raises(ValueError):
        time_to_minutes("9:30")


def test_document_rules() -> None:
    validate_document("passport.PDF", 1024)
    with pytest.raises(ValueError):
        validate_document("passport.exe", 1024)
    with pytest.raises(ValueError):
        validate_document("passport.pdf", MAX_DOCUMENT_SIZE + 1)

    key = build_document_key("usr_1", "Business Registration", "scan.PNG")
    assert key.startswith("applications/usr_1/business-registration-")
    assert key.endswith(".png")


def test_upload_without_storage_is_unavailable(tmp_path, auth_headers) -> None:
    app = create_app(database_url=f"sqlite:///{tmp_path / 'no-storage.db'}", storage_service=NullDocumentStorage())
    with TestClient(app) as client:
        session = app.state.session_factory()
        try:
            user = User(email="no-storage@example.com", role="client")
            session.add(user)
            session.commit()
            response = client.post(
                "/applications/documents",
                data={"documentType": "identity"},
                files={"file": ("id.pdf", b"%PDF", "application/pdf")},
                headers=auth_headers(user),
            )
        finally:
            session.close()

    assert response.status_code == 503
    assert response.json()["detail"] == "storage service not available"


def test_email_templates_escape_user_text() -> None:
    html = cleaner_invite_template(
        "Sparkle <SRL>",
        "https://cleanbuddy.ro/invite/abc",
        "2030-06-08",
        '<a href="https://evil.test">Click to verify</a>',
    )
    assert "<a href=" not in html
    assert "&lt;a href=&quot;https://evil.test&quot;&gt;Click to verify&lt;/a&gt;" in html
    assert "Sparkle &lt;SRL&gt;" in html

    cancelled = booking_cancelled_template("<b>Maria</b>", "2030-06-01", "09:00", "<script>x</script>")
    assert "<script>" not in cancelled
    assert "&lt;b&gt;Maria&lt;/b&gt;" in cancelled

    rejected = application_decision_template("Ana", False, "cleaner", reason="<img src=x>")
    assert "<img" not in rejected
