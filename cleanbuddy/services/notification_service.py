"""
Admin Notification Service
Posts operational messages to a Slack incoming webhook, and wraps every
side-channel call so a delivery failure never fails the caller
"""

import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

SLACK_TIMEOUT_SECONDS = 10.0


def notify_safely(description: str, func: Callable[..., Any], *args, **kwargs) -> bool:
    """
    Run a best-effort side-channel call (email, Slack, ...)

    Returns:
        True when the call succeeded, False when it raised (the error is logged)
    """
    try:
        func(*args, **kwargs)
        logger.info(f"✅ {description} sent")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send {description}: {e}")
        return False


class NotificationService:
    """Slack incoming-webhook notifier for platform admins"""

    def __init__(self, webhook_url: Optional[str], timeout: float = SLACK_TIMEOUT_SECONDS):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def post_message(self, text: str, context: Optional[dict[str, str]] = None) -> None:
        if not self.webhook_url:
            raise RuntimeError("Slack webhook not configured")

        payload: dict[str, Any] = {"text": text}
        if context:
            fields = [{"type": "mrkdwn", "text": f"*{key}:* {value}"} for key, value in context.items()]
            payload["blocks"] = [
                {"type": "section", "text": {"type": "mrkdwn", "text": text}},
                {"type": "section", "fields": fields},
            ]

        logger.info(f"💬 Posting Slack notification: {text}")
        response = httpx.post(self.webhook_url, json=payload, timeout=self.timeout)
        if response.status_code >= 400:
            raise RuntimeError(f"Slack webhook returned HTTP {response.status_code}: {response.text}")

    def notify_new_application(self, application_type: str, user_name: str, user_email: str, user_id: str) -> None:
        self.post_message(
            f"New {application_type} application from {user_name} ({user_email})",
            context={"User ID": user_id, "Email": user_email},
        )


class NullNotificationService(NotificationService):
    """Notifier used when no Slack webhook is configured"""

    def __init__(self):
        super().__init__(webhook_url=None)

    def post_message(self, text: str, context: Optional[dict[str, str]] = None) -> None:
        logger.debug(f"📭 Notifications disabled, skipping: {text}")
