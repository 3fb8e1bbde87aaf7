"""
Email Service using Resend
Provides transactional email using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .email_templates import (
    application_decision_template,
    booking_cancelled_template,
    booking_completed_template,
    booking_confirmed_template,
    cleaner_invite_template,
    invite_accepted_template,
)

logger = logging.getLogger(__name__)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise RuntimeError(f"Failed to compile MJML template: {str(e)}") from e


class MailService:
    """Transactional email delivered through Resend"""

    def __init__(self, api_key: Optional[str], from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    def send(self, to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
        """
        Compile and send one email

        Args:
            to: Recipient email(s)
            subject: Email subject line
            mjml_content: MJML template content (will be compiled to HTML)

        Returns:
            Send response dict
        """
        if not self.api_key:
            logger.error("❌ No email service configured - RESEND_API_KEY missing")
            raise RuntimeError("Email service not configured")

        html_content = compile_mjml_to_html(mjml_content)
        recipients = [to] if isinstance(to, str) else to

        resend.api_key = self.api_key
        try:
            logger.info(f"📧 Sending email via Resend to: {recipients}")
            response = resend.Emails.send(
                {
                    "from": self.from_address,
                    "to": recipients,
                    "subject": subject,
                    "html": html_content,
                }
            )
            logger.info(f"✅ Email sent successfully via Resend: {response}")
            return response
        except Exception as e:
            logger.error(f"❌ Email send error to {recipients}: {e}")
            raise RuntimeError(f"Failed to send email: {str(e)}") from e

    # ============================================
    # Pre-built emails for domain events
    # ============================================

    def send_booking_confirmed(
        self,
        to: str,
        customer_name: str,
        cleaner_name: str,
        scheduled_date: str,
        scheduled_time: str,
        total_price: int,
    ) -> dict:
        return self.send(
            to=to,
            subject="Your cleaning is confirmed",
            mjml_content=booking_confirmed_template(
                customer_name, cleaner_name, scheduled_date, scheduled_time, total_price
            ),
        )

    def send_booking_cancelled(
        self, to: str, recipient_name: str, scheduled_date: str, scheduled_time: str, reason: Optional[str]
    ) -> dict:
        return self.send(
            to=to,
            subject="Your booking was cancelled",
            mjml_content=booking_cancelled_template(recipient_name, scheduled_date, scheduled_time, reason),
        )

    def send_booking_completed(self, to: str, customer_name: str, cleaner_name: str, scheduled_date: str) -> dict:
        return self.send(
            to=to,
            subject="Your cleaning is complete",
            mjml_content=booking_completed_template(customer_name, cleaner_name, scheduled_date),
        )

    def send_application_decision(
        self,
        to: str,
        user_name: str,
        approved: bool,
        application_type: str,
        reason: Optional[str] = None,
    ) -> dict:
        subject = "Your application was approved" if approved else "Update on your application"
        return self.send(
            to=to,
            subject=subject,
            mjml_content=application_decision_template(user_name, approved, application_type, reason),
        )

    def send_cleaner_invite(
        self, to: str, company_name: str, invite_url: str, expires_on: str, message: Optional[str]
    ) -> dict:
        return self.send(
            to=to,
            subject=f"{company_name} invited you to CleanBuddy",
            mjml_content=cleaner_invite_template(company_name, invite_url, expires_on, message),
        )

    def send_invite_accepted(self, to: str, admin_name: str, cleaner_name: str, cleaner_email: str) -> dict:
        return self.send(
            to=to,
            subject=f"{cleaner_name} joined your team",
            mjml_content=invite_accepted_template(admin_name, cleaner_name, cleaner_email),
        )


class NullMailService(MailService):
    """Mail capability used when no email provider is configured"""

    def __init__(self):
        super().__init__(api_key=None, from_address="")

    def send(self, to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
        logger.debug(f"📭 Email disabled, skipping '{subject}' to {to}")
        return {}
