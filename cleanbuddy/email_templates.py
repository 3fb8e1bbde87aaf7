"""
MJML Email Templates
Transactional emails for bookings, applications and cleaner invites
"""

from typing import Optional

from .utils.sanitization import sanitize_string

THEME = {
    "primary": "#14b8a6",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

LOGO_URL = "https://cleanbuddy.ro/logo.png"


def format_bani(amount: int) -> str:
    """Render an amount in bani as RON for display, e.g. 20700 -> 207.00 RON"""
    return f"{amount // 100}.{amount % 100:02d} RON"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-image src="{LOGO_URL}" alt="CleanBuddy" width="140px" padding="0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © CleanBuddy. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmed_template(
    customer_name: str, cleaner_name: str, scheduled_date: str, scheduled_time: str, total_price: int
) -> str:
    content = f"""
    <mj-text>Hi {sanitize_string(customer_name)},</mj-text>
    <mj-text>
      {sanitize_string(cleaner_name)} confirmed your cleaning on <strong>{scheduled_date}</strong> at <strong>{scheduled_time}</strong>.
    </mj-text>
    <mj-text color="{THEME['text_muted']}">Total: {format_bani(total_price)}</mj-text>
    """
    return get_base_template(
        title="Your booking is confirmed",
        preview_text=f"Cleaning confirmed for {scheduled_date}",
        content_sections=content,
    )


def booking_cancelled_template(
    recipient_name: str, scheduled_date: str, scheduled_time: str, reason: Optional[str]
) -> str:
    reason_line = (
        f'<mj-text color="{THEME["text_muted"]}">Reason: {sanitize_string(reason)}</mj-text>' if reason else ""
    )
    content = f"""
    <mj-text>Hi {sanitize_string(recipient_name)},</mj-text>
    <mj-text>
      The cleaning scheduled for <strong>{scheduled_date}</strong> at <strong>{scheduled_time}</strong> has been cancelled.
    </mj-text>
    {reason_line}
    """
    return get_base_template(
        title="Booking cancelled",
        preview_text=f"Booking on {scheduled_date} was cancelled",
        content_sections=content,
    )


def booking_completed_template(customer_name: str, cleaner_name: str, scheduled_date: str) -> str:
    content = f"""
    <mj-text>Hi {sanitize_string(customer_name)},</mj-text>
    <mj-text>
      {sanitize_string(cleaner_name)} has marked your cleaning from <strong>{scheduled_date}</strong> as completed.
      We'd love to hear how it went.
    </mj-text>
    """
    return get_base_template(
        title="Cleaning completed",
        preview_text="How did your cleaning go?",
        content_sections=content,
    )


def application_decision_template(
    user_name: str, approved: bool, application_type: str, reason: Optional[str] = None
) -> str:
    """Approval or rejection notice for an onboarding application"""
    role_label = "cleaner" if application_type == "cleaner" else "company administrator"
    if approved:
        body = f"<mj-text>Your application to join CleanBuddy as a {role_label} has been approved.</mj-text>"
        title = "Application approved"
    else:
        body = f"<mj-text>Unfortunately your application to join CleanBuddy as a {role_label} was not approved.</mj-text>"
        if reason:
            body += f'\n    <mj-text color="{THEME["text_muted"]}">Reason: {sanitize_string(reason)}</mj-text>'
        title = "Application update"

    content = f"""
    <mj-text>Hi {sanitize_string(user_name)},</mj-text>
    {body}
    """
    return get_base_template(title=title, preview_text=title, content_sections=content)


def cleaner_invite_template(company_name: str, invite_url: str, expires_on: str, message: Optional[str]) -> str:
    company_name = sanitize_string(company_name)
    message_line = f"<mj-text><em>{sanitize_string(message)}</em></mj-text>" if message else ""
    content = f"""
    <mj-text>
      <strong>{company_name}</strong> invited you to join their cleaning team on CleanBuddy.
    </mj-text>
    {message_line}
    <mj-text color="{THEME['text_muted']}">This invitation expires on {expires_on}.</mj-text>
    """
    return get_base_template(
        title="You're invited to CleanBuddy",
        preview_text=f"{company_name} invited you to join their team",
        content_sections=content,
        cta_url=invite_url,
        cta_label="Accept Invitation",
    )


def invite_accepted_template(admin_name: str, cleaner_name: str, cleaner_email: str) -> str:
    cleaner_name = sanitize_string(cleaner_name)
    content = f"""
    <mj-text>Hi {sanitize_string(admin_name)},</mj-text>
    <mj-text>{cleaner_name} ({sanitize_string(cleaner_email)}) accepted your invitation and joined your team.</mj-text>
    """
    return get_base_template(
        title="A cleaner joined your team",
        preview_text=f"{cleaner_name} accepted your invitation",
        content_sections=content,
    )
