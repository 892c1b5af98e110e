"""
MJML Email Templates
Notification emails compiled from MJML for cross-client rendering
"""

from datetime import datetime
from typing import Optional

from .config import FRONTEND_URL

THEME = {
    "primary": "#3b82f6",
    "header_bg": "#131c28",
    "background": "#f5f5f5",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#777777",
    "border": "#e0e0e0",
}

SENDER_ROLE_LABELS = {"agent": "Real Estate Agent", "admin": "Administrator", "user": "User"}


def get_sender_role_display(role: Optional[str]) -> str:
    return SENDER_ROLE_LABELS.get(role or "user", "User")


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
        <mj-section background-color="#ffffff" padding="0 20px 30px 20px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="bold"
              border-radius="4px"
              padding="12px 24px">
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
          <mj-all font-family="Arial, sans-serif" />
          <mj-text font-size="15px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}" width="600px">
        <mj-section background-color="{THEME['header_bg']}" padding="20px">
          <mj-column>
            <mj-text align="center" font-size="28px" font-weight="bold" color="#ffffff" padding="0">
              Inmobi
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="20px" border="1px solid {THEME['border']}">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="15px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0">
              &copy; {datetime.utcnow().year} Inmobi. All rights reserved.
            </mj-text>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="8px 0 0 0">
              This is an automated message, please do not reply directly to this email.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def new_message_notification_template(
    recipient_name: str,
    sender_name: str,
    sender_role: Optional[str],
    subject: str,
    content_preview: str,
) -> str:
    """Notification that a user received a new message (inputs must already be sanitized)"""
    content = f"""
    <mj-text>Hello {recipient_name},</mj-text>
    <mj-text>
      You have received a new message from <strong>{sender_name}</strong>
      ({get_sender_role_display(sender_role)}).
    </mj-text>
    <mj-text container-background-color="{THEME['background']}" padding="15px"
             border-left="4px solid {THEME['header_bg']}">
      <strong>Subject: {subject}</strong><br/>
      {content_preview}
    </mj-text>
    <mj-text>Please log in to your account to view and respond to this message.</mj-text>
    """

    return get_base_template(
        title=f"New message from {sender_name}",
        preview_text=subject,
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/dashboard?tab=messages",
        cta_label="View Message",
    )


def tour_requested_template(
    agent_name: str,
    requester_name: str,
    property_title: str,
    tour_date: str,
    tour_time: str,
    tour_type: str,
) -> str:
    """Notification to the listing agent that a tour was requested"""
    content = f"""
    <mj-text>Hello {agent_name},</mj-text>
    <mj-text>
      <strong>{requester_name}</strong> requested a {tour_type} tour of
      <strong>{property_title}</strong> on {tour_date} at {tour_time}.
    </mj-text>
    <mj-text>Review the request from your agent dashboard.</mj-text>
    """

    return get_base_template(
        title="New tour request",
        preview_text=f"{property_title} on {tour_date} at {tour_time}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/agent/dashboard?tab=tours",
        cta_label="View Tour Requests",
    )
