"""
Email Service using Resend
Templates are written in MJML and compiled to HTML before sending
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import new_message_notification_template, tour_requested_template
from .security_utils import sanitize_text

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY

MESSAGE_PREVIEW_LENGTH = 150


def is_email_configured() -> bool:
    return bool(RESEND_API_KEY)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a mapping with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not is_email_configured():
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    recipients = [to] if isinstance(to, str) else to
    html_content = compile_mjml_to_html(mjml_content)

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Notification emails
# ============================================


async def send_new_message_notification(recipient, message, sender) -> bool:
    """
    Email a user that they received a message.
    Returns False instead of raising so callers can ignore delivery problems.
    """
    if not is_email_configured():
        logger.warning("⚠️ Email notification not sent: RESEND_API_KEY not configured")
        return False

    sender_name = sanitize_text(sender.full_name or sender.username)
    content = sanitize_text(message.content)
    if len(content) > MESSAGE_PREVIEW_LENGTH:
        content = content[:MESSAGE_PREVIEW_LENGTH] + "..."

    try:
        await send_email(
            to=recipient.email,
            subject=f"Inmobi: New message from {sender_name}",
            mjml_content=new_message_notification_template(
                recipient_name=sanitize_text(recipient.full_name or recipient.username),
                sender_name=sender_name,
                sender_role=sender.role,
                subject=sanitize_text(message.subject),
                content_preview=content,
            ),
        )
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send message notification to {recipient.email}: {e}")
        return False


async def send_tour_requested_notification(agent, requester, property_, tour) -> bool:
    """Email the listing agent about a new tour request"""
    if not is_email_configured() or not agent:
        return False

    try:
        await send_email(
            to=agent.email,
            subject=f"Inmobi: Tour requested for {sanitize_text(property_.title)}",
            mjml_content=tour_requested_template(
                agent_name=sanitize_text(agent.full_name or agent.username),
                requester_name=sanitize_text(requester.full_name or requester.username),
                property_title=sanitize_text(property_.title),
                tour_date=tour.tour_date.isoformat(),
                tour_time=tour.tour_time,
                tour_type=tour.tour_type,
            ),
        )
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send tour notification to {agent.email}: {e}")
        return False
