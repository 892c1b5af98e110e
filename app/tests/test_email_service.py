from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import patch

from app.email_service import send_new_message_notification


def _people():
    recipient = SimpleNamespace(email="agent@example.com", full_name="Ana Agent", username="ana", role="agent")
    sender = SimpleNamespace(email="bob@example.com", full_name=None, username="bob", role="user")
    message = SimpleNamespace(subject="Viewing", content="<b>Hello</b> " + "a" * 200)
    return recipient, sender, message


def test_message_notification_is_skipped_without_api_key() -> None:
    recipient, sender, message = _people()
    with patch("app.email_service.resend.Emails.send") as send:
        assert asyncio.run(send_new_message_notification(recipient, message, sender)) is False
    send.assert_not_called()


def test_message_notification_sends_sanitized_preview() -> None:
    recipient, sender, message = _people()
    with patch("app.email_service.RESEND_API_KEY", "re_test"), patch(
        "app.email_service.compile_mjml_to_html", return_value="<html></html>"
    ) as compile_html, patch(
        "app.email_service.resend.Emails.send", return_value={"id": "email-1"}
    ) as send:
        assert asyncio.run(send_new_message_notification(recipient, message, sender)) is True

    sent = send.call_args.args[0]
    assert sent["to"] == ["agent@example.com"]
    assert sent["subject"] == "Inmobi: New message from bob"
    assert sent["html"] == "<html></html>"

    mjml = compile_html.call_args.args[0]
    assert "<b>Hello" not in mjml
    assert "Hello " + "a" * 144 + "..." in mjml


def test_message_notification_swallows_provider_errors() -> None:
    recipient, sender, message = _people()
    with patch("app.email_service.RESEND_API_KEY", "re_test"), patch(
        "app.email_service.compile_mjml_to_html", return_value="<html></html>"
    ), patch("app.email_service.resend.Emails.send", side_effect=RuntimeError("rate limited")):
        assert asyncio.run(send_new_message_notification(recipient, message, sender)) is False
