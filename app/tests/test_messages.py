from __future__ import annotations

from unittest.mock import AsyncMock, patch


def _send(client, headers, **body):
    with patch(
        "app.routes.messages.send_new_message_notification", new=AsyncMock(return_value=True)
    ) as notify:
        resp = client.post("/api/messages", json=body, headers=headers)
    return resp, notify


def test_send_message_notifies_recipient(client, make_user, make_property, auth_headers) -> None:
    agent = make_user("agent", role="agent")
    buyer = make_user("buyer")
    prop = make_property(agent)

    resp, notify = _send(
        client,
        auth_headers(buyer),
        recipientId=agent.id,
        propertyId=prop.id,
        subject=" Viewing ",
        content="Is Saturday possible?",
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "unread"
    assert data["subject"] == "Viewing"
    assert data["senderId"] == buyer.id
    notify.assert_awaited_once()
    assert notify.await_args.args[0].id == agent.id


def test_send_message_validation(client, make_user, auth_headers) -> None:
    buyer = make_user("buyer")
    agent = make_user("agent", role="agent")
    headers = auth_headers(buyer)

    resp, notify = _send(client, headers, recipientId=999, subject="Hi", content="Hello")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Recipient not found"
    notify.assert_not_awaited()

    resp, _ = _send(
        client, headers, recipientId=agent.id, propertyId=999, subject="Hi", content="Hello"
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Property not found"

    resp, _ = _send(client, headers, recipientId=agent.id, subject="  ", content="Hello")
    assert resp.status_code == 422


def test_inbox_and_outbox(client, make_user, auth_headers) -> None:
    buyer = make_user("buyer")
    agent = make_user("agent", role="agent")
    _send(client, auth_headers(buyer), recipientId=agent.id, subject="First", content="One")
    _send(client, auth_headers(buyer), recipientId=agent.id, subject="Second", content="Two")

    inbox = client.get("/api/user/messages", headers=auth_headers(agent)).json()
    assert [m["subject"] for m in inbox] == ["Second", "First"]

    outbox = client.get(
        "/api/user/messages", params={"role": "sent"}, headers=auth_headers(buyer)
    ).json()
    assert len(outbox) == 2
    assert client.get("/api/user/messages", headers=auth_headers(buyer)).json() == []


def test_only_recipient_updates_status(client, make_user, auth_headers) -> None:
    buyer = make_user("buyer")
    agent = make_user("agent", role="agent")
    resp, _ = _send(client, auth_headers(buyer), recipientId=agent.id, subject="Hi", content="Yo")
    message_id = resp.json()["id"]

    denied = client.patch(
        f"/api/messages/{message_id}/status", json={"status": "read"}, headers=auth_headers(buyer)
    )
    assert denied.status_code == 403

    invalid = client.patch(
        f"/api/messages/{message_id}/status", json={"status": "unread"}, headers=auth_headers(agent)
    )
    assert invalid.status_code == 400

    missing = client.patch(
        "/api/messages/999/status", json={"status": "read"}, headers=auth_headers(agent)
    )
    assert missing.status_code == 404

    ok = client.patch(
        f"/api/messages/{message_id}/status", json={"status": "read"}, headers=auth_headers(agent)
    )
    assert ok.status_code == 200
    assert ok.json()["status"] == "read"
