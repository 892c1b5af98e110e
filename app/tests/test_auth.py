from __future__ import annotations

from unittest.mock import AsyncMock, patch

from app.models import User


def _register(client, **overrides):
    body = {"username": "alice", "password": "correct-horse", "email": "alice@example.com"}
    body.update(overrides)
    return client.post("/api/register", json=body)


def test_register_returns_token_and_user_without_password(client) -> None:
    resp = _register(client, fullName="Alice Doe")

    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["fullName"] == "Alice Doe"
    assert data["user"]["subscriptionTier"] == "free"
    assert "password" not in data["user"]


def test_register_rejects_duplicates(client) -> None:
    assert _register(client).status_code == 201

    same_name = _register(client, email="other@example.com")
    assert same_name.status_code == 400
    assert same_name.json()["detail"] == "Username already exists"

    same_email = _register(client, username="alice2")
    assert same_email.status_code == 400
    assert same_email.json()["detail"] == "Email already exists"


def test_register_requires_credentials(client) -> None:
    resp = _register(client, password=None)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Username and password are required"


def test_register_cannot_self_assign_admin(client) -> None:
    assert _register(client, role="admin").status_code == 422


def test_login_success_and_failure(client) -> None:
    _register(client)

    ok = client.post("/api/login", json={"username": "alice", "password": "correct-horse"})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "alice@example.com"

    bad = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid username or password"


def test_login_is_rate_limited_per_client(client) -> None:
    for _ in range(5):
        resp = client.post("/api/login", json={"username": "ghost", "password": "nope"})
        assert resp.status_code == 401

    blocked = client.post("/api/login", json={"username": "ghost", "password": "nope"})
    assert blocked.status_code == 429
    assert blocked.json()["detail"]["message"] == "Too many attempts. Please try again later."
    assert "Retry-After" in blocked.headers


def test_current_user_requires_valid_token(client, make_user, auth_headers) -> None:
    assert client.get("/api/user").status_code == 401
    assert client.get("/api/user", headers={"Authorization": "Bearer junk"}).status_code == 401

    user = make_user("bob")
    resp = client.get("/api/user", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["username"] == "bob"


def test_logout(client, make_user, auth_headers) -> None:
    user = make_user("bob")
    resp = client.post("/api/logout", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logged out successfully"


def test_update_preferences(client, make_user, auth_headers) -> None:
    user = make_user("bob")
    resp = client.patch(
        "/api/user/preferences",
        json={"preferredLanguage": "es-ES", "phone": "+34 600 123 456"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    assert resp.json()["preferredLanguage"] == "es-ES"

    invalid = client.patch(
        "/api/user/preferences", json={"phone": "12"}, headers=auth_headers(user)
    )
    assert invalid.status_code == 422


def test_firebase_auth_creates_then_reuses_account(client, db) -> None:
    claims = {"user_id": "fb-123", "email": "Carol@Example.com", "name": "Carol"}
    with patch("app.routes.auth.verify_firebase_token", new=AsyncMock(return_value=claims)):
        first = client.post("/api/firebase-auth", json={"idToken": "token"})
        second = client.post("/api/firebase-auth", json={"idToken": "token"})

    assert first.status_code == 200
    assert first.json()["user"]["email"] == "carol@example.com"
    assert second.json()["user"]["id"] == first.json()["user"]["id"]
    assert db.query(User).filter(User.firebase_uid == "fb-123").count() == 1


def test_firebase_auth_links_existing_email(client, db, make_user) -> None:
    existing = make_user("dave", email="dave@example.com")
    claims = {"user_id": "fb-dave", "email": "dave@example.com"}
    with patch("app.routes.auth.verify_firebase_token", new=AsyncMock(return_value=claims)):
        resp = client.post("/api/firebase-auth", json={"idToken": "token"})

    assert resp.json()["user"]["id"] == existing.id
    db.refresh(existing)
    assert existing.firebase_uid == "fb-dave"
