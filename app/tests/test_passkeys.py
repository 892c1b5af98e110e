from __future__ import annotations


def test_registration_options_store_challenge(client, db, make_user, auth_headers) -> None:
    user = make_user("buyer", full_name="Buyer One")
    resp = client.get("/api/users/passkey/register-options", headers=auth_headers(user))

    assert resp.status_code == 200
    options = resp.json()
    assert options["rp"]["id"] == "localhost"
    assert options["user"]["name"] == "buyer"
    db.refresh(user)
    assert user.challenge == options["challenge"]


def test_registration_verify_errors(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))

    idle = client.post("/api/users/passkey/register-verify", json={"id": "x"}, headers=headers)
    assert idle.status_code == 400
    assert idle.json()["detail"] == "No registration in progress"

    client.get("/api/users/passkey/register-options", headers=headers)
    bogus = client.post("/api/users/passkey/register-verify", json={"id": "x"}, headers=headers)
    assert bogus.status_code == 400
    assert bogus.json()["detail"] == "Passkey registration failed"


def test_login_options(client, db, make_user) -> None:
    resp = client.post("/api/auth/passkey/login-options", json={})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Username is required"

    make_user("nokey")
    resp = client.post("/api/auth/passkey/login-options", json={"username": "nokey"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Could not generate authentication options"

    user = make_user("haskey", passkey="AQIDBA", passkey_public_key="AQID", passkey_enabled=True)
    resp = client.post("/api/auth/passkey/login-options", json={"username": "haskey"})
    assert resp.status_code == 200
    assert resp.json()["allowCredentials"][0]["id"] == "AQIDBA"
    db.refresh(user)
    assert user.challenge == resp.json()["challenge"]


def test_login_verify_rejects_bad_assertions(client, make_user) -> None:
    assert client.post("/api/auth/passkey/login-verify", json={"username": "ghost"}).status_code == 401

    make_user("haskey", passkey="AQIDBA", passkey_public_key="AQID", passkey_enabled=True)
    client.post("/api/auth/passkey/login-options", json={"username": "haskey"})
    resp = client.post(
        "/api/auth/passkey/login-verify", json={"username": "haskey", "id": "AQIDBA"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Authentication failed"


def test_delete_passkey(client, db, make_user, auth_headers) -> None:
    user = make_user("haskey", passkey="AQIDBA", passkey_public_key="AQID", passkey_enabled=True)
    resp = client.delete("/api/users/passkey", headers=auth_headers(user))

    assert resp.json() == {"message": "Passkey disabled successfully", "passkeyEnabled": False}
    db.refresh(user)
    assert user.passkey is None
    assert user.passkey_enabled is False
