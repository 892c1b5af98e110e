from __future__ import annotations


def test_plans_are_public(client) -> None:
    plans = client.get("/api/subscription/plans").json()
    assert [p["id"] for p in plans] == ["free", "premium", "enterprise"]
    assert plans[1]["price"] == 19.99
    assert "Unlimited favorites" in plans[1]["features"]


def test_free_user_subscription_view(client, make_user, auth_headers) -> None:
    user = make_user("buyer")
    for path in ("/api/subscription", "/api/user/subscription"):
        data = client.get(path, headers=auth_headers(user)).json()
        assert data["tier"] == "free"
        assert data["status"] == "none"
        assert data["expiresAt"] is None


def test_subscribe_change_and_cancel(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))

    subscribed = client.post("/api/subscription", json={"plan": "Premium"}, headers=headers)
    assert subscribed.status_code == 200
    sub = subscribed.json()["subscription"]
    assert sub["tier"] == "premium"
    assert sub["status"] == "active"
    assert sub["expiresAt"] is not None

    again = client.post("/api/subscription", json={"plan": "premium"}, headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "You are already subscribed to premium"

    changed = client.put("/api/subscription", json={"plan": "enterprise"}, headers=headers)
    assert changed.status_code == 200
    assert changed.json()["subscription"]["tier"] == "enterprise"

    cancelled = client.delete("/api/subscription", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["subscription"]["tier"] == "free"
    assert cancelled.json()["subscription"]["status"] == "canceled"

    nothing = client.delete("/api/subscription", headers=headers)
    assert nothing.status_code == 400
    assert nothing.json()["detail"] == "No active subscription found"


def test_subscribe_rejects_free_and_unknown_plans(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))

    free = client.post("/api/subscription", json={"plan": "free"}, headers=headers)
    assert free.status_code == 400
    assert free.json()["detail"] == "Invalid subscription plan"

    unknown = client.post("/api/subscription", json={"plan": "gold"}, headers=headers)
    assert unknown.status_code == 400
    assert unknown.json()["detail"] == "Invalid subscription plan"


def test_change_plan_requires_active_subscription(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))
    resp = client.put("/api/subscription", json={"plan": "premium"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No active subscription found"


def test_subscription_unlocks_premium_routes(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))
    assert client.get("/api/market/trends", params={"location": "Seattle"}, headers=headers).status_code == 403

    client.post("/api/subscription", json={"plan": "premium"}, headers=headers)
    assert client.get("/api/market/trends", params={"location": "Seattle"}, headers=headers).status_code == 200


def test_profile_view_after_cancel_reports_no_status(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("buyer"))
    client.post("/api/subscription", json={"plan": "premium"}, headers=headers)
    client.delete("/api/subscription", headers=headers)

    profile = client.get("/api/user/subscription", headers=headers).json()
    assert profile["tier"] == "free"
    assert profile["status"] == "none"
    assert profile["expiresAt"] is None

    assert client.get("/api/subscription", headers=headers).json()["status"] == "canceled"
