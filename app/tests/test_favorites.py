from __future__ import annotations


def test_add_list_and_remove_favorite(client, make_user, make_property, auth_headers) -> None:
    owner = make_user("owner", role="agent")
    buyer = make_user("buyer")
    headers = auth_headers(buyer)
    older = make_property(owner, title="Older")
    newer = make_property(owner, title="Newer")

    resp = client.post("/api/user/favorites", json={"propertyId": older.id}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["propertyId"] == older.id
    assert resp.json()["userId"] == buyer.id
    client.post("/api/user/favorites", json={"propertyId": newer.id}, headers=headers)

    listed = client.get("/api/user/favorites", headers=headers).json()
    assert [p["id"] for p in listed] == [newer.id, older.id]

    assert client.delete(f"/api/user/favorites/{older.id}", headers=headers).status_code == 204
    missing = client.delete(f"/api/user/favorites/{older.id}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Favorite not found"


def test_favorite_errors(client, make_user, make_property, auth_headers) -> None:
    owner = make_user("owner", role="agent")
    headers = auth_headers(make_user("buyer"))
    prop = make_property(owner)

    unknown = client.post("/api/user/favorites", json={"propertyId": 999}, headers=headers)
    assert unknown.status_code == 404

    client.post("/api/user/favorites", json={"propertyId": prop.id}, headers=headers)
    duplicate = client.post("/api/user/favorites", json={"propertyId": prop.id}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Property already in favorites"


def test_free_tier_is_limited_to_five(client, make_user, make_property, auth_headers) -> None:
    owner = make_user("owner", role="agent")
    headers = auth_headers(make_user("buyer"))
    props = [make_property(owner, title=f"Home {i}") for i in range(6)]

    for prop in props[:5]:
        assert client.post(
            "/api/user/favorites", json={"propertyId": prop.id}, headers=headers
        ).status_code == 201

    blocked = client.post("/api/user/favorites", json={"propertyId": props[5].id}, headers=headers)
    assert blocked.status_code == 403
    assert "limit of 5 favorite properties" in blocked.json()["detail"]


def test_premium_favorites_are_unlimited(client, make_user, make_property, auth_headers) -> None:
    owner = make_user("owner", role="agent")
    headers = auth_headers(make_user("subscriber", tier="premium"))
    props = [make_property(owner, title=f"Home {i}") for i in range(7)]

    for prop in props:
        assert client.post(
            "/api/user/favorites", json={"propertyId": prop.id}, headers=headers
        ).status_code == 201
    assert len(client.get("/api/user/favorites", headers=headers).json()) == 7
