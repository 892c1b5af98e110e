from __future__ import annotations


def test_draft_lifecycle(client, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("agent", role="agent"))

    created = client.post("/api/drafts", json={"formData": {"title": "Loft", "price": 1}}, headers=headers)
    assert created.status_code == 201
    draft = created.json()
    assert draft["name"] == "Loft"

    unnamed = client.post("/api/drafts", json={"formData": {}}, headers=headers).json()
    assert unnamed["name"] == "Untitled draft"

    updated = client.put(
        f"/api/drafts/{draft['id']}", json={"formData": {"title": "Loft", "price": 2}}, headers=headers
    )
    assert updated.json()["formData"]["price"] == 2

    listed = client.get("/api/drafts", headers=headers).json()
    assert listed[0]["id"] == draft["id"]
    assert len(listed) == 2

    assert client.delete(f"/api/drafts/{draft['id']}", headers=headers).status_code == 204
    missing = client.get(f"/api/drafts/{draft['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Draft not found"


def test_drafts_are_private(client, make_user, auth_headers) -> None:
    owner = auth_headers(make_user("owner", role="agent"))
    other = auth_headers(make_user("other", role="agent"))
    draft_id = client.post("/api/drafts", json={"formData": {"title": "Mine"}}, headers=owner).json()["id"]

    assert client.get(f"/api/drafts/{draft_id}", headers=other).status_code == 404
    assert client.delete(f"/api/drafts/{draft_id}", headers=other).status_code == 404
    assert client.get("/api/drafts", headers=other).json() == []
