from __future__ import annotations

import pytest

from app.models import SuggestedQuestion


@pytest.fixture
def questions(db):
    rows = [
        SuggestedQuestion(question="How are the schools?", category="neighborhood", display_order=2),
        SuggestedQuestion(question="Is parking included?", category="condo-living",
                          property_type="condo", is_general_question=False, display_order=1),
        SuggestedQuestion(question="How big is the yard?", category="outdoor",
                          property_type="house", is_general_question=False, display_order=0),
        SuggestedQuestion(question="Hidden question", category="neighborhood", is_active=False),
    ]
    db.add_all(rows)
    db.commit()
    return rows


def test_active_questions_in_display_order(client, questions) -> None:
    data = client.get("/api/suggested-questions").json()
    assert [q["question"] for q in data] == [
        "How big is the yard?",
        "Is parking included?",
        "How are the schools?",
    ]


def test_filters_keep_general_questions(client, questions) -> None:
    condo = client.get("/api/suggested-questions", params={"propertyType": "condo"}).json()
    assert [q["question"] for q in condo] == ["Is parking included?", "How are the schools?"]

    neighborhood = client.get(
        "/api/suggested-questions", params={"category": "neighborhood"}
    ).json()
    assert [q["question"] for q in neighborhood] == ["How are the schools?"]


def test_clicks_drive_popularity(client, questions) -> None:
    schools = questions[0]
    for _ in range(2):
        assert client.post(f"/api/suggested-questions/{schools.id}/click").status_code == 204

    popular = client.get("/api/suggested-questions/popular").json()
    assert popular[0]["id"] == schools.id
    assert popular[0]["clickCount"] == 2

    assert client.post("/api/suggested-questions/999/click").status_code == 404


def test_admin_crud(client, make_user, auth_headers) -> None:
    admin = auth_headers(make_user("root", role="admin"))
    user = auth_headers(make_user("buyer"))
    body = {"question": "What are the HOA fees?", "category": "costs", "propertyType": "condo"}

    assert client.post("/api/admin/suggested-questions", json=body, headers=user).status_code == 403

    created = client.post("/api/admin/suggested-questions", json=body, headers=admin)
    assert created.status_code == 201
    question_id = created.json()["id"]
    assert created.json()["clickCount"] == 0

    updated = client.put(
        f"/api/admin/suggested-questions/{question_id}",
        json={"isActive": False},
        headers=admin,
    )
    assert updated.json()["isActive"] is False
    assert updated.json()["question"] == "What are the HOA fees?"

    assert client.delete(
        f"/api/admin/suggested-questions/{question_id}", headers=admin
    ).status_code == 204
    missing = client.delete(f"/api/admin/suggested-questions/{question_id}", headers=admin)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Suggested question not found"


def test_update_rejects_null_required_fields(client, questions, make_user, auth_headers) -> None:
    admin = auth_headers(make_user("root", role="admin"))
    question_id = questions[0].id

    for body in ({"question": None}, {"category": None}, {"isActive": None}):
        resp = client.put(f"/api/admin/suggested-questions/{question_id}", json=body, headers=admin)
        assert resp.status_code == 422

    cleared = client.put(
        f"/api/admin/suggested-questions/{question_id}", json={"propertyType": None}, headers=admin
    )
    assert cleared.status_code == 200
    assert cleared.json()["question"] == "How are the schools?"
