from __future__ import annotations

from app.models import Neighborhood


def _neighborhood(name: str, rank) -> Neighborhood:
    return Neighborhood(
        name=name, city="Seattle", state="WA", zip_code="98101",
        latitude=47.6, longitude=-122.3, overall_score=80, rank=rank,
    )


def test_ranked_first_then_unranked(client, db) -> None:
    db.add_all([_neighborhood("Unranked", None), _neighborhood("Second", 2), _neighborhood("First", 1)])
    db.commit()

    data = client.get("/api/neighborhoods").json()
    assert [n["name"] for n in data] == ["First", "Second", "Unranked"]
    assert data[0]["overallScore"] == 80

    assert len(client.get("/api/neighborhoods", params={"limit": 1}).json()) == 1


def test_get_neighborhood(client, db) -> None:
    hood = _neighborhood("Capitol Hill", 3)
    db.add(hood)
    db.commit()

    assert client.get(f"/api/neighborhoods/{hood.id}").json()["name"] == "Capitol Hill"
    missing = client.get("/api/neighborhoods/999")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Neighborhood not found"
