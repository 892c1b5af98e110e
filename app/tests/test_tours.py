from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from app.domain.tours.service import generate_tour_time_slots

TOUR_DATE = "2030-06-01"


@pytest.fixture
def listing(make_user, make_property):
    agent = make_user("agent", role="agent")
    return agent, make_property(agent)


def _book(client, headers, property_id, time="10:00", **extra):
    body = {"tourDate": TOUR_DATE, "tourTime": time}
    body.update(extra)
    with patch(
        "app.domain.tours.service.send_tour_requested_notification",
        new=AsyncMock(return_value=True),
    ):
        return client.post(f"/api/properties/{property_id}/tours", json=body, headers=headers)


def test_slot_grid_covers_the_working_day() -> None:
    slots = generate_tour_time_slots()
    assert len(slots) == 18
    assert slots[0] == "09:00"
    assert slots[1] == "09:30"
    assert slots[-1] == "17:30"


def test_tour_slots_requires_valid_date(client, listing) -> None:
    _, prop = listing
    missing = client.get(f"/api/properties/{prop.id}/tour-slots")
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Date parameter is required"

    bad = client.get(f"/api/properties/{prop.id}/tour-slots", params={"date": "06/01/2030"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid date format"


def test_booking_takes_slot_and_cancelling_frees_it(
    client, listing, make_user, auth_headers
) -> None:
    agent, prop = listing
    buyer = make_user("buyer")
    headers = auth_headers(buyer)

    resp = _book(client, headers, prop.id, time="10:00", tourType="virtual")
    assert resp.status_code == 201
    tour = resp.json()
    assert tour["status"] == "pending"
    assert tour["agentId"] == agent.id
    assert tour["tourType"] == "virtual"

    slots = client.get(f"/api/properties/{prop.id}/tour-slots", params={"date": TOUR_DATE}).json()
    assert "10:00" not in slots
    assert len(slots) == 17

    cancelled = client.post(f"/api/tours/{tour['id']}/cancel", headers=headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    slots = client.get(f"/api/properties/{prop.id}/tour-slots", params={"date": TOUR_DATE}).json()
    assert "10:00" in slots

    again = client.post(f"/api/tours/{tour['id']}/cancel", headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Tour is already cancelled"


def test_booking_notifies_listing_owner(client, listing, make_user, auth_headers) -> None:
    agent, prop = listing
    buyer = make_user("buyer")
    with patch(
        "app.domain.tours.service.send_tour_requested_notification",
        new=AsyncMock(return_value=True),
    ) as notify:
        client.post(
            f"/api/properties/{prop.id}/tours",
            json={"tourDate": TOUR_DATE, "tourTime": "11:30"},
            headers=auth_headers(buyer),
        )

    notify.assert_awaited_once()
    assert notify.await_args.args[0].id == agent.id
    assert notify.await_args.args[1].id == buyer.id


def test_unavailable_or_malformed_slots(client, listing, make_user, auth_headers) -> None:
    _, prop = listing
    first = auth_headers(make_user("first"))
    second = auth_headers(make_user("second"))

    assert _book(client, first, prop.id, time="14:00").status_code == 201

    taken = _book(client, second, prop.id, time="14:00")
    assert taken.status_code == 400
    assert taken.json()["detail"] == "The selected time slot is not available"

    off_grid = _book(client, second, prop.id, time="14:15")
    assert off_grid.status_code == 400

    assert _book(client, second, prop.id, time="2pm").status_code == 422
    assert _book(client, second, prop.id, duration=5).status_code == 422
    assert _book(client, second, 999).status_code == 404


def test_tour_visibility(client, listing, make_user, auth_headers) -> None:
    agent, prop = listing
    buyer = make_user("buyer")
    stranger = make_user("stranger")
    tour_id = _book(client, auth_headers(buyer), prop.id).json()["id"]

    assert client.get(f"/api/tours/{tour_id}", headers=auth_headers(buyer)).status_code == 200
    assert client.get(f"/api/tours/{tour_id}", headers=auth_headers(agent)).status_code == 200

    denied = client.get(f"/api/tours/{tour_id}", headers=auth_headers(stranger))
    assert denied.status_code == 403
    assert denied.json()["detail"] == "You don't have permission to view this tour"

    assert client.get("/api/tours/999", headers=auth_headers(buyer)).status_code == 404
    assert client.post(f"/api/tours/{tour_id}/cancel", headers=auth_headers(stranger)).status_code == 403


def test_user_and_agent_tour_lists(client, listing, make_user, auth_headers) -> None:
    agent, prop = listing
    buyer = make_user("buyer")
    _book(client, auth_headers(buyer), prop.id, time="09:00")

    mine = client.get("/api/user/tours", headers=auth_headers(buyer)).json()
    assert [t["tourTime"] for t in mine] == ["09:00"]

    assigned = client.get("/api/agent/tours", headers=auth_headers(agent)).json()
    assert [t["userId"] for t in assigned] == [buyer.id]

    denied = client.get("/api/agent/tours", headers=auth_headers(buyer))
    assert denied.status_code == 403
    assert denied.json()["detail"] == "Only agents and admins can access this endpoint"

    listed = client.get(f"/api/properties/{prop.id}/tours", headers=auth_headers(agent)).json()
    assert len(listed) == 1


def test_reschedule_checks_availability(client, listing, make_user, auth_headers) -> None:
    _, prop = listing
    buyer = auth_headers(make_user("buyer"))
    other = auth_headers(make_user("other"))
    tour_id = _book(client, buyer, prop.id, time="10:00").json()["id"]
    _book(client, other, prop.id, time="11:00")

    # Keeping the current slot is allowed
    same = client.put(
        f"/api/tours/{tour_id}",
        json={"tourDate": TOUR_DATE, "tourTime": "10:00", "notes": "Bring the keys"},
        headers=buyer,
    )
    assert same.status_code == 200
    assert same.json()["notes"] == "Bring the keys"

    clash = client.put(
        f"/api/tours/{tour_id}", json={"tourDate": TOUR_DATE, "tourTime": "11:00"}, headers=buyer
    )
    assert clash.status_code == 400

    moved = client.put(
        f"/api/tours/{tour_id}", json={"tourDate": TOUR_DATE, "tourTime": "15:30"}, headers=buyer
    )
    assert moved.status_code == 200
    assert moved.json()["tourTime"] == "15:30"
