from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

from app.models import Property
from app.services.notification_service import (
    NEW_PROPERTY,
    PROPERTY_UPDATED,
    NotificationHub,
    clean_filters,
    matches_filters,
)


def _listing(**overrides) -> Property:
    values = {
        "id": 7,
        "title": "Craftsman bungalow",
        "price": 500000,
        "address": "9 Elm St",
        "city": "Seattle",
        "state": "WA",
        "bedrooms": 3,
        "bathrooms": 2.0,
        "square_feet": 1500,
        "property_type": "house",
        "is_premium": False,
        "images": [],
    }
    values.update(overrides)
    return Property(**values)


def _sent(websocket) -> list[dict]:
    return [call.args[0] for call in websocket.send_json.await_args_list]


def test_matches_filters() -> None:
    prop = _listing()
    assert matches_filters(prop, None)
    assert matches_filters(prop, {})
    assert matches_filters(prop, {"location": "seattle", "propertyType": "house"})
    assert matches_filters(prop, {"minPrice": 400000, "maxPrice": 500000, "bedrooms": 3})
    assert not matches_filters(prop, {"location": "Portland"})
    assert not matches_filters(prop, {"propertyType": "condo"})
    assert not matches_filters(prop, {"maxPrice": 499999})
    assert not matches_filters(prop, {"bathrooms": 2.5})


def test_hub_delivers_to_matching_clients_only() -> None:
    hub = NotificationHub()
    seattle_ws, portland_ws = AsyncMock(), AsyncMock()

    async def scenario() -> int:
        seattle = await hub.connect(seattle_ws)
        portland = await hub.connect(portland_ws)
        await hub.handle_message(
            seattle, json.dumps({"type": "subscribe", "payload": {"filters": {"location": "Seattle"}}})
        )
        await hub.handle_message(
            portland, json.dumps({"type": "subscribe", "payload": {"filters": {"location": "Portland"}}})
        )
        return await hub.notify_property(_listing(), PROPERTY_UPDATED)

    assert asyncio.run(scenario()) == 1
    last = _sent(seattle_ws)[-1]
    assert last["type"] == PROPERTY_UPDATED
    assert last["payload"]["property"]["id"] == 7
    assert last["payload"]["property"]["squareFeet"] == 1500
    assert _sent(portland_ws)[-1]["type"] == "subscribed"


def test_hub_drops_clients_that_fail() -> None:
    hub = NotificationHub()
    healthy, broken = AsyncMock(), AsyncMock()

    async def scenario() -> int:
        await hub.connect(healthy)
        await hub.connect(broken)
        broken.send_json.side_effect = RuntimeError("socket closed")
        return await hub.notify_property(_listing(), NEW_PROPERTY)

    assert asyncio.run(scenario()) == 1
    assert hub.connection_count == 1


def test_hub_ignores_malformed_frames() -> None:
    hub = NotificationHub()
    websocket = AsyncMock()

    async def scenario() -> None:
        client = await hub.connect(websocket)
        await hub.handle_message(client, "not json")
        await hub.handle_message(client, json.dumps(["list"]))
        await hub.handle_message(client, json.dumps({"type": "dance"}))

    asyncio.run(scenario())
    assert [m["type"] for m in _sent(websocket)] == ["connected"]


def test_subscribe_coerces_numeric_filters() -> None:
    assert clean_filters({"minPrice": "500000", "bedrooms": "lots", "location": "Seattle"}) == {
        "minPrice": 500000.0,
        "location": "Seattle",
    }

    hub = NotificationHub()
    websocket = AsyncMock()

    async def scenario() -> int:
        client = await hub.connect(websocket)
        await hub.handle_message(
            client, json.dumps({"type": "subscribe", "payload": {"filters": {"maxPrice": "600000"}}})
        )
        return await hub.notify_property(_listing(), NEW_PROPERTY)

    assert asyncio.run(scenario()) == 1
    assert _sent(websocket)[1]["payload"]["filters"] == {"maxPrice": 600000.0}


def test_bad_filters_do_not_block_other_clients() -> None:
    hub = NotificationHub()
    odd_ws, healthy_ws = AsyncMock(), AsyncMock()

    async def scenario() -> int:
        odd = await hub.connect(odd_ws)
        await hub.connect(healthy_ws)
        odd.filters = {"minPrice": "500000"}
        return await hub.notify_property(_listing(), NEW_PROPERTY)

    assert asyncio.run(scenario()) == 1
    assert _sent(healthy_ws)[-1]["type"] == NEW_PROPERTY
    assert [m["type"] for m in _sent(odd_ws)] == ["connected"]
    assert hub.connection_count == 2


def test_non_object_payload_is_ignored() -> None:
    hub = NotificationHub()
    websocket = AsyncMock()

    async def scenario() -> None:
        client = await hub.connect(websocket)
        await hub.handle_message(client, json.dumps({"type": "subscribe", "payload": "x"}))
        await hub.handle_message(client, json.dumps({"type": "subscribe", "payload": [1, 2]}))
        await hub.handle_message(client, json.dumps({"type": "ping"}))

    asyncio.run(scenario())
    assert [m["type"] for m in _sent(websocket)] == ["connected", "pong"]


def test_websocket_survives_bad_payload(client) -> None:
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json()["type"] == "connected"
        ws.send_text(json.dumps({"type": "subscribe", "payload": "x"}))
        ws.send_text(json.dumps({"type": "ping"}))
        assert ws.receive_json()["type"] == "pong"



def test_websocket_endpoint_protocol(client) -> None:
    with client.websocket_connect("/ws") as ws:
        connected = ws.receive_json()
        assert connected["type"] == "connected"
        assert connected["payload"]["message"] == "Connected to real estate notification system"

        ws.send_text(json.dumps({"type": "subscribe", "payload": {"filters": {"minPrice": 100}}}))
        subscribed = ws.receive_json()
        assert subscribed["type"] == "subscribed"
        assert subscribed["payload"]["filters"] == {"minPrice": 100}

        ws.send_text(json.dumps({"type": "subscribe", "payload": {"filters": {"bedrooms": 2}}}))
        assert ws.receive_json()["payload"]["filters"] == {"minPrice": 100, "bedrooms": 2}

        ws.send_text(json.dumps({"type": "ping"}))
        pong = ws.receive_json()
        assert pong["type"] == "pong"
        assert pong["payload"]["timestamp"].endswith("Z")

        ws.send_text(json.dumps({"type": "unsubscribe"}))
        assert ws.receive_json()["type"] == "unsubscribed"
