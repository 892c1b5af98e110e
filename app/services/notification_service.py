"""
Listing Notification Service
Keeps track of connected WebSocket clients and their filters and pushes
new and updated listings to every client whose filters match
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from fastapi import WebSocket

from ..models import Property
from .property_context import property_summary

logger = logging.getLogger(__name__)

NEW_PROPERTY = "newProperty"
PROPERTY_UPDATED = "propertyUpdated"
NUMERIC_FILTERS = ("minPrice", "maxPrice", "bedrooms", "bathrooms")


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


def matches_filters(prop: Property, filters: Optional[dict]) -> bool:
    """True when the listing satisfies every filter the client set"""
    if not filters:
        return True

    location = filters.get("location")
    if location:
        needle = str(location).lower()
        haystack = [prop.address or "", prop.city or "", prop.state or ""]
        if not any(needle in value.lower() for value in haystack):
            return False

    if filters.get("propertyType") and prop.property_type != filters["propertyType"]:
        return False

    min_price = filters.get("minPrice")
    if min_price is not None and prop.price < min_price:
        return False
    max_price = filters.get("maxPrice")
    if max_price is not None and prop.price > max_price:
        return False

    if filters.get("bedrooms") is not None and (prop.bedrooms or 0) < filters["bedrooms"]:
        return False
    if filters.get("bathrooms") is not None and (prop.bathrooms or 0) < filters["bathrooms"]:
        return False

    return True


def clean_filters(filters: dict) -> dict:
    """Coerce numeric filters to numbers; values that are not numeric are dropped"""
    cleaned = dict(filters)
    for key in NUMERIC_FILTERS:
        value = cleaned.get(key)
        if value is None or (isinstance(value, (int, float)) and not isinstance(value, bool)):
            continue
        try:
            cleaned[key] = float(value)
        except (TypeError, ValueError):
            logger.warning(f"⚠️ Dropping non-numeric WebSocket filter {key}={value!r}")
            cleaned.pop(key)
    return cleaned


@dataclass
class ClientConnection:
    websocket: WebSocket
    user_id: Optional[int] = None
    filters: dict = field(default_factory=dict)


class NotificationHub:
    """In-process registry of WebSocket subscribers"""

    def __init__(self):
        self.clients: dict[int, ClientConnection] = {}

    @property
    def connection_count(self) -> int:
        return len(self.clients)

    async def connect(self, websocket: WebSocket) -> ClientConnection:
        await websocket.accept()
        client = ClientConnection(websocket=websocket)
        self.clients[id(websocket)] = client
        logger.info(f"🔌 WebSocket client connected ({self.connection_count} active)")
        await websocket.send_json(
            {
                "type": "connected",
                "payload": {
                    "message": "Connected to real estate notification system",
                    "timestamp": _timestamp(),
                },
            }
        )
        return client

    def disconnect(self, websocket: WebSocket) -> None:
        if self.clients.pop(id(websocket), None) is not None:
            logger.info(f"🔌 WebSocket client disconnected ({self.connection_count} active)")

    async def handle_message(self, client: ClientConnection, raw: str) -> None:
        """Apply one client frame; malformed frames are logged and ignored"""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Error processing WebSocket message: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Ignoring non-object WebSocket message: {raw[:100]}")
            return

        message_type = data.get("type")
        payload = data.get("payload") or {}
        if not isinstance(payload, dict):
            logger.warning(f"⚠️ Ignoring WebSocket message with non-object payload: {raw[:100]}")
            return

        if message_type == "subscribe":
            if payload.get("userId") is not None:
                client.user_id = payload["userId"]
            filters = payload.get("filters")
            if isinstance(filters, dict):
                client.filters = {**client.filters, **clean_filters(filters)}
            logger.info(f"📥 WebSocket client subscribed (user={client.user_id})")
            await client.websocket.send_json(
                {
                    "type": "subscribed",
                    "payload": {
                        "message": "Successfully subscribed to property notifications",
                        "filters": client.filters,
                    },
                }
            )
        elif message_type == "unsubscribe":
            client.filters = {}
            await client.websocket.send_json(
                {
                    "type": "unsubscribed",
                    "payload": {"message": "Successfully unsubscribed from property notifications"},
                }
            )
        elif message_type == "ping":
            await client.websocket.send_json(
                {"type": "pong", "payload": {"timestamp": _timestamp()}}
            )
        else:
            logger.warning(f"⚠️ Unknown WebSocket message type: {message_type}")

    async def notify_property(self, prop: Property, notification_type: str = NEW_PROPERTY) -> int:
        """Send a listing to matching clients. Returns the number of deliveries."""
        message = {
            "type": notification_type,
            "payload": {"property": property_summary(prop), "timestamp": _timestamp()},
        }
        delivered = 0
        for key, client in list(self.clients.items()):
            try:
                if not matches_filters(prop, client.filters):
                    continue
            except Exception as e:
                logger.warning(f"⚠️ Skipping WebSocket client with unusable filters: {e}")
                continue
            try:
                await client.websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"⚠️ Dropping WebSocket client after failed send: {e}")
                self.clients.pop(key, None)

        if delivered:
            logger.info(f"📣 Sent {notification_type} for property {prop.id} to {delivered} client(s)")
        return delivered


# Singleton instance
notification_hub = NotificationHub()
