"""Plain-data views of listings shared by prompts and notifications"""

from datetime import datetime
from typing import Optional

from ..models import Property


def property_summary(prop: Property) -> dict:
    """Compact listing view pushed to WebSocket subscribers"""
    return {
        "id": prop.id,
        "title": prop.title,
        "price": prop.price,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "squareFeet": prop.square_feet,
        "propertyType": prop.property_type,
        "isPremium": bool(prop.is_premium),
        "images": list(prop.images or []),
    }


def property_prompt_view(prop: Property) -> dict:
    """Detailed listing view for recommendation prompts"""
    features = list(prop.features or [])
    return {
        "id": prop.id,
        "title": prop.title,
        "description": prop.description,
        "price": prop.price,
        "location": {
            "address": prop.address,
            "city": prop.city,
            "state": prop.state,
            "zipCode": prop.zip_code,
            "fullLocation": f"{prop.address}, {prop.city}, {prop.state} {prop.zip_code}",
        },
        "specifications": {
            "bedrooms": prop.bedrooms,
            "bathrooms": prop.bathrooms,
            "squareFeet": prop.square_feet,
            "propertyType": prop.property_type,
            "yearBuilt": prop.year_built,
            "listingType": prop.listing_type,
        },
        "amenities": {
            "features": features,
            "hasParking": "Parking" in features or "Garage" in features,
            "hasPool": "Pool" in features,
            "hasGarden": "Garden" in features or "Backyard" in features,
            "isNewConstruction": bool(
                prop.year_built and datetime.utcnow().year - prop.year_built < 5
            ),
        },
        "financials": {
            "price": prop.price,
            "pricePerSqFt": round(prop.price / prop.square_feet) if prop.square_feet else None,
            "isPremium": bool(prop.is_premium),
        },
        "images": len(prop.images or []),
        "listedDate": prop.created_at.isoformat() if prop.created_at else None,
    }


def _or_unspecified(value) -> str:
    return "Not specified" if value in (None, "") else str(value)


def format_property_context(prop: Optional[Property]) -> str:
    """System-prompt paragraph describing the listing a user is viewing"""
    if prop is None:
        return ""
    return (
        "\nI'm going to give you information about a specific property that the user is viewing:\n"
        f"Property ID: {prop.id}\n"
        f"Title: {prop.title}\n"
        f"Price: ${prop.price:,}\n"
        f"Address: {prop.address}, {prop.city}, {prop.state} {prop.zip_code}\n"
        f"Type: {_or_unspecified(prop.property_type)}\n"
        f"Bedrooms: {_or_unspecified(prop.bedrooms)}\n"
        f"Bathrooms: {_or_unspecified(prop.bathrooms)}\n"
        f"Square Feet: {_or_unspecified(prop.square_feet)}\n"
        f"Year Built: {_or_unspecified(prop.year_built)}\n"
        f"Description: {prop.description}\n\n"
        "When the user asks about this property, use this information to answer their "
        "questions accurately.\n"
    )


def split_data_url(data: str, default_media_type: str) -> tuple[str, str]:
    """Split a data URL into (media_type, base64 payload); bare base64 keeps the default type"""
    if data.startswith("data:") and "," in data:
        header, payload = data.split(",", 1)
        media_type = header[5:].split(";")[0] or default_media_type
        return media_type, payload
    return default_media_type, data
