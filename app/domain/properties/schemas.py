"""Property domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import field_validator

from ...models import LISTING_TYPES, PROPERTY_TYPES
from ...schemas import CamelModel

MAX_BULK_UPLOAD = 100


def _check_property_type(v):
    if v is not None and v not in PROPERTY_TYPES:
        raise ValueError(f"propertyType must be one of: {', '.join(PROPERTY_TYPES)}")
    return v


def _check_listing_type(v):
    if v is not None and v not in LISTING_TYPES:
        raise ValueError(f"listingType must be one of: {', '.join(LISTING_TYPES)}")
    return v


def _clean_labels(v):
    if v is None:
        return v
    return [item.strip() for item in v if item and item.strip()]


class PropertyCreate(CamelModel):
    """Schema for creating a new listing"""

    title: str
    description: str
    price: int
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: int
    bathrooms: float
    square_feet: int
    property_type: str
    year_built: Optional[int] = None
    is_premium: bool = False
    features: list[str] = []
    images: list[str] = []
    lot_size: Optional[float] = None
    garage_spaces: Optional[int] = None
    listing_type: str = "sale"
    location_score: Optional[int] = None
    neighborhood_id: Optional[int] = None

    @field_validator("title", "description", "address", "city", "state", "zip_code")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("price", "square_feet")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be greater than 0")
        return v

    @field_validator("bedrooms", "bathrooms")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Value cannot be negative")
        return v

    @field_validator("year_built")
    @classmethod
    def validate_year_built(cls, v):
        if v is not None and not 1700 <= v <= datetime.utcnow().year + 5:
            raise ValueError("yearBuilt is out of range")
        return v

    @field_validator("property_type")
    @classmethod
    def validate_property_type(cls, v):
        return _check_property_type(v)

    @field_validator("listing_type")
    @classmethod
    def validate_listing_type(cls, v):
        return _check_listing_type(v)

    @field_validator("features", "images")
    @classmethod
    def validate_labels(cls, v):
        return _clean_labels(v)


class PropertyUpdate(CamelModel):
    """Partial listing update; only fields present in the body are applied"""

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    square_feet: Optional[int] = None
    property_type: Optional[str] = None
    year_built: Optional[int] = None
    is_premium: Optional[bool] = None
    features: Optional[list[str]] = None
    images: Optional[list[str]] = None
    lot_size: Optional[float] = None
    garage_spaces: Optional[int] = None
    listing_type: Optional[str] = None
    location_score: Optional[int] = None
    neighborhood_id: Optional[int] = None

    @field_validator("price", "square_feet")
    @classmethod
    def validate_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Value must be greater than 0")
        return v

    @field_validator("property_type")
    @classmethod
    def validate_property_type(cls, v):
        return _check_property_type(v)

    @field_validator("listing_type")
    @classmethod
    def validate_listing_type(cls, v):
        return _check_listing_type(v)

    @field_validator("features", "images")
    @classmethod
    def validate_labels(cls, v):
        return _clean_labels(v)


class PropertyResponse(CamelModel):
    id: int
    title: str
    description: str
    price: int
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: int
    bathrooms: float
    square_feet: int
    property_type: str
    year_built: Optional[int] = None
    is_premium: bool
    features: Optional[list[str]] = None
    images: Optional[list[str]] = None
    lot_size: Optional[float] = None
    garage_spaces: Optional[int] = None
    listing_type: str
    location_score: Optional[int] = None
    neighborhood_id: Optional[int] = None
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PropertySearchRequest(CamelModel):
    location: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    features: Optional[list[str]] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    min_sqft: Optional[int] = None
    max_sqft: Optional[int] = None
    min_year_built: Optional[int] = None
    max_year_built: Optional[int] = None
    search_type: Literal["text", "image", "audio"] = "text"
    image_data: Optional[str] = None
    audio_data: Optional[str] = None
    multimodal_query: Optional[str] = None

    @field_validator("property_type")
    @classmethod
    def validate_property_type(cls, v):
        return _check_property_type(v)

    def history_params(self) -> dict[str, Any]:
        """camelCase search parameters without the raw media payloads"""
        return self.model_dump(
            by_alias=True, exclude_none=True, exclude={"image_data", "audio_data"}
        )


class RecommendationResponse(CamelModel):
    property: PropertyResponse
    reason: str


class PersonalizedDescriptionResponse(CamelModel):
    personalized_description: str


class BulkUploadRequest(CamelModel):
    properties: list[dict[str, Any]]


class BulkUploadError(CamelModel):
    property: Any
    error: str


class BulkUploadCreated(CamelModel):
    id: int
    title: str


class BulkUploadResponse(CamelModel):
    successful: int
    failed: int
    errors: list[BulkUploadError]
    created: list[BulkUploadCreated]
